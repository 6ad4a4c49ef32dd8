"""
Document analysis - Summaries and lookups over diagram elements.

Provides helpers used by the CLI and the API to describe a document and to
find elements by ID or ID pattern.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models import DiagramDocument, Element


@dataclass
class Bounds:
    """Axis-aligned box enclosing a set of elements."""
    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass
class DocumentSummary:
    """Statistics about a document's live (non-deleted) elements."""
    version: int
    source: str
    element_count: int
    element_types: dict[str, int]
    bounds: Bounds
    grid_size: Optional[int]
    background_color: str

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "source": self.source,
            "elementCount": self.element_count,
            "elementTypes": self.element_types,
            "bounds": self.bounds.to_dict(),
            "appState": {
                "gridSize": self.grid_size,
                "viewBackgroundColor": self.background_color,
            },
        }


def calculate_bounds(elements: list["Element"]) -> Bounds:
    """Bounding box of all elements; all zeros for an empty list."""
    if not elements:
        return Bounds()

    min_x = min(el.x for el in elements)
    min_y = min(el.y for el in elements)
    max_x = max(el.x + el.width for el in elements)
    max_y = max(el.y + el.height for el in elements)
    return Bounds(x=min_x, y=min_y, width=max_x - min_x, height=max_y - min_y)


def count_elements_by_type(elements: list["Element"]) -> dict[str, int]:
    """Count elements per type, in first-seen order."""
    counts: dict[str, int] = defaultdict(int)
    for el in elements:
        counts[el.type] += 1
    return dict(counts)


def summarize_document(document: "DiagramDocument") -> DocumentSummary:
    """
    Summarize a document.

    Deleted elements are ignored.

    Args:
        document: The document to analyze

    Returns:
        DocumentSummary
    """
    active = [el for el in document.elements if not el.is_deleted]
    return DocumentSummary(
        version=document.version,
        source=document.source,
        element_count=len(active),
        element_types=count_elements_by_type(active),
        bounds=calculate_bounds(active),
        grid_size=document.app_state.grid_size,
        background_color=document.app_state.view_background_color,
    )


def match_id(element_id: str, pattern: str) -> bool:
    """
    Match an element ID against a pattern with `*` at either end.

    "*" matches everything, "ab*" is a prefix, "*ab" a suffix and "*ab*"
    a substring match; anything else must match exactly.
    """
    if pattern == "*":
        return True
    if pattern.startswith("*") and pattern.endswith("*"):
        return pattern[1:-1] in element_id
    if pattern.startswith("*"):
        return element_id.endswith(pattern[1:])
    if pattern.endswith("*"):
        return element_id.startswith(pattern[:-1])
    return element_id == pattern


def find_element(elements: list["Element"], id_or_prefix: str) -> Optional["Element"]:
    """First element whose ID equals or starts with `id_or_prefix`."""
    for el in elements:
        if el.id == id_or_prefix:
            return el
    for el in elements:
        if el.id.startswith(id_or_prefix):
            return el
    return None
