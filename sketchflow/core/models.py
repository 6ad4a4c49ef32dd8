"""
Core data models for diagram documents.

These models define the canonical schema for Excalidraw-compatible documents:
- Elements (shapes, text, connectors, freehand strokes) with visual properties
- Bindings between connectors and the shapes they touch
- The document envelope with its app state

Field Naming Convention:
- Python attributes are snake_case (`stroke_color`, `bound_elements`)
- JSON serialization outputs the camelCase wire names (`strokeColor`, `boundElements`)
- Both spellings are accepted on input
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .ids import generate_seed, generate_version_nonce, timestamp_ms


class ElementType(str, Enum):
    """Element types the factory knows how to build."""
    RECTANGLE = "rectangle"
    ELLIPSE = "ellipse"
    DIAMOND = "diamond"
    TEXT = "text"
    LINE = "line"
    ARROW = "arrow"
    FREEDRAW = "freedraw"


class FillStyle(str, Enum):
    SOLID = "solid"
    HACHURE = "hachure"
    CROSS_HATCH = "cross-hatch"
    ZIGZAG = "zigzag"


class StrokeStyle(str, Enum):
    SOLID = "solid"
    DASHED = "dashed"
    DOTTED = "dotted"


class TextAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class VerticalAlign(str, Enum):
    TOP = "top"
    MIDDLE = "middle"
    BOTTOM = "bottom"


SHAPE_TYPES = (ElementType.RECTANGLE.value, ElementType.ELLIPSE.value, ElementType.DIAMOND.value)
LINEAR_TYPES = (ElementType.LINE.value, ElementType.ARROW.value)

DOCUMENT_TYPE = "excalidraw"
DOCUMENT_VERSION = 2

Point = tuple[float, float]


class WireModel(BaseModel):
    """Base for models serialized with camelCase keys."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict with wire field names."""
        return self.model_dump(by_alias=True, mode="json")


class Binding(WireModel):
    """One end of a connector attached to a shape."""
    element_id: str
    focus: float = 0
    gap: float = 1


class BoundElement(WireModel):
    """Back-reference from a shape to a connector bound to it."""
    id: str
    type: str


class Roundness(WireModel):
    type: int = 3
    value: Optional[float] = None

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class Element(WireModel):
    """
    A single element of a diagram document.

    Unknown fields are kept as extras so that documents containing element
    types this package never creates (images, frames, ...) survive a
    load/save round-trip untouched.
    """
    model_config = ConfigDict(extra="allow")

    id: str
    type: str
    x: float
    y: float
    width: float = 100
    height: float = 100
    angle: float = 0
    stroke_color: str = "#1e1e1e"
    background_color: str = "transparent"
    fill_style: str = FillStyle.SOLID.value
    stroke_width: float = 2
    stroke_style: str = StrokeStyle.SOLID.value
    roughness: float = 1
    opacity: float = 100
    group_ids: list[str] = Field(default_factory=list)
    frame_id: Optional[str] = None
    roundness: Optional[Roundness] = None
    seed: int = Field(default_factory=generate_seed)
    version: int = 1
    version_nonce: int = Field(default_factory=generate_version_nonce)
    is_deleted: bool = False
    bound_elements: Optional[list[BoundElement]] = None
    updated: int = Field(default_factory=timestamp_ms)
    link: Optional[str] = None
    locked: bool = False

    def center(self) -> Point:
        """Get the center point of the element's bounding box."""
        return (self.x + self.width / 2, self.y + self.height / 2)

    def bounds(self) -> tuple[float, float, float, float]:
        """Get the bounding box (x, y, right, bottom)."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    def to_json_dict(self) -> dict:
        data = self.model_dump(by_alias=True, mode="json")
        if self.roundness is not None:
            data["roundness"] = self.roundness.to_json_dict()
        return data


class TextElement(Element):
    text: str
    font_size: float = 20
    font_family: int = 1
    text_align: str = TextAlign.LEFT.value
    vertical_align: str = VerticalAlign.TOP.value
    baseline: float = 20
    container_id: Optional[str] = None
    original_text: str = ""
    line_height: float = 1.25


class LinearElement(Element):
    """A line or arrow; `points` are relative to (x, y)."""
    points: list[Point]
    start_binding: Optional[Binding] = None
    end_binding: Optional[Binding] = None
    last_committed_point: Optional[Point] = None
    start_arrowhead: Optional[str] = None
    end_arrowhead: Optional[str] = None


class FreeDrawElement(Element):
    points: list[Point]
    pressures: list[float] = Field(default_factory=list)
    simulate_pressure: bool = False


ELEMENT_CLASSES: dict[str, type[Element]] = {
    ElementType.TEXT.value: TextElement,
    ElementType.LINE.value: LinearElement,
    ElementType.ARROW.value: LinearElement,
    ElementType.FREEDRAW.value: FreeDrawElement,
}


def element_from_json_dict(data: dict) -> Element:
    """Build the element model matching `data["type"]`."""
    kind = data.get("type") if isinstance(data, dict) else None
    cls = ELEMENT_CLASSES.get(kind, Element) if isinstance(kind, str) else Element
    return cls.model_validate(data)


class AppState(WireModel):
    """View settings stored alongside the elements."""
    model_config = ConfigDict(extra="allow")

    grid_size: Optional[int] = None
    view_background_color: str = "#ffffff"


class DiagramDocument(BaseModel):
    """
    The complete diagram document.
    This is what gets saved to/loaded from .excalidraw files.
    """
    type: str = DOCUMENT_TYPE
    version: int = DOCUMENT_VERSION
    source: str = "sketchflow"
    elements: list[Element] = Field(default_factory=list)
    app_state: AppState = Field(default_factory=AppState)
    files: dict[str, Any] = Field(default_factory=dict)

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict with proper field names."""
        return {
            "type": self.type,
            "version": self.version,
            "source": self.source,
            "elements": [el.to_json_dict() for el in self.elements],
            "appState": self.app_state.to_json_dict(),
            "files": self.files,
        }

    @classmethod
    def from_json_dict(cls, data: dict) -> "DiagramDocument":
        """Create a document from a JSON dict."""
        return cls(
            type=data.get("type", DOCUMENT_TYPE),
            version=data.get("version", DOCUMENT_VERSION),
            source=data.get("source", "sketchflow"),
            elements=[element_from_json_dict(el) for el in data.get("elements", [])],
            app_state=AppState.model_validate(data.get("appState") or {}),
            files=data.get("files") or {},
        )

    def get_element(self, element_id: str) -> Optional[Element]:
        """Get an element by ID (O(n))."""
        for element in self.elements:
            if element.id == element_id:
                return element
        return None

    def replace_element(self, element: Element) -> None:
        """Swap in an updated copy of an element, matched by ID."""
        for i, existing in enumerate(self.elements):
            if existing.id == element.id:
                self.elements[i] = element
                return
        raise KeyError(element.id)
