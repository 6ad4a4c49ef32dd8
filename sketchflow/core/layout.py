"""
Layout for compiled DSL nodes.

Nodes are placed in a single row (horizontal) or column (vertical) in parse
order. Because every node sits on its own slot along one axis, no overlap
resolution is needed however long the chain gets.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .dsl import NodeShape, ParsedNode


# Default layout parameters
DEFAULT_START_X = 100
DEFAULT_START_Y = 100
DEFAULT_SPACING = 100
SLOT_WIDTH = 150
SLOT_HEIGHT = 80

# Shape sizes (width, height); text-only nodes are sized from their label later
SHAPE_SIZES: dict[NodeShape, tuple[float, float]] = {
    NodeShape.RECTANGLE: (150, 60),
    NodeShape.ELLIPSE: (150, 60),
    NodeShape.DIAMOND: (120, 80),
}


class Direction(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    @classmethod
    def parse(cls, value: "str | Direction") -> "Direction":
        """Accept "horizontal"/"h" or "vertical"/"v" in any case."""
        if isinstance(value, Direction):
            return value
        normalized = value.strip().lower()
        if normalized in ("horizontal", "h"):
            return cls.HORIZONTAL
        if normalized in ("vertical", "v"):
            return cls.VERTICAL
        raise ValueError(f"Invalid direction '{value}', must be 'horizontal' or 'vertical'")


@dataclass
class PlacedNode:
    """A parsed node with its assigned slot."""
    node: ParsedNode
    index: int
    x: float
    y: float
    width: Optional[float] = None
    height: Optional[float] = None

    @property
    def has_box(self) -> bool:
        return self.width is not None


def linear_layout(
    nodes: list[ParsedNode],
    direction: "str | Direction" = Direction.HORIZONTAL,
    spacing: float = DEFAULT_SPACING,
    start_x: float = DEFAULT_START_X,
    start_y: float = DEFAULT_START_Y,
) -> list[PlacedNode]:
    """
    Place nodes one after another along a single axis.

    Horizontal: node i at (start_x + i * (150 + spacing), start_y)
    Vertical:   node i at (start_x, start_y + i * (80 + spacing))

    Args:
        nodes: Parsed nodes in order
        direction: "horizontal"/"h" or "vertical"/"v"
        spacing: Gap added to each slot
        start_x: X coordinate of first node
        start_y: Y coordinate of first node

    Returns:
        One PlacedNode per input node, same order
    """
    direction = Direction.parse(direction)
    placed: list[PlacedNode] = []

    for i, node in enumerate(nodes):
        if direction == Direction.VERTICAL:
            x = start_x
            y = start_y + i * (SLOT_HEIGHT + spacing)
        else:
            x = start_x + i * (SLOT_WIDTH + spacing)
            y = start_y

        size = SHAPE_SIZES.get(node.shape)
        width, height = size if size else (None, None)
        placed.append(PlacedNode(node=node, index=i, x=x, y=y, width=width, height=height))

    return placed
