"""Tests for linear layout of parsed nodes."""
from __future__ import annotations

import pytest

from sketchflow.core.dsl import NodeShape, ParsedNode
from sketchflow.core.layout import (
    DEFAULT_SPACING,
    SLOT_HEIGHT,
    SLOT_WIDTH,
    Direction,
    linear_layout,
)


def _nodes(*shapes):
    return [ParsedNode(shape, f"n{i}") for i, shape in enumerate(shapes)]


class TestDirection:
    @pytest.mark.parametrize("value, expected", [
        ("horizontal", Direction.HORIZONTAL),
        ("h", Direction.HORIZONTAL),
        ("H", Direction.HORIZONTAL),
        ("vertical", Direction.VERTICAL),
        ("v", Direction.VERTICAL),
        (" Vertical ", Direction.VERTICAL),
        (Direction.VERTICAL, Direction.VERTICAL),
    ])
    def test_parse(self, value, expected):
        assert Direction.parse(value) == expected

    def test_invalid(self):
        with pytest.raises(ValueError, match="Invalid direction"):
            Direction.parse("diagonal")


class TestLinearLayout:
    def test_horizontal_positions(self):
        placed = linear_layout(_nodes(NodeShape.RECTANGLE, NodeShape.ELLIPSE, NodeShape.DIAMOND))

        assert [(p.x, p.y) for p in placed] == [
            (100, 100),
            (100 + SLOT_WIDTH + DEFAULT_SPACING, 100),
            (100 + 2 * (SLOT_WIDTH + DEFAULT_SPACING), 100),
        ]

    def test_vertical_positions(self):
        placed = linear_layout(_nodes(NodeShape.RECTANGLE, NodeShape.RECTANGLE), "v", spacing=40)

        assert [(p.x, p.y) for p in placed] == [(100, 100), (100, 100 + SLOT_HEIGHT + 40)]

    def test_custom_origin(self):
        placed = linear_layout(_nodes(NodeShape.RECTANGLE), start_x=0, start_y=-50)

        assert (placed[0].x, placed[0].y) == (0, -50)

    def test_shape_sizes(self):
        placed = linear_layout(_nodes(NodeShape.RECTANGLE, NodeShape.ELLIPSE, NodeShape.DIAMOND))

        assert [(p.width, p.height) for p in placed] == [(150, 60), (150, 60), (120, 80)]

    def test_text_node_has_no_box(self):
        placed = linear_layout(_nodes(NodeShape.TEXT))

        assert not placed[0].has_box
        assert placed[0].width is None

    def test_order_and_indices_preserved(self):
        nodes = _nodes(*[NodeShape.RECTANGLE] * 5)
        placed = linear_layout(nodes, Direction.VERTICAL)

        assert [p.index for p in placed] == list(range(5))
        assert [p.node for p in placed] == nodes

    def test_long_chain_never_overlaps(self):
        placed = linear_layout(_nodes(*[NodeShape.RECTANGLE] * 20), spacing=0)

        for left, right in zip(placed, placed[1:]):
            assert left.x + left.width <= right.x
