"""
Diagram compiler - Quick DSL to a complete diagram document.

Pipeline: parse -> linear layout -> element factory -> connector binding.

Each boxed node becomes two sibling elements, the shape and a centered text
label, with no container link between them. Text-only nodes become a single
text element. Edges are processed in order, so a shape touched by several
connectors accumulates its back-references one edge at a time.
"""

import logging

from .connectors import connect
from .dsl import ParsedEdge, ParsedNode, parse_quick_dsl, EmptyDiagramError
from .elements import create_element, estimate_text_size
from .layout import DEFAULT_SPACING, Direction, PlacedNode, linear_layout
from .models import AppState, DiagramDocument, Element, ElementType, StrokeStyle, TextAlign
from .styles import StylePreset, get_preset

logger = logging.getLogger(__name__)

NODE_FONT_SIZE = 18
LABEL_FONT_SIZE = 16
EDGE_LABEL_FONT_SIZE = 12
TEXT_NODE_OFFSET_Y = 20
EDGE_LABEL_OFFSET = 15


def _text_node(placed: PlacedNode, preset: StylePreset) -> Element:
    return create_element({
        "type": ElementType.TEXT.value,
        "x": placed.x,
        "y": placed.y + TEXT_NODE_OFFSET_Y,
        "text": placed.node.label,
        "fontSize": NODE_FONT_SIZE,
        "strokeColor": preset.stroke_color,
    })


def _shape_node(placed: PlacedNode, preset: StylePreset) -> Element:
    return create_element({
        "type": placed.node.shape.value,
        "x": placed.x,
        "y": placed.y,
        "width": placed.width,
        "height": placed.height,
        "backgroundColor": preset.fill_for(placed.index),
        "fillStyle": "solid",
        "strokeColor": preset.stroke_color,
        "strokeWidth": preset.stroke_width,
        "roughness": preset.roughness,
    })


def _centered_label(shape: Element, label: str, preset: StylePreset) -> Element:
    """Text element positioned in the middle of a shape."""
    text_width, text_height = estimate_text_size(label, LABEL_FONT_SIZE)
    return create_element({
        "type": ElementType.TEXT.value,
        "x": shape.x + (shape.width - text_width) / 2,
        "y": shape.y + (shape.height - text_height) / 2,
        "text": label,
        "fontSize": LABEL_FONT_SIZE,
        "textAlign": TextAlign.CENTER.value,
        "strokeColor": preset.stroke_color,
    })


def _edge_label(start: tuple[float, float], end: tuple[float, float], label: str,
                preset: StylePreset) -> Element:
    mid_x = (start[0] + end[0]) / 2
    mid_y = (start[1] + end[1]) / 2
    return create_element({
        "type": ElementType.TEXT.value,
        "x": mid_x - EDGE_LABEL_OFFSET,
        "y": mid_y - EDGE_LABEL_OFFSET,
        "text": label,
        "fontSize": EDGE_LABEL_FONT_SIZE,
        "strokeColor": preset.stroke_color,
    })


def compile_parsed(
    nodes: list[ParsedNode],
    edges: list[ParsedEdge],
    direction: "str | Direction" = Direction.HORIZONTAL,
    spacing: float = DEFAULT_SPACING,
    style: str = "default",
) -> DiagramDocument:
    """
    Lower parsed nodes and edges into a diagram document.

    Args:
        nodes: Parsed nodes
        edges: Parsed edges referencing node indices
        direction: "horizontal"/"h" or "vertical"/"v"
        spacing: Gap between layout slots
        style: Style preset name

    Returns:
        A new DiagramDocument

    Raises:
        EmptyDiagramError: If there are no nodes
    """
    if not nodes:
        raise EmptyDiagramError()

    preset = get_preset(style)
    document = DiagramDocument()
    if preset.background_color:
        document.app_state = AppState(view_background_color=preset.background_color)

    # node index -> the element connectors bind to
    anchors: dict[int, Element] = {}

    for placed in linear_layout(nodes, direction, spacing):
        if not placed.has_box:
            text_el = _text_node(placed, preset)
            anchors[placed.index] = text_el
            document.elements.append(text_el)
            continue

        shape = _shape_node(placed, preset)
        anchors[placed.index] = shape
        document.elements.append(shape)
        document.elements.append(_centered_label(shape, placed.node.label, preset))

    for edge in edges:
        kind = ElementType.ARROW.value if edge.has_arrowhead else ElementType.LINE.value
        connector_style = {
            "strokeColor": preset.stroke_color,
            "strokeStyle": StrokeStyle.DASHED.value if edge.dashed else StrokeStyle.SOLID.value,
        }
        if edge.has_arrowhead:
            connector_style["endArrowhead"] = "arrow"

        conn = connect(anchors[edge.from_index], anchors[edge.to_index], kind, **connector_style)

        document.replace_element(conn.source)
        document.replace_element(conn.target)
        anchors[edge.from_index] = conn.source
        anchors[edge.to_index] = conn.target
        document.elements.append(conn.connector)

        if edge.label:
            document.elements.append(_edge_label(conn.start, conn.end, edge.label, preset))

    logger.debug(
        "Compiled %d nodes and %d edges into %d elements",
        len(nodes), len(edges), len(document.elements),
    )
    return document


def compile_diagram(
    source: str,
    direction: "str | Direction" = Direction.HORIZONTAL,
    spacing: float = DEFAULT_SPACING,
    style: str = "default",
) -> DiagramDocument:
    """
    Compile quick DSL source into a diagram document.

    Usage:
        doc = compile_diagram("[Start] -> (Process) -> {Done?}", direction="v")

    Raises:
        EmptyDiagramError: If the source contains no nodes
    """
    nodes, edges = parse_quick_dsl(source)
    return compile_parsed(nodes, edges, direction=direction, spacing=spacing, style=style)
