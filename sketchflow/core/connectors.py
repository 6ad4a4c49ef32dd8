"""
Connector geometry - Anchor points and bindings between elements.

A connector attaches to one side of each endpoint: whichever axis separates
the two centers more decides between left/right and top/bottom sides. No
routing is done; connectors are single straight segments.
"""

import logging
from dataclasses import dataclass
from typing import Any

from .elements import create_element, merge_element
from .models import Binding, BoundElement, Element, ElementType, LinearElement, Point

logger = logging.getLogger(__name__)

BINDING_GAP = 1


@dataclass
class Connection:
    """A new connector plus both endpoints with their back-references added."""
    connector: LinearElement
    source: Element
    target: Element

    @property
    def start(self) -> Point:
        return (self.connector.x, self.connector.y)

    @property
    def end(self) -> Point:
        dx, dy = self.connector.points[-1]
        return (self.connector.x + dx, self.connector.y + dy)


def connector_sides(source: Element, target: Element) -> tuple[str, str]:
    """
    Calculate connection sides based on relative element positions.

    Horizontal wins only when |dx| > |dy|; a tie goes to the vertical sides.

    Returns:
        (source_side, target_side), each one of "top", "right", "bottom", "left"
    """
    sx, sy = source.center()
    tx, ty = target.center()

    dx = tx - sx
    dy = ty - sy

    if abs(dx) > abs(dy):
        return ("right", "left") if dx > 0 else ("left", "right")
    else:
        return ("bottom", "top") if dy > 0 else ("top", "bottom")


def side_anchor(element: Element, side: str) -> Point:
    """Midpoint of one side of an element's bounding box."""
    cx, cy = element.center()
    if side == "left":
        return (element.x, cy)
    if side == "right":
        return (element.x + element.width, cy)
    if side == "top":
        return (cx, element.y)
    if side == "bottom":
        return (cx, element.y + element.height)
    raise ValueError(f"Unknown side: {side}")


def connection_points(source: Element, target: Element) -> tuple[Point, Point]:
    """Absolute start and end points of a connector from source to target."""
    source_side, target_side = connector_sides(source, target)
    return side_anchor(source, source_side), side_anchor(target, target_side)


def make_bindings(source: Element, target: Element) -> tuple[Binding, Binding]:
    """Start and end bindings pointing at the two endpoints."""
    return (
        Binding(element_id=source.id, focus=0, gap=BINDING_GAP),
        Binding(element_id=target.id, focus=0, gap=BINDING_GAP),
    )


def add_bound_element(element: Element, bound_id: str, bound_type: str) -> Element:
    """
    Record a connector on the element it is bound to.

    Binding counts as a mutation, so the version is bumped even when the
    reference is already present (in which case it is not duplicated).

    Returns:
        Updated copy of the element
    """
    current = list(element.bound_elements or [])
    if not any(ref.id == bound_id for ref in current):
        current.append(BoundElement(id=bound_id, type=bound_type))
    return merge_element(element, {"bound_elements": current})


def connect(source: Element, target: Element, kind: str = ElementType.ARROW.value,
            **style: Any) -> Connection:
    """
    Create a connector bound to two elements.

    Args:
        source: Element the connector starts at
        target: Element the connector ends at
        kind: "arrow" or "line"
        **style: Extra element input (strokeColor, strokeStyle, endArrowhead, ...)

    Returns:
        Connection with the connector and both updated endpoints
    """
    (start_x, start_y), (end_x, end_y) = connection_points(source, target)
    start_binding, end_binding = make_bindings(source, target)

    connector = create_element({
        **style,
        "type": kind,
        "x": start_x,
        "y": start_y,
        "points": [(0, 0), (end_x - start_x, end_y - start_y)],
        "startBinding": start_binding,
        "endBinding": end_binding,
    })

    source = add_bound_element(source, connector.id, connector.type)
    if target.id == source.id:
        target = source
    else:
        target = add_bound_element(target, connector.id, connector.type)

    logger.debug("Connected %s -> %s with %s %s", source.id, target.id, kind, connector.id)
    return Connection(connector=connector, source=source, target=target)
