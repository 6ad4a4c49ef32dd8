"""
Element factory - Build fully-defaulted diagram elements from partial input.

Every omitted presentation field gets the format's default; text elements are
sized from a character-count heuristic and connectors from the bounding box
of their points. The factory never touches `boundElements`: those
back-references are owned by the connector module.
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict

from .ids import generate_id, generate_seed, generate_version_nonce, timestamp_ms
from .models import (
    Binding,
    Element,
    ElementType,
    FillStyle,
    FreeDrawElement,
    LinearElement,
    Point,
    Roundness,
    StrokeStyle,
    TextAlign,
    TextElement,
    VerticalAlign,
    WireModel,
)

logger = logging.getLogger(__name__)

ELEMENT_TYPES = tuple(t.value for t in ElementType)

DEFAULT_SIZE = 100
DEFAULT_FONT_SIZE = 20
DEFAULT_FONT_FAMILY = 1
LINE_HEIGHT = 1.25
CHAR_WIDTH_RATIO = 0.6
DEFAULT_PRESSURE = 0.5

E = TypeVar("E", bound=Element)


class InvalidElementError(ValueError):
    """Raised when element input cannot be turned into an element."""


class UnknownKindError(InvalidElementError):
    """Raised when an element type is not one the factory can build."""

    def __init__(self, kind: Any):
        self.kind = kind
        super().__init__(
            f"Unknown element type: {kind!r}. Valid types: {', '.join(ELEMENT_TYPES)}"
        )


# --- Request Models ---

class ElementInput(WireModel):
    """Partial description of an element to create."""
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    type: str
    x: float
    y: float
    width: Optional[float] = None
    height: Optional[float] = None
    angle: Optional[float] = None
    stroke_color: Optional[str] = None
    background_color: Optional[str] = None
    fill: Optional[str] = None  # Alias for background_color
    fill_style: Optional[str] = None
    stroke_width: Optional[float] = None
    stroke_style: Optional[str] = None
    roughness: Optional[float] = None
    opacity: Optional[float] = None
    group_ids: Optional[list[str]] = None
    locked: Optional[bool] = None
    # Text-specific
    text: Optional[str] = None
    font_size: Optional[float] = None
    font_family: Optional[int] = None
    text_align: Optional[str] = None
    vertical_align: Optional[str] = None
    # Line/arrow-specific
    points: Optional[list[Point]] = None
    start_binding: Optional[Binding] = None
    end_binding: Optional[Binding] = None
    start_arrowhead: Optional[str] = None
    end_arrowhead: Optional[str] = None
    # Freedraw-specific
    pressures: Optional[list[float]] = None


class ElementUpdate(WireModel):
    """Partial update of an element; only explicitly set fields are applied."""
    model_config = ConfigDict(extra="allow")

    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    angle: Optional[float] = None
    stroke_color: Optional[str] = None
    background_color: Optional[str] = None
    fill_style: Optional[str] = None
    stroke_width: Optional[float] = None
    stroke_style: Optional[str] = None
    roughness: Optional[float] = None
    opacity: Optional[float] = None
    group_ids: Optional[list[str]] = None
    locked: Optional[bool] = None
    is_deleted: Optional[bool] = None
    text: Optional[str] = None


def _pick(value, default):
    return default if value is None else value


def estimate_text_size(text: str, font_size: float) -> tuple[float, float]:
    """
    Approximate the bounding box of a text block.

    This is a character-count heuristic, not a text-shaping measurement.

    Args:
        text: Text content, possibly multi-line
        font_size: Font size in pixels

    Returns:
        (width, height) tuple
    """
    lines = text.split("\n")
    width = max(len(line) for line in lines) * font_size * CHAR_WIDTH_RATIO
    height = len(lines) * font_size * LINE_HEIGHT
    return width, height


def points_extent(points: list[Point]) -> tuple[float, float]:
    """Width and height of the points' bounding box, never below 1."""
    if not points:
        return (1, 1)
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    width = max(xs) - min(xs)
    height = max(ys) - min(ys)
    return (width or 1, height or 1)


def _base_fields(desc: ElementInput, width: Optional[float] = None,
                 height: Optional[float] = None) -> dict:
    """Presentation and lifecycle fields shared by every element type."""
    return {
        "id": desc.id if desc.id is not None else generate_id(),
        "x": desc.x,
        "y": desc.y,
        "width": _pick(width, _pick(desc.width, DEFAULT_SIZE)),
        "height": _pick(height, _pick(desc.height, DEFAULT_SIZE)),
        "angle": _pick(desc.angle, 0),
        "stroke_color": _pick(desc.stroke_color, "#1e1e1e"),
        "background_color": _pick(desc.background_color, _pick(desc.fill, "transparent")),
        "fill_style": _pick(desc.fill_style, FillStyle.SOLID.value),
        "stroke_width": _pick(desc.stroke_width, 2),
        "stroke_style": _pick(desc.stroke_style, StrokeStyle.SOLID.value),
        "roughness": _pick(desc.roughness, 1),
        "opacity": _pick(desc.opacity, 100),
        "group_ids": list(_pick(desc.group_ids, [])),
        "frame_id": None,
        "roundness": None,
        "seed": generate_seed(),
        "version": 1,
        "version_nonce": generate_version_nonce(),
        "is_deleted": False,
        "bound_elements": None,
        "updated": timestamp_ms(),
        "link": None,
        "locked": _pick(desc.locked, False),
    }


def create_rectangle(desc: ElementInput) -> Element:
    fields = _base_fields(desc)
    fields["roundness"] = Roundness(type=3)
    return Element(type=ElementType.RECTANGLE.value, **fields)


def create_ellipse(desc: ElementInput) -> Element:
    return Element(type=ElementType.ELLIPSE.value, **_base_fields(desc))


def create_diamond(desc: ElementInput) -> Element:
    return Element(type=ElementType.DIAMOND.value, **_base_fields(desc))


def create_text(desc: ElementInput) -> TextElement:
    """Create a text element, estimating its size when none is given."""
    text = _pick(desc.text, "Text")
    font_size = _pick(desc.font_size, DEFAULT_FONT_SIZE)
    est_width, est_height = estimate_text_size(text, font_size)

    fields = _base_fields(
        desc,
        width=_pick(desc.width, est_width),
        height=_pick(desc.height, est_height),
    )
    return TextElement(
        type=ElementType.TEXT.value,
        text=text,
        font_size=font_size,
        font_family=_pick(desc.font_family, DEFAULT_FONT_FAMILY),
        text_align=_pick(desc.text_align, TextAlign.LEFT.value),
        vertical_align=_pick(desc.vertical_align, VerticalAlign.TOP.value),
        baseline=font_size,
        container_id=None,
        original_text=text,
        line_height=LINE_HEIGHT,
        **fields,
    )


def create_line(desc: ElementInput) -> LinearElement:
    """Create a line; width and height come from the points, not the input."""
    points = _pick(desc.points, [(0, 0), (100, 100)])
    width, height = points_extent(points)

    fields = _base_fields(desc, width=width, height=height)
    return LinearElement(
        type=ElementType.LINE.value,
        points=points,
        start_binding=desc.start_binding,
        end_binding=desc.end_binding,
        last_committed_point=None,
        start_arrowhead=desc.start_arrowhead,
        end_arrowhead=desc.end_arrowhead,
        **fields,
    )


def create_arrow(desc: ElementInput) -> LinearElement:
    """Create an arrow; the end arrowhead defaults to "arrow" unless explicitly set."""
    line = create_line(desc)
    end_arrowhead = desc.end_arrowhead if "end_arrowhead" in desc.model_fields_set else "arrow"
    return line.model_copy(update={
        "type": ElementType.ARROW.value,
        "end_arrowhead": end_arrowhead,
    })


def create_freedraw(desc: ElementInput) -> FreeDrawElement:
    points = _pick(desc.points, [(0, 0)])
    pressures = _pick(desc.pressures, [DEFAULT_PRESSURE] * len(points))
    width, height = points_extent(points)

    fields = _base_fields(desc, width=width, height=height)
    return FreeDrawElement(
        type=ElementType.FREEDRAW.value,
        points=points,
        pressures=pressures,
        simulate_pressure=len(pressures) == 0,
        **fields,
    )


_BUILDERS = {
    ElementType.RECTANGLE.value: create_rectangle,
    ElementType.ELLIPSE.value: create_ellipse,
    ElementType.DIAMOND.value: create_diamond,
    ElementType.TEXT.value: create_text,
    ElementType.LINE.value: create_line,
    ElementType.ARROW.value: create_arrow,
    ElementType.FREEDRAW.value: create_freedraw,
}


def create_element(descriptor: Union[ElementInput, Mapping[str, Any]]) -> Element:
    """
    Create an element of any supported type.

    Args:
        descriptor: An ElementInput, or a mapping with the same keys
            (wire or attribute names)

    Returns:
        The new element, with a generated ID unless the descriptor supplies one

    Raises:
        UnknownKindError: If the type is not one of the seven buildable types
    """
    if isinstance(descriptor, ElementInput):
        desc = descriptor
    else:
        kind = descriptor.get("type")
        if kind not in ELEMENT_TYPES:
            raise UnknownKindError(kind)
        desc = ElementInput.model_validate(dict(descriptor))

    builder = _BUILDERS.get(desc.type)
    if builder is None:
        raise UnknownKindError(desc.type)

    element = builder(desc)
    logger.debug("Created %s %s at (%s, %s)", element.type, element.id, element.x, element.y)
    return element


def validate_element_input(data: Any) -> None:
    """
    Check that raw input can describe an element.

    Raises:
        InvalidElementError: If the input is not usable
    """
    if not isinstance(data, Mapping):
        raise InvalidElementError("Element must be an object")

    kind = data.get("type")
    if not isinstance(kind, str):
        raise InvalidElementError('Element must have a "type" property')
    if kind not in ELEMENT_TYPES:
        raise UnknownKindError(kind)

    for axis in ("x", "y"):
        value = data.get(axis)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidElementError(f'Element must have numeric "{axis}" property')


def _field_name(model: type[BaseModel], key: str) -> str:
    """Map a wire name (e.g. strokeColor) to the attribute name."""
    for name, info in model.model_fields.items():
        if key == name or key == info.alias:
            return name
    return key


def merge_element(element: E, updates: Union[ElementUpdate, Mapping[str, Any], None] = None) -> E:
    """
    Apply a partial update to an element and bump its version.

    The merge is shallow: nested values in `updates` replace the original
    values wholesale. Keys absent from `updates` are left untouched. The
    version always increments and the nonce and timestamp are refreshed,
    even for an empty update.

    Args:
        element: The element to update
        updates: ElementUpdate (only set fields apply) or a mapping

    Returns:
        A new element of the same class
    """
    if isinstance(updates, BaseModel):
        changes = updates.model_dump(exclude_unset=True)
    else:
        changes = dict(updates or {})

    cls = type(element)
    data = element.model_dump()
    for key, value in changes.items():
        data[_field_name(cls, key)] = value

    data["version"] = element.version + 1
    data["version_nonce"] = generate_version_nonce()
    data["updated"] = timestamp_ms()
    return cls.model_validate(data)
