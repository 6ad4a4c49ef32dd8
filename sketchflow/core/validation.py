"""
Structural validation - Check diagram documents against the file format.

Works on raw JSON-like data so that hand-authored or foreign files can be
checked as well as compiler output. Problems are always returned as data,
never raised:
- ERROR: the document breaks the format and other tools may reject it
- WARNING: a value is out of its usual range but still loadable
"""

import json
import math
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from pydantic import BaseModel

from .models import DiagramDocument, DOCUMENT_TYPE, Element


# Every element type the format allows, including ones the factory never emits
VALID_ELEMENT_TYPES = (
    "rectangle",
    "diamond",
    "ellipse",
    "text",
    "line",
    "arrow",
    "freedraw",
    "image",
    "frame",
    "magicframe",
    "iframe",
    "embeddable",
    "selection",
)
VALID_FILL_STYLES = ("hachure", "cross-hatch", "solid", "zigzag")
VALID_STROKE_STYLES = ("solid", "dashed", "dotted")
VALID_TEXT_ALIGNS = ("left", "center", "right")
VALID_VERTICAL_ALIGNS = ("top", "middle", "bottom")
VALID_ARROWHEADS = (
    None, "arrow", "bar", "dot", "circle", "circle_outline",
    "triangle", "triangle_outline", "diamond", "diamond_outline",
    "crowfoot_one", "crowfoot_many", "crowfoot_one_or_many",
)
VALID_FONT_FAMILIES = (1, 2, 3, 4, 5)
VALID_ROUNDNESS_TYPES = (1, 2, 3)

REQUIRED_PROPERTIES = ("id", "type", "x", "y", "width", "height", "version", "seed")
NUMERIC_PROPERTIES = (
    "x", "y", "width", "height", "angle", "opacity", "strokeWidth",
    "roughness", "seed", "version", "versionNonce",
)
COLOR_PROPERTIES = ("strokeColor", "backgroundColor")
BOOLEAN_PROPERTIES = ("isDeleted", "locked")

MIN_FILE_VERSION = 1
MAX_FILE_VERSION = 3


class IssueSeverity(str, Enum):
    """Severity levels for validation issues."""
    ERROR = "error"      # Breaks the format
    WARNING = "warning"  # Suspicious, still loadable


# Marks an issue that carries no offending value (distinct from a null value)
_NO_VALUE = object()


@dataclass
class ValidationIssue:
    """A single validation issue found in a document."""
    severity: IssueSeverity
    path: str
    message: str
    value: Any = _NO_VALUE
    expected: str | None = None

    @property
    def has_value(self) -> bool:
        return self.value is not _NO_VALUE

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {"path": self.path, "message": self.message}
        if self.has_value:
            result["value"] = self.value
        if self.expected:
            result["expected"] = self.expected
        return result


@dataclass
class ValidationResult:
    """Outcome of validating a document or element."""
    valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "errorCount": len(self.errors),
            "warningCount": len(self.warnings),
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }


class _Collector:
    """Accumulates issues while a validator walks the data."""

    def __init__(self):
        self.errors: list[ValidationIssue] = []
        self.warnings: list[ValidationIssue] = []

    def error(self, path: str, message: str, value: Any = _NO_VALUE, expected: str | None = None):
        self.errors.append(ValidationIssue(IssueSeverity.ERROR, path, message, value, expected))

    def warning(self, path: str, message: str, value: Any = _NO_VALUE):
        self.warnings.append(ValidationIssue(IssueSeverity.WARNING, path, message, value))

    def result(self) -> ValidationResult:
        return ValidationResult(
            valid=len(self.errors) == 0,
            errors=self.errors,
            warnings=self.warnings,
        )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _in_closed_set(value: Any, allowed: tuple) -> bool:
    # Booleans never alias numbers; ints and floats compare numerically
    if isinstance(value, bool) or value is None:
        return any(value is item for item in allowed)
    return any(value == item and not isinstance(item, bool) for item in allowed)


def _to_plain(candidate: Any) -> Any:
    """Serialize models to the wire dicts the rules are written against."""
    if isinstance(candidate, (DiagramDocument, Element)):
        return candidate.to_json_dict()
    if isinstance(candidate, BaseModel):
        return candidate.model_dump(by_alias=True, mode="json")
    return candidate


def _check_element(el: Any, path: str, out: _Collector) -> None:
    if not isinstance(el, Mapping):
        out.error(path, "Element must be an object", el)
        return

    # Presence
    for prop in REQUIRED_PROPERTIES:
        if prop not in el:
            out.error(f"{path}.{prop}", f"Missing required property: {prop}")

    # Enumerations
    kind = el.get("type")
    if kind and not _in_closed_set(kind, VALID_ELEMENT_TYPES):
        out.error(f"{path}.type", "Invalid element type", kind, ", ".join(VALID_ELEMENT_TYPES))

    if "id" in el and not isinstance(el["id"], str):
        out.error(f"{path}.id", "ID must be a string", el["id"])

    # Types
    for prop in NUMERIC_PROPERTIES:
        if prop in el and not _is_number(el[prop]):
            out.error(f"{path}.{prop}", f"{prop} must be a number", el[prop])

    # Soft ranges
    opacity = el.get("opacity")
    if _is_number(opacity) and (opacity < 0 or opacity > 100):
        out.warning(f"{path}.opacity", "Opacity should be 0-100", opacity)

    angle = el.get("angle")
    if _is_number(angle) and (angle < -2 * math.pi or angle > 2 * math.pi):
        out.warning(f"{path}.angle", "Angle should be in radians (-2π to 2π)", angle)

    fill_style = el.get("fillStyle")
    if fill_style and not _in_closed_set(fill_style, VALID_FILL_STYLES):
        out.error(f"{path}.fillStyle", "Invalid fill style", fill_style, ", ".join(VALID_FILL_STYLES))

    stroke_style = el.get("strokeStyle")
    if stroke_style and not _in_closed_set(stroke_style, VALID_STROKE_STYLES):
        out.error(f"{path}.strokeStyle", "Invalid stroke style", stroke_style,
                  ", ".join(VALID_STROKE_STYLES))

    for prop in COLOR_PROPERTIES:
        if prop in el and not isinstance(el[prop], str):
            out.error(f"{path}.{prop}", f"{prop} must be a string", el[prop])

    for prop in BOOLEAN_PROPERTIES:
        if prop in el and not isinstance(el[prop], bool):
            out.error(f"{path}.{prop}", f"{prop} must be a boolean", el[prop])

    if "groupIds" in el and not _is_array(el["groupIds"]):
        out.error(f"{path}.groupIds", "groupIds must be an array", el["groupIds"])

    roundness = el.get("roundness")
    if roundness is not None:
        if not isinstance(roundness, Mapping):
            out.error(f"{path}.roundness", "roundness must be an object or null", roundness)
        elif not _in_closed_set(roundness.get("type"), VALID_ROUNDNESS_TYPES):
            out.warning(f"{path}.roundness.type", "Invalid roundness type", roundness.get("type"))

    # Type-specific structure
    if kind == "text":
        _check_text(el, path, out)
    elif kind in ("line", "arrow"):
        _check_linear(el, path, out)
    elif kind == "freedraw":
        _check_freedraw(el, path, out)


def _check_text(el: Mapping, path: str, out: _Collector) -> None:
    if not isinstance(el.get("text"), str):
        out.error(f"{path}.text", "Text element must have text property", el.get("text"))
    if "fontSize" in el and not _is_number(el["fontSize"]):
        out.error(f"{path}.fontSize", "fontSize must be a number", el["fontSize"])
    if "fontFamily" in el and not _in_closed_set(el["fontFamily"], VALID_FONT_FAMILIES):
        out.warning(f"{path}.fontFamily", "Unknown font family", el["fontFamily"])
    text_align = el.get("textAlign")
    if text_align and not _in_closed_set(text_align, VALID_TEXT_ALIGNS):
        out.error(f"{path}.textAlign", "Invalid textAlign", text_align)


def _check_linear(el: Mapping, path: str, out: _Collector) -> None:
    points = el.get("points")
    if not _is_array(points):
        out.error(f"{path}.points", "Linear element must have points array", points)
    else:
        for i, point in enumerate(points):
            if not _is_array(point) or len(point) != 2:
                out.error(f"{path}.points[{i}]", "Point must be [x, y] tuple", point)

    for prop in ("startArrowhead", "endArrowhead"):
        if prop in el and not _in_closed_set(el[prop], VALID_ARROWHEADS):
            out.error(f"{path}.{prop}", "Invalid arrowhead", el[prop])


def _check_freedraw(el: Mapping, path: str, out: _Collector) -> None:
    if not _is_array(el.get("points")):
        out.error(f"{path}.points", "Freedraw must have points array", el.get("points"))
    if "pressures" in el and not _is_array(el["pressures"]):
        out.error(f"{path}.pressures", "pressures must be an array", el["pressures"])


def validate_element(candidate: Any, index: int) -> ValidationResult:
    """
    Validate a single element.

    Args:
        candidate: Element data (mapping or Element model)
        index: Position in the document, used in issue paths

    Returns:
        ValidationResult; never raises
    """
    out = _Collector()
    _check_element(_to_plain(candidate), f"elements[{index}]", out)
    return out.result()


def validate_document(candidate: Any) -> ValidationResult:
    """
    Validate a whole document.

    Checks:
    - type sentinel - ERROR
    - numeric version - ERROR, outside 1-3 - WARNING
    - elements array, each element - see validate_element
    - appState and files shapes - ERROR

    Args:
        candidate: Parsed JSON data or a DiagramDocument

    Returns:
        ValidationResult; never raises
    """
    out = _Collector()
    data = _to_plain(candidate)

    if not isinstance(data, Mapping):
        out.error("root", "File must be an object", data)
        return out.result()

    if data.get("type") != DOCUMENT_TYPE:
        out.error("type", f'File type must be "{DOCUMENT_TYPE}"', data.get("type"))

    version = data.get("version")
    if not _is_number(version):
        out.error("version", "File must have numeric version", version)
    elif version < MIN_FILE_VERSION or version > MAX_FILE_VERSION:
        out.warning("version", "Unexpected file version", version)

    elements = data.get("elements")
    if not _is_array(elements):
        out.error("elements", "File must have elements array", elements)
    else:
        for i, element in enumerate(elements):
            _check_element(element, f"elements[{i}]", out)

    app_state = data.get("appState")
    if app_state is not None:
        if not isinstance(app_state, Mapping):
            out.error("appState", "appState must be an object", app_state)
        else:
            bg = app_state.get("viewBackgroundColor")
            if "viewBackgroundColor" in app_state and not isinstance(bg, str):
                out.error("appState.viewBackgroundColor", "viewBackgroundColor must be a string", bg)
            grid = app_state.get("gridSize")
            if grid is not None and not _is_number(grid):
                out.error("appState.gridSize", "gridSize must be a number or null", grid)

    if "files" in data and not isinstance(data["files"], Mapping):
        out.error("files", "files must be an object", data["files"])

    return out.result()


def apply_strict(result: ValidationResult) -> ValidationResult:
    """
    Promote every warning to an error.

    The warnings list is kept so counts still report what was promoted.
    """
    if not result.warnings:
        return result
    promoted = [
        replace(w, severity=IssueSeverity.ERROR, message=f"[strict] {w.message}")
        for w in result.warnings
    ]
    return ValidationResult(
        valid=False,
        errors=result.errors + promoted,
        warnings=list(result.warnings),
    )


def validation_summary(result: ValidationResult) -> dict:
    """
    Create a summary of a validation result.

    Returns:
        Dictionary with counts by severity
    """
    return {
        "total": len(result.errors) + len(result.warnings),
        "errors": len(result.errors),
        "warnings": len(result.warnings),
        "valid": result.valid,
    }


def format_validation_result(result: ValidationResult) -> str:
    """Render a validation result as human-readable text."""
    lines: list[str] = []

    if result.valid:
        lines.append("✓ File is valid according to the Excalidraw schema")
    else:
        lines.append("✗ File has validation errors")

    if result.errors:
        lines.append(f"\nErrors ({len(result.errors)}):")
        for issue in result.errors:
            lines.append(f"  ✗ {issue.path}: {issue.message}")
            if issue.has_value:
                lines.append(f"    Got: {json.dumps(issue.value, default=str)}")
            if issue.expected:
                lines.append(f"    Expected: {issue.expected}")

    if result.warnings:
        lines.append(f"\nWarnings ({len(result.warnings)}):")
        for issue in result.warnings:
            lines.append(f"  ⚠ {issue.path}: {issue.message}")
            if issue.has_value:
                lines.append(f"    Value: {json.dumps(issue.value, default=str)}")

    return "\n".join(lines)
