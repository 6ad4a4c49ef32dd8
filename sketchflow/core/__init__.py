"""
Sketchflow Core - Models, DSL compiler, connector geometry and validation.

This package holds everything that operates on diagram data in memory; the
CLI, the HTTP API and file storage build on top of it.
"""

from .models import (
    # Enums
    ElementType,
    FillStyle,
    StrokeStyle,
    TextAlign,
    VerticalAlign,
    # Models
    Binding,
    BoundElement,
    Roundness,
    Element,
    TextElement,
    LinearElement,
    FreeDrawElement,
    AppState,
    DiagramDocument,
    element_from_json_dict,
)

from .ids import generate_id, generate_seed, generate_version_nonce
from .elements import (
    ElementInput,
    ElementUpdate,
    InvalidElementError,
    UnknownKindError,
    create_element,
    merge_element,
    validate_element_input,
)
from .dsl import EdgeStyle, EmptyDiagramError, NodeShape, ParsedEdge, ParsedNode, parse_quick_dsl
from .layout import Direction, PlacedNode, linear_layout
from .connectors import Connection, add_bound_element, connect, connection_points, connector_sides
from .styles import PRESETS, StylePreset, get_preset
from .compiler import compile_diagram, compile_parsed
from .validation import (
    IssueSeverity,
    ValidationIssue,
    ValidationResult,
    apply_strict,
    format_validation_result,
    validate_document,
    validate_element,
)
from .analysis import calculate_bounds, count_elements_by_type, find_element, match_id, summarize_document

__all__ = [
    # Enums
    "ElementType",
    "FillStyle",
    "StrokeStyle",
    "TextAlign",
    "VerticalAlign",
    # Models
    "Binding",
    "BoundElement",
    "Roundness",
    "Element",
    "TextElement",
    "LinearElement",
    "FreeDrawElement",
    "AppState",
    "DiagramDocument",
    "element_from_json_dict",
    # IDs
    "generate_id",
    "generate_seed",
    "generate_version_nonce",
    # Factory
    "ElementInput",
    "ElementUpdate",
    "InvalidElementError",
    "UnknownKindError",
    "create_element",
    "merge_element",
    "validate_element_input",
    # DSL
    "EdgeStyle",
    "EmptyDiagramError",
    "NodeShape",
    "ParsedEdge",
    "ParsedNode",
    "parse_quick_dsl",
    # Layout
    "Direction",
    "PlacedNode",
    "linear_layout",
    # Connectors
    "Connection",
    "add_bound_element",
    "connect",
    "connection_points",
    "connector_sides",
    # Compiler
    "PRESETS",
    "StylePreset",
    "get_preset",
    "compile_diagram",
    "compile_parsed",
    # Validation
    "IssueSeverity",
    "ValidationIssue",
    "ValidationResult",
    "apply_strict",
    "format_validation_result",
    "validate_document",
    "validate_element",
    # Analysis
    "calculate_bounds",
    "count_elements_by_type",
    "find_element",
    "match_id",
    "summarize_document",
]
