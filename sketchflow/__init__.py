"""sketchflow - Compile quick text notation into Excalidraw diagrams.

Example usage:
    from sketchflow import compile_diagram, validate_document

    doc = compile_diagram('[Start] -> (Work) -->"retry" {Done?}')
    assert validate_document(doc).valid
"""

from .core import (
    DiagramDocument,
    EmptyDiagramError,
    UnknownKindError,
    compile_diagram,
    connect,
    create_element,
    merge_element,
    parse_quick_dsl,
    validate_document,
    validate_element,
)

__version__ = "0.1.0"

__all__ = [
    "DiagramDocument",
    "EmptyDiagramError",
    "UnknownKindError",
    "compile_diagram",
    "connect",
    "create_element",
    "merge_element",
    "parse_quick_dsl",
    "validate_document",
    "validate_element",
    "__version__",
]
