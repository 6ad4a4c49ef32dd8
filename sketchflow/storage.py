"""
Document storage - Read and write .excalidraw files.

The core never touches the filesystem; the CLI goes through these helpers,
which own the existence and overwrite policy.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from . import config
from .core.models import AppState, DiagramDocument, DOCUMENT_TYPE

logger = logging.getLogger(__name__)


class DocumentNotFoundError(FileNotFoundError):
    def __init__(self, path: "str | Path"):
        super().__init__(f"File not found: {path}")


class DocumentExistsError(FileExistsError):
    def __init__(self, path: "str | Path"):
        super().__init__(f"File already exists: {path} (use --force to overwrite)")


class InvalidJsonError(ValueError):
    def __init__(self, path: "str | Path", reason: str):
        super().__init__(f"Invalid JSON in {path}: {reason}")


class InvalidDocumentError(ValueError):
    def __init__(self, reason: str):
        super().__init__(f"Invalid Excalidraw file: {reason}")


def create_empty_document(background: str = "#ffffff",
                          grid_size: Optional[int] = None) -> DiagramDocument:
    """Create a new document with no elements."""
    return DiagramDocument(
        source=config.DOCUMENT_SOURCE,
        app_state=AppState(view_background_color=background, grid_size=grid_size),
    )


def load_json(file_path: "str | Path") -> Any:
    """
    Read and parse a JSON file without checking its structure.

    Raises:
        DocumentNotFoundError: If the file does not exist
        InvalidJsonError: If the content is not valid JSON
    """
    path = Path(file_path)
    if not path.exists():
        raise DocumentNotFoundError(file_path)

    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidJsonError(file_path, str(e)) from e


def check_document_shape(data: Any) -> None:
    """
    Minimal structural check before a file is loaded into models.

    Raises:
        InvalidDocumentError: If the data cannot be a document
    """
    if not isinstance(data, dict):
        raise InvalidDocumentError("File is not a valid JSON object")
    if data.get("type") != DOCUMENT_TYPE:
        raise InvalidDocumentError(f'File type must be "{DOCUMENT_TYPE}"')
    if not isinstance(data.get("elements"), list):
        raise InvalidDocumentError('File must have an "elements" array')
    if not isinstance(data.get("appState"), dict):
        raise InvalidDocumentError('File must have an "appState" object')


def read_document(file_path: "str | Path") -> DiagramDocument:
    """Open a document from a JSON file."""
    data = load_json(file_path)
    check_document_shape(data)
    try:
        document = DiagramDocument.from_json_dict(data)
    except ValidationError as e:
        raise InvalidDocumentError(str(e)) from e

    logger.debug("Read %d elements from %s", len(document.elements), file_path)
    return document


def write_document(file_path: "str | Path", document: DiagramDocument,
                   force: bool = False) -> Path:
    """
    Save a document to a JSON file.

    Args:
        file_path: Destination path
        document: Document to write; its `source` is stamped on write
        force: Overwrite an existing file

    Returns:
        The resolved path written

    Raises:
        DocumentExistsError: If the file exists and force is False
    """
    path = Path(file_path).resolve()
    if path.exists() and not force:
        raise DocumentExistsError(file_path)

    # Ensure parent directory exists
    path.parent.mkdir(parents=True, exist_ok=True)

    document.source = config.DOCUMENT_SOURCE

    # Write JSON
    with open(path, "w", encoding="utf-8") as f:
        json.dump(document.to_json_dict(), f, indent=2)

    logger.debug("Wrote %d elements to %s", len(document.elements), path)
    return path
