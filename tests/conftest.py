"""Shared fixtures for the sketchflow test suite."""
from __future__ import annotations

import json

import pytest

from sketchflow.core.compiler import compile_diagram
from sketchflow.core.elements import create_element
from sketchflow.storage import write_document


@pytest.fixture
def make_rect():
    """Factory for rectangles at a given position and size."""
    def _make(x=0, y=0, width=100, height=100, **extra):
        return create_element({"type": "rectangle", "x": x, "y": y,
                               "width": width, "height": height, **extra})
    return _make


@pytest.fixture
def valid_rect_dict():
    """A minimal rectangle with every required property present."""
    return {
        "id": "rect-1",
        "type": "rectangle",
        "x": 0,
        "y": 0,
        "width": 100,
        "height": 50,
        "version": 1,
        "seed": 42,
    }


@pytest.fixture
def diagram_file(tmp_path):
    """A compiled three-node diagram saved to disk."""
    path = tmp_path / "flow.excalidraw"
    write_document(path, compile_diagram("[Start] -> (Work) -> {Done?}"))
    return path


@pytest.fixture
def write_json(tmp_path):
    """Write arbitrary JSON data to a file and return its path."""
    def _write(data, name="data.excalidraw"):
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return _write
