"""Tests for compiling quick DSL into documents."""
from __future__ import annotations

from collections import Counter

import pytest

from sketchflow.core.compiler import compile_diagram, compile_parsed
from sketchflow.core.dsl import EmptyDiagramError, parse_quick_dsl
from sketchflow.core.styles import PRESETS, get_preset
from sketchflow.core.validation import validate_document


def _by_type(document):
    return Counter(el.type for el in document.elements)


def _shapes(document):
    return [el for el in document.elements if el.type in ("rectangle", "ellipse", "diamond")]


# ─────────────────────────────────────────────────────────
# Element counts
# ─────────────────────────────────────────────────────────


class TestCompileCounts:
    def test_shapes_labels_and_connectors(self):
        doc = compile_diagram("[A] -> (B) -> {C} -> <note>")

        assert _by_type(doc) == Counter({
            "rectangle": 1,
            "ellipse": 1,
            "diamond": 1,
            "text": 4,  # three labels plus the text-only node
            "arrow": 3,
        })

    def test_dangling_connector(self):
        doc = compile_diagram("[Lonely] ->")

        assert _by_type(doc) == Counter({"rectangle": 1, "text": 1})

    def test_line_edges(self):
        doc = compile_diagram("[A] -- [B] -- [C]")

        assert _by_type(doc)["line"] == 2
        assert "arrow" not in _by_type(doc)

    def test_edge_label_adds_text(self):
        doc = compile_diagram('[A] -> "yes" [B]')
        labels = [el for el in doc.elements if el.type == "text" and el.text == "yes"]

        assert len(labels) == 1
        assert labels[0].font_size == 12

    def test_empty_source_raises(self):
        with pytest.raises(EmptyDiagramError):
            compile_diagram("  ")

    def test_compile_parsed_without_nodes_raises(self):
        with pytest.raises(EmptyDiagramError):
            compile_parsed([], [])


# ─────────────────────────────────────────────────────────
# Geometry and bindings
# ─────────────────────────────────────────────────────────


class TestCompileGeometry:
    def test_horizontal_connector_between_first_two_nodes(self):
        doc = compile_diagram("[A] -> (B)")
        arrow = next(el for el in doc.elements if el.type == "arrow")

        assert (arrow.x, arrow.y) == (250, 130)
        assert arrow.points == [(0, 0), (100, 0)]

    def test_vertical_direction(self):
        doc = compile_diagram("[A] -> [B]", direction="v")
        a, b = _shapes(doc)

        assert (a.x, a.y) == (100, 100)
        assert (b.x, b.y) == (100, 280)

        arrow = next(el for el in doc.elements if el.type == "arrow")
        assert (arrow.x, arrow.y) == (175, 160)

    def test_labels_are_centered_siblings(self):
        doc = compile_diagram("[Hello]")
        shape, label = doc.elements

        assert label.text == "Hello"
        assert label.container_id is None
        assert shape.bound_elements is None
        assert label.x + label.width / 2 == pytest.approx(shape.x + shape.width / 2)
        assert label.y + label.height / 2 == pytest.approx(shape.y + shape.height / 2)

    def test_connectors_bind_to_shapes_not_labels(self):
        doc = compile_diagram("[A] -> [B] -> [C]")
        a, b, c = _shapes(doc)
        arrows = [el for el in doc.elements if el.type == "arrow"]

        assert arrows[0].start_binding.element_id == a.id
        assert arrows[0].end_binding.element_id == b.id
        assert arrows[1].start_binding.element_id == b.id
        assert arrows[1].end_binding.element_id == c.id
        assert [ref.id for ref in b.bound_elements] == [arrows[0].id, arrows[1].id]
        assert b.version == 3

    def test_text_node_is_an_anchor(self):
        doc = compile_diagram("[A] -> <note>")
        note = next(el for el in doc.elements if el.type == "text" and el.text == "note")
        arrow = next(el for el in doc.elements if el.type == "arrow")

        assert arrow.end_binding.element_id == note.id
        assert [ref.id for ref in note.bound_elements] == [arrow.id]

    def test_dashed_and_line_styles(self):
        doc = compile_diagram("[A] --> [B] -- [C]")
        dashed = next(el for el in doc.elements if el.type == "arrow")
        line = next(el for el in doc.elements if el.type == "line")

        assert dashed.stroke_style == "dashed"
        assert dashed.end_arrowhead == "arrow"
        assert line.stroke_style == "solid"
        assert line.start_arrowhead is None
        assert line.end_arrowhead is None

    def test_no_duplicate_ids(self):
        doc = compile_diagram("[A] -> [B] --> (C) -- {D} -> <E>")
        ids = [el.id for el in doc.elements]

        assert len(ids) == len(set(ids))


# ─────────────────────────────────────────────────────────
# Styles
# ─────────────────────────────────────────────────────────


class TestCompileStyles:
    def test_palette_cycles_by_node_position(self):
        doc = compile_diagram(" -> ".join(f"[N{i}]" for i in range(7)))
        palette = PRESETS["default"].palette

        assert [s.background_color for s in _shapes(doc)] == [
            palette[i % len(palette)] for i in range(7)
        ]

    def test_blueprint_overrides_background(self):
        doc = compile_diagram("[A] -> [B]", style="blueprint")

        assert doc.app_state.view_background_color == "#0d1b2a"
        assert all(el.stroke_color == "#ffffff" for el in doc.elements)

    def test_default_background(self):
        assert compile_diagram("[A]").app_state.view_background_color == "#ffffff"

    def test_minimal_preset(self):
        shape = _shapes(compile_diagram("[A]", style="minimal"))[0]

        assert shape.stroke_width == 1
        assert shape.roughness == 0

    def test_unknown_style_falls_back(self):
        assert get_preset("neon") is PRESETS["default"]
        doc = compile_diagram("[A]", style="neon")
        assert _shapes(doc)[0].background_color == PRESETS["default"].palette[0]


# ─────────────────────────────────────────────────────────
# Compiler output always validates
# ─────────────────────────────────────────────────────────


@pytest.mark.parametrize("source", [
    "[A]",
    "<just text>",
    "[Lonely] ->",
    "[A] -> [B] -> {C?}",
    "(Start) --> [Step]",
    '[A] -> "yes" {B} -- "no" (C) --> <D>',
    '[A] -> "x" -> [B]',
    "[Unclosed -> Plain",
])
@pytest.mark.parametrize("style", sorted(PRESETS))
@pytest.mark.parametrize("direction", ["horizontal", "vertical"])
def test_compiled_documents_validate(source, style, direction):
    doc = compile_diagram(source, direction=direction, style=style)
    result = validate_document(doc.to_json_dict())

    assert result.valid, result.errors
    assert result.warnings == []


def test_compile_diagram_matches_compile_parsed():
    source = "[A] -> (B) --> {C}"
    nodes, edges = parse_quick_dsl(source)

    assert _by_type(compile_diagram(source)) == _by_type(compile_parsed(nodes, edges))
