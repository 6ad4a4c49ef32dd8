"""Tests for the quick DSL parser."""
from __future__ import annotations

import pytest

from sketchflow.core.dsl import (
    EdgeStyle,
    EmptyDiagramError,
    NodeShape,
    ParsedEdge,
    ParsedNode,
    parse_node,
    parse_quick_dsl,
)


# ─────────────────────────────────────────────────────────
# Node tokens
# ─────────────────────────────────────────────────────────


class TestParseNode:
    @pytest.mark.parametrize("token, shape, label", [
        ("[Start]", NodeShape.RECTANGLE, "Start"),
        ("(Process)", NodeShape.ELLIPSE, "Process"),
        ("{Done?}", NodeShape.DIAMOND, "Done?"),
        ("<note>", NodeShape.TEXT, "note"),
    ])
    def test_delimiters(self, token, shape, label):
        assert parse_node(token) == ParsedNode(shape=shape, label=label)

    def test_bare_word_is_rectangle(self):
        assert parse_node("Plain") == ParsedNode(NodeShape.RECTANGLE, "Plain")

    def test_mismatched_delimiters_keep_whole_token(self):
        assert parse_node("[Unclosed") == ParsedNode(NodeShape.RECTANGLE, "[Unclosed")
        assert parse_node("(Mixed]") == ParsedNode(NodeShape.RECTANGLE, "(Mixed]")

    def test_empty_brackets(self):
        assert parse_node("[]") == ParsedNode(NodeShape.RECTANGLE, "")


# ─────────────────────────────────────────────────────────
# Whole sources
# ─────────────────────────────────────────────────────────


class TestParseQuickDsl:
    def test_chain_of_three(self):
        nodes, edges = parse_quick_dsl("[A] -> [B] -> {C?}")

        assert nodes == [
            ParsedNode(NodeShape.RECTANGLE, "A"),
            ParsedNode(NodeShape.RECTANGLE, "B"),
            ParsedNode(NodeShape.DIAMOND, "C?"),
        ]
        assert edges == [ParsedEdge(0, 1), ParsedEdge(1, 2)]
        assert not any(e.dashed for e in edges)

    def test_dashed_edge(self):
        nodes, edges = parse_quick_dsl("(Start) --> [Step]")

        assert len(nodes) == 2
        assert len(edges) == 1
        assert edges[0].from_index == 0
        assert edges[0].to_index == 1
        assert edges[0].dashed
        assert edges[0].has_arrowhead

    def test_plain_line_has_no_arrowhead(self):
        _, edges = parse_quick_dsl("[A] -- [B]")

        assert edges[0].style == EdgeStyle.LINE
        assert not edges[0].has_arrowhead
        assert not edges[0].dashed

    def test_edge_label(self):
        _, edges = parse_quick_dsl('[A] -> "yes" [B] --> "no" [C]')

        assert edges[0].label == "yes"
        assert edges[1].label == "no"
        assert edges[1].dashed

    def test_label_followed_by_connector_folds_into_one_edge(self):
        nodes, edges = parse_quick_dsl('[A] -> "x" -> [B]')

        assert len(nodes) == 2
        assert edges == [ParsedEdge(0, 1, label="x", style=EdgeStyle.ARROW)]

    def test_dangling_connector_is_dropped(self):
        nodes, edges = parse_quick_dsl("[Lonely] ->")

        assert nodes == [ParsedNode(NodeShape.RECTANGLE, "Lonely")]
        assert edges == []

    def test_leading_connector_is_ignored(self):
        nodes, edges = parse_quick_dsl("-> [A] -> [B]")

        assert len(nodes) == 2
        assert edges == [ParsedEdge(0, 1)]

    def test_no_spaces_needed(self):
        nodes, edges = parse_quick_dsl("[A]->[B]-->(C)")

        assert [n.label for n in nodes] == ["A", "B", "C"]
        assert [e.style for e in edges] == [EdgeStyle.ARROW, EdgeStyle.DASHED_ARROW]

    def test_edges_always_point_forward(self):
        _, edges = parse_quick_dsl("[A] -> [B] -- <c> --> {D} -> (E)")

        for edge in edges:
            assert edge.from_index < edge.to_index
            assert edge.to_index == edge.from_index + 1

    def test_text_only_node(self):
        nodes, _ = parse_quick_dsl("[A] -> <just text>")

        assert nodes[1] == ParsedNode(NodeShape.TEXT, "just text")

    @pytest.mark.parametrize("source", ["", "   ", "->", " --> ", '-> "x"'])
    def test_no_nodes_raises(self, source):
        with pytest.raises(EmptyDiagramError):
            parse_quick_dsl(source)

    def test_empty_diagram_error_is_value_error(self):
        with pytest.raises(ValueError, match="No nodes"):
            parse_quick_dsl("")
