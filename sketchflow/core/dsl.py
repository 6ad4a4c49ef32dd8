"""
Quick DSL parser - Turn bracket/arrow notation into nodes and edges.

Syntax:
- [Label] = rectangle
- (Label) = ellipse
- {Label} = diamond
- <Label> = text only
- -> = arrow, --> = dashed arrow, -- = plain line
- "label" right after a connector = edge label

Example:
    [Start] -> (Process) -->"maybe" {Decision?} -- <note>

The DSL is forgiving: unknown delimiters fall back to a rectangle labelled
with the whole token and a connector with nothing after it is dropped.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class NodeShape(str, Enum):
    """Visual shapes a DSL node can take."""
    RECTANGLE = "rectangle"
    ELLIPSE = "ellipse"
    DIAMOND = "diamond"
    TEXT = "text"  # No box, just the label


class EdgeStyle(str, Enum):
    """Connector tokens, longest first."""
    DASHED_ARROW = "-->"
    ARROW = "->"
    LINE = "--"


class EmptyDiagramError(ValueError):
    """Raised when a DSL source contains no nodes."""

    def __init__(self, message: str = "No nodes found in DSL"):
        super().__init__(message)


@dataclass(frozen=True)
class ParsedNode:
    """A node token: its shape and label."""
    shape: NodeShape
    label: str


@dataclass(frozen=True)
class ParsedEdge:
    """
    A connection between two parsed nodes.

    Indices refer to positions in the node list; edges only ever join the
    most recently parsed node to the next one, so from_index < to_index.
    """
    from_index: int
    to_index: int
    label: Optional[str] = None
    style: EdgeStyle = EdgeStyle.ARROW

    @property
    def dashed(self) -> bool:
        return self.style == EdgeStyle.DASHED_ARROW

    @property
    def has_arrowhead(self) -> bool:
        return self.style != EdgeStyle.LINE


# Connector, optional quoted label, optional trailing connector. A connector
# after the label folds into the same edge rather than starting a new one.
_CONNECTOR_SPLIT = re.compile(r'(\s*(?:-->|->|--)\s*(?:"[^"]*"\s*(?:-->|->|--)?\s*)?)')
_CONNECTOR_MATCH = re.compile(r'^(-->|->|--)(?:\s*"([^"]*)")?')

_DELIMITERS = {
    "[": ("]", NodeShape.RECTANGLE),
    "(": (")", NodeShape.ELLIPSE),
    "{": ("}", NodeShape.DIAMOND),
    "<": (">", NodeShape.TEXT),
}


def parse_node(token: str) -> ParsedNode:
    """
    Parse a single node token.

    Args:
        token: Stripped, non-empty token such as "[Start]"

    Returns:
        ParsedNode; tokens without a matching delimiter pair become
        rectangles labelled with the whole token
    """
    if len(token) >= 2 and token[0] in _DELIMITERS:
        closing, shape = _DELIMITERS[token[0]]
        if token.endswith(closing):
            return ParsedNode(shape=shape, label=token[1:-1])
    return ParsedNode(shape=NodeShape.RECTANGLE, label=token)


def parse_quick_dsl(source: str) -> tuple[list[ParsedNode], list[ParsedEdge]]:
    """
    Parse quick DSL source into nodes and edges.

    Args:
        source: DSL text, e.g. '[A] -> [B] -> {C?}'

    Returns:
        (nodes, edges) in parse order

    Raises:
        EmptyDiagramError: If the source yields no nodes
    """
    nodes: list[ParsedNode] = []
    edges: list[ParsedEdge] = []

    last_node_index = -1
    pending: Optional[tuple[EdgeStyle, Optional[str]]] = None

    for part in _CONNECTOR_SPLIT.split(source):
        token = part.strip()
        if not token:
            continue

        conn = _CONNECTOR_MATCH.match(token)
        if conn:
            pending = (EdgeStyle(conn.group(1)), conn.group(2))
            continue

        nodes.append(parse_node(token))
        node_index = len(nodes) - 1

        if pending is not None and last_node_index >= 0:
            style, label = pending
            edges.append(ParsedEdge(
                from_index=last_node_index,
                to_index=node_index,
                label=label,
                style=style,
            ))
            pending = None

        last_node_index = node_index

    if pending is not None:
        logger.debug("Dropping dangling connector %s", pending[0].value)

    if not nodes:
        raise EmptyDiagramError()

    logger.debug("Parsed %d nodes and %d edges", len(nodes), len(edges))
    return nodes, edges
