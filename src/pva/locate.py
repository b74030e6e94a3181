"""Line lookup for location paths.

Maps a path of keys and indices (as reported by the engines) onto a line of
the document text, using the YAML node tree so that both YAML and JSON files
are covered.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import yaml
from yaml.nodes import MappingNode, Node, SequenceNode

logger = logging.getLogger(__name__)

# Line reported for the document as a whole.
DOCUMENT_LINE = 0


class LineLocator:
    """Resolves location paths against one document's text.

    The node tree is composed once per document. Paths that cannot be followed
    to the end resolve to the deepest node that was found.
    """

    def __init__(self, contents: str) -> None:
        try:
            self._root: Node | None = yaml.compose(contents)
        except yaml.YAMLError as e:
            logger.debug("Cannot compose node tree, line numbers unavailable: %s", e)
            self._root = None

    def line_for(self, path: Sequence[str | int]) -> int:
        """Return the 1-based line of the last path element found.

        Args:
            path: Keys and indices from the document root.

        Returns:
            Line number, or DOCUMENT_LINE for the empty path or an
            unparseable document.
        """
        if not path or self._root is None:
            return DOCUMENT_LINE

        node = self._root
        line = DOCUMENT_LINE
        for segment in path:
            child = _child(node, segment)
            if child is None:
                break
            marker, node = child
            line = marker.start_mark.line + 1
        return line


def _child(node: Node, segment: str | int) -> tuple[Node, Node] | None:
    """Return (node carrying the line, value node) for one path step."""
    if isinstance(node, MappingNode):
        for key_node, value_node in node.value:
            if key_node.value == str(segment):
                return key_node, value_node
        return None

    if isinstance(node, SequenceNode):
        try:
            index = int(segment)
        except (TypeError, ValueError):
            return None
        if 0 <= index < len(node.value):
            item = node.value[index]
            return item, item
    return None
