"""
Doc comment collection and rendering.

Collection runs while a package is loaded: the leading comment group of each
declaration node is stored in the package's comment side-table, keyed by the
declaration's ``Position``. Rendering turns the stored raw comments into one
string per physical comment line.
"""

import logging
import re
from typing import List, Mapping, Tuple

from tree_sitter import Node

from extraction.config import COMMENT_NODE
from extraction.syntax import Position

logger = logging.getLogger(__name__)

# Go tool directives (//go:generate, //line, //export ...) are not documentation
_DIRECTIVE_RE = re.compile(r"^(line |extern |export |[a-z0-9]+:[a-z0-9])")


def is_trailing_comment(comment: Node) -> bool:
    """Check if a comment shares its first line with preceding code.

    ``foo string // foo`` documents nothing: the comment belongs to the line
    it trails, not to the declaration on the next line.
    """
    previous = comment.prev_sibling
    # A newline terminator before the comment means it starts its own line
    if previous is None or previous.type in (COMMENT_NODE, "\n"):
        return False
    return previous.end_point.row == comment.start_point.row


def get_preceding_comments(node: Node) -> Tuple[str, ...]:
    """Collect the comment group immediately preceding a declaration node.

    Walks backward through siblings while they are comments with no blank
    line between them and the node. Stops at a trailing comment of the
    previous line. The group must end on a line before the node:
    ``/* note */ foo string`` has no leading comment.

    Args:
        node: The declaration node (field, interface member, method).

    Returns:
        Raw comment texts (markers included) in source order.
    """
    comments: List[str] = []
    sibling = node.prev_named_sibling
    expected_end_row = node.start_point.row

    if sibling is not None and sibling.end_point.row >= node.start_point.row:
        return ()

    while sibling is not None and sibling.type == COMMENT_NODE:
        gap = expected_end_row - sibling.end_point.row
        if gap > 1:
            break  # Blank line gap - stop collecting
        if is_trailing_comment(sibling):
            break

        comments.append(sibling.text.decode("utf-8"))
        expected_end_row = sibling.start_point.row
        sibling = sibling.prev_named_sibling

    comments.reverse()
    return tuple(comments)


def _comment_body_lines(raw: str) -> List[str]:
    """Strip comment markers, returning the body of each physical line."""
    raw = raw.rstrip("\r")
    if raw.startswith("//"):
        return [raw[2:]]
    if raw.startswith("/*"):
        body = raw[2:-2] if raw.endswith("*/") else raw[2:]
        return [line.rstrip("\r") for line in body.split("\n")]
    return [raw]


def render_comment_lines(raw_comments: Tuple[str, ...], strip_space: bool = True) -> Tuple[str, ...]:
    """Render raw comments into documentation lines.

    Args:
        raw_comments: Comment texts as stored in the side-table.
        strip_space: When True, also drop exactly one space after ``//``,
            trailing whitespace, directive lines and blank lines at both
            ends of the group. When False, only the markers are removed.

    Returns:
        One entry per physical comment line.
    """
    lines: List[str] = []
    for raw in raw_comments:
        is_line_comment = raw.startswith("//")
        for body in _comment_body_lines(raw):
            if not strip_space:
                lines.append(body)
                continue
            if is_line_comment:
                if _DIRECTIVE_RE.match(body):
                    continue
                if body.startswith(" "):
                    body = body[1:]
            lines.append(body.rstrip())

    if strip_space:
        while lines and not lines[0]:
            lines.pop(0)
        while lines and not lines[-1]:
            lines.pop()
    return tuple(lines)


def doc_for(
    comment_map: Mapping[Position, Tuple[str, ...]],
    pos: Position,
    strip_space: bool = True,
) -> Tuple[str, ...]:
    """Look up and render the documentation of the declaration at ``pos``.

    Returns an empty tuple when the declaration has no leading comments.
    """
    raw_comments = comment_map.get(pos)
    if not raw_comments:
        return ()
    return render_comment_lines(raw_comments, strip_space=strip_space)
