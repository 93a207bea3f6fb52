"""
Placement of floating comments.

A floating comment is adjacent to no node: it sits between two statements
separated by blank lines, or after the last statement of a file.
"""

import logging
from typing import Optional, Pattern, Sequence

from linking.attachment import compose_group_text, link_group_to_node
from linking.config import PLACEHOLDER_KIND, PLAIN_COMMENT_REPLACEMENTS
from linking.errors import LinkingInvariantError
from linking.grouper import CommentGroup
from linking.models import CommentMap, SyntaxNode, SyntaxTree

logger = logging.getLogger(__name__)


def _attach_to_placeholder(
    placeholder: SyntaxNode,
    text: str,
    comment_map: CommentMap,
) -> SyntaxNode:
    comment_map.add(placeholder.node_id, text)
    logger.debug(
        "Floating comment anchored on %s %d at line %d",
        PLACEHOLDER_KIND,
        placeholder.node_id,
        placeholder.start_line,
    )
    return placeholder


def place_floating_group(
    tree: SyntaxTree,
    node: SyntaxNode,
    group: CommentGroup,
    comment_map: CommentMap,
    plain_markers: Sequence[Pattern[str]] = PLAIN_COMMENT_REPLACEMENTS,
) -> Optional[SyntaxNode]:
    """Flush ``group`` as a floating comment positioned before ``node``.

    If the parent can hold an extra empty child, a placeholder is inserted
    before ``node`` and takes the comment. Otherwise the comment goes on
    ``node`` itself when it accepts comments, else the same decision is
    repeated one level up. The root always accepts comments.

    Returns:
        The node holding the comment, or None if the group filtered to empty.
    """
    current = node
    while True:
        parent = current.parent
        if parent is None:
            written = link_group_to_node(group, current, comment_map, plain_markers)
            return current if written else None

        if parent.tolerates_placeholder:
            text = compose_group_text(group, plain_markers)
            group.clear()
            if not text:
                return None
            placeholder = tree.insert_placeholder_before(current)
            return _attach_to_placeholder(placeholder, text, comment_map)

        if current.accepts_comments:
            written = link_group_to_node(group, current, comment_map, plain_markers)
            return current if written else None

        current = parent


def place_trailing_group(
    tree: SyntaxTree,
    group: CommentGroup,
    comment_map: CommentMap,
    plain_markers: Sequence[Pattern[str]] = PLAIN_COMMENT_REPLACEMENTS,
) -> Optional[SyntaxNode]:
    """Flush ``group`` onto a placeholder appended after the last node of the file."""
    if tree.root is None:
        raise LinkingInvariantError("Cannot place trailing comments in an empty tree")
    text = compose_group_text(group, plain_markers)
    group.clear()
    if not text:
        return None
    placeholder = tree.append_placeholder(tree.root)
    return _attach_to_placeholder(placeholder, text, comment_map)
