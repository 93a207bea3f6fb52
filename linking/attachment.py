"""
Committing comment groups to the output mapping.
"""

import logging
from typing import Pattern, Sequence

from linking.config import PLAIN_COMMENT_REPLACEMENTS
from linking.content_filter import filter_comment_content
from linking.errors import LinkingInvariantError
from linking.grouper import CommentGroup
from linking.models import CommentMap, SyntaxNode

logger = logging.getLogger(__name__)

GROUP_SEPARATOR: str = "\n"


def compose_group_text(
    group: CommentGroup,
    plain_markers: Sequence[Pattern[str]] = PLAIN_COMMENT_REPLACEMENTS,
) -> str:
    """Filter each comment of a group and join the survivors in source order."""
    parts = []
    for comment in group:
        text = filter_comment_content(comment.kind, comment.raw_text, plain_markers)
        if text:
            parts.append(text)
    return GROUP_SEPARATOR.join(parts)


def find_comment_destination(node: SyntaxNode) -> SyntaxNode:
    """Climb from ``node`` to the nearest node that can hold a comment.

    Raises:
        LinkingInvariantError: If the climb passes the root.
    """
    target = node
    while not target.accepts_comments:
        if target.parent is None:
            raise LinkingInvariantError(
                f"No ancestor of node {node.node_id} ({node.kind}) accepts comments"
            )
        target = target.parent
    return target


def link_group_to_node(
    group: CommentGroup,
    node: SyntaxNode,
    comment_map: CommentMap,
    plain_markers: Sequence[Pattern[str]] = PLAIN_COMMENT_REPLACEMENTS,
) -> bool:
    """Flush ``group`` onto ``node`` (or its nearest eligible ancestor).

    The group is always cleared. Nothing is written when every comment
    filters to empty.

    Returns:
        True if an entry was written.
    """
    target = find_comment_destination(node)
    text = compose_group_text(group, plain_markers)
    group.clear()
    if not text:
        return False
    comment_map.add(target.node_id, text)
    logger.debug(
        "Linked comment to %s %d at %d:%d",
        target.kind,
        target.node_id,
        target.start_line,
        target.start_column,
    )
    return True
