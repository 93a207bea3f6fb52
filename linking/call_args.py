"""
Same-line comment placement inside call argument lists.

A comment between two arguments may document either of them; the side of
the comment the separating comma sits on decides which.
"""

import logging
from typing import Optional

from linking.models import Comment, SyntaxNode

logger = logging.getLogger(__name__)


def resolve_call_argument(
    node: SyntaxNode,
    comment: Comment,
    source_line: str,
) -> Optional[SyntaxNode]:
    """Pick the argument a same-line comment belongs to.

    Args:
        node: The argument currently visited.
        comment: Last comment of the pending group, ending on ``node``'s line.
        source_line: Text of ``node``'s source line.

    Returns:
        ``node`` or the following argument, or None when the comment sits
        after ``node`` and should wait for a later node.

    Example:
        For ``foo(a, /* mid */ b)`` visiting ``a``, there is no comma between
        the comment and ``b``, so ``b`` is returned.
    """
    following = node.next_sibling()
    if following is None:
        # Last argument in the call
        return node

    end_of_comment = comment.end_column
    start_of_following = following.start_column
    if end_of_comment >= start_of_following:
        logger.debug(
            "Comment ending at column %d follows argument %d; deferring",
            end_of_comment,
            node.node_id,
        )
        return None

    # The following argument may be on another line
    if comment.end_line == following.start_line:
        search_until = start_of_following
    else:
        search_until = len(source_line)
    interval = source_line[end_of_comment:search_until]
    if "," in interval:
        return node
    return following
