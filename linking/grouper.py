"""
Comment grouping.

Adjacent comments are grouped together so that a single coherent thought is
never split across two nodes. Groups are separated by blank lines or lines
of code.
"""

from typing import Iterator, List, Optional

from linking.models import Comment


def line_gap(previous: Comment, following: Comment) -> int:
    """Return the number of lines between the end of one comment and the start of the next."""
    return following.start_line - previous.end_line


def starts_new_group(previous: Comment, following: Comment) -> bool:
    """Check whether ``following`` must open a fresh group.

    A gap of one line is the line break after ``previous``; anything larger
    means a blank line or code sits between the two comments.
    """
    return line_gap(previous, following) > 1


class CommentGroup:
    """Ordered run of visually adjacent comments, flushed as one unit."""

    def __init__(self, comments: Optional[List[Comment]] = None):
        self._comments: List[Comment] = list(comments or [])

    def __len__(self) -> int:
        return len(self._comments)

    def __iter__(self) -> Iterator[Comment]:
        return iter(self._comments)

    def __bool__(self) -> bool:
        return bool(self._comments)

    def append(self, comment: Comment) -> None:
        self._comments.append(comment)

    def clear(self) -> None:
        self._comments.clear()

    @property
    def comments(self) -> List[Comment]:
        return list(self._comments)

    @property
    def last_comment(self) -> Optional[Comment]:
        return self._comments[-1] if self._comments else None

    def __repr__(self) -> str:
        lines = [f"{c.start_line}-{c.end_line}" for c in self._comments]
        return f"CommentGroup({', '.join(lines)})"
