"""
Exceptions raised while linking comments to a syntax tree.
"""


class LinkingError(RuntimeError):
    """Base class for comment linking failures."""


class LinkingInvariantError(LinkingError):
    """Raised when the linking pass reaches a state its inputs rule out.

    Comments are expected to be position-sorted and non-overlapping and node
    positions to follow source order. Hitting this error aborts the current
    file rather than risking a misplaced comment.
    """
