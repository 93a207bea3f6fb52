"""
Single forward pass linking a comment stream to a syntax tree.

Nodes are visited in source order (pre-order). For each node the pending
comment group is compared against the node's line: a group ending on the
line above, or earlier on the same line, attaches to the node; a group
separated from the next comment by a blank line is flushed as a floating
comment; anything still below the node waits for a later node. Comments
left over when the tree is exhausted are appended at the end of the file.
"""

import logging
from dataclasses import dataclass, field
from typing import Pattern, Sequence, Tuple

from linking.attachment import link_group_to_node
from linking.call_args import resolve_call_argument
from linking.config import PLAIN_COMMENT_REPLACEMENTS
from linking.errors import LinkingInvariantError
from linking.floating import place_floating_group, place_trailing_group
from linking.grouper import CommentGroup, starts_new_group
from linking.models import Comment, CommentMap, KindPolicy, SyntaxNode, SyntaxTree

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinkerSettings:
    """Immutable settings for one or more linking passes."""

    policy: KindPolicy = field(default_factory=KindPolicy)
    plain_markers: Tuple[Pattern[str], ...] = PLAIN_COMMENT_REPLACEMENTS


class LinkerState:
    """Cursor into the comment stream plus the group being accumulated.

    ``cursor`` always points at the last comment pulled into ``group``; the
    group may already have been flushed, in which case it is empty.
    """

    def __init__(self, comments: Sequence[Comment]):
        _check_ordering(comments)
        self.comments: Tuple[Comment, ...] = tuple(comments)
        self.cursor = 0
        self.group = CommentGroup(list(self.comments[:1]))

    def is_done(self) -> bool:
        """Return True once every comment has been pulled from the stream."""
        return self.cursor >= len(self.comments)

    def has_remaining(self) -> bool:
        """Return True if comments beyond the current one are still unread."""
        return self.cursor < len(self.comments) - 1

    def current(self) -> Comment:
        if self.cursor >= len(self.comments):
            raise LinkingInvariantError(
                f"Comment cursor {self.cursor} is past the end of the stream"
            )
        return self.comments[self.cursor]

    def following(self) -> Comment:
        idx = self.cursor + 1
        if idx >= len(self.comments):
            raise LinkingInvariantError(f"No comment follows cursor {self.cursor}")
        return self.comments[idx]

    def last_line(self) -> int:
        return self.current().end_line

    def is_adjacent_to(self, line: int) -> bool:
        """Check whether the current comment touches ``line``.

        The comment must end on ``line`` or on the line above it. In the
        latter case the next comment must not start on that same line.
        """
        comment_line = self.last_line()
        return comment_line == line or (
            comment_line == line - 1 and comment_line != self.following().start_line
        )

    def advance(self) -> None:
        """Pull the next comment into the group and move the cursor."""
        if self.has_remaining():
            self.group.append(self.following())
        self.cursor += 1


def _check_ordering(comments: Sequence[Comment]) -> None:
    for previous, following in zip(comments, comments[1:]):
        if (following.start_line, following.start_column) < (
            previous.end_line,
            previous.end_column,
        ):
            raise LinkingInvariantError(
                "Comments are not position-ordered: "
                f"{previous.start_line}:{previous.start_column} overlaps or follows "
                f"{following.start_line}:{following.start_column}"
            )


class CommentLinker:
    """Links the comments of one file to its syntax tree."""

    def __init__(
        self,
        tree: SyntaxTree,
        comments: Sequence[Comment],
        settings: LinkerSettings = LinkerSettings(),
    ):
        self.tree = tree
        self.settings = settings
        self.state = LinkerState(comments)
        self.comment_map = CommentMap()

    def run(self) -> CommentMap:
        """Run the pass and return the frozen comment map."""
        if self.state.is_done():
            self.comment_map.freeze()
            return self.comment_map
        if self.tree.root is None:
            raise LinkingInvariantError("Cannot link comments to a tree without a root")

        for node in self.tree.iter_preorder():
            if self.state.is_done():
                break
            self._visit(node)

        if not self.state.is_done():
            self._flush_end_of_file()

        self.comment_map.freeze()
        logger.debug(
            "Linked %d comments into %d entries (%d placeholders)",
            len(self.state.comments),
            len(self.comment_map),
            self.tree.placeholder_count,
        )
        return self.comment_map

    def _link(self, node: SyntaxNode) -> None:
        link_group_to_node(
            self.state.group, node, self.comment_map, self.settings.plain_markers
        )

    def _flush_floating(self, node: SyntaxNode) -> None:
        place_floating_group(
            self.tree,
            node,
            self.state.group,
            self.comment_map,
            self.settings.plain_markers,
        )

    def _visit(self, node: SyntaxNode) -> None:
        state = self.state
        # The file root is never a direct target
        if node.parent is None:
            return

        line = node.start_line
        if state.last_line() > line:
            # Comment belongs to something later
            return

        advanced = False
        while state.has_remaining() and not state.is_adjacent_to(line):
            if state.last_line() > line:
                return
            if starts_new_group(state.current(), state.following()):
                self._flush_floating(node)
            state.advance()
            advanced = True

        last_line = state.last_line()
        if last_line == line:
            # Same line as the code: make sure this is the right node
            if node.parent.kind in self.settings.policy.argument_list_kinds:
                target = resolve_call_argument(
                    node, state.current(), self.tree.source_line(line)
                )
                if target is None:
                    return
                self._link(target)
            elif state.current().end_column < node.start_column:
                self._link(node)
            else:
                return
        elif last_line == line - 1:
            self._link(node)
        elif not state.has_remaining() and not advanced:
            self._flush_floating(node)

        if not advanced:
            state.advance()

    def _flush_end_of_file(self) -> None:
        state = self.state
        while state.has_remaining():
            if starts_new_group(state.current(), state.following()):
                place_trailing_group(
                    self.tree, state.group, self.comment_map, self.settings.plain_markers
                )
            state.advance()
        place_trailing_group(
            self.tree, state.group, self.comment_map, self.settings.plain_markers
        )
        state.advance()


def link_comments(
    tree: SyntaxTree,
    comments: Sequence[Comment],
    settings: LinkerSettings = LinkerSettings(),
) -> CommentMap:
    """Link a position-ordered comment stream to ``tree``.

    Placeholder nodes may be inserted into ``tree`` to anchor floating
    comments.

    Args:
        tree: Syntax tree of one file.
        comments: Comments of the same file, in source order.
        settings: Kind policy and plain-comment markers.

    Returns:
        Frozen mapping from node id to comment text.

    Raises:
        LinkingInvariantError: If the inputs violate ordering assumptions.
    """
    return CommentLinker(tree, comments, settings).run()
