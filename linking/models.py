"""
Data models for comment linking.

Comments and syntax nodes are produced once per file by the parser layer.
Nodes carry stable integer ids so that every map built during linking is
keyed by id rather than by object identity.
"""

import itertools
import logging
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, FrozenSet, Iterator, List, Optional, Any, Tuple

from linking.config import (
    ARGUMENT_LIST_KINDS,
    BLOCK_LIKE_KINDS,
    DOC_COMMENT_PREFIX,
    IGNORE_COMMENT_KINDS,
    MEMBER_ACCESS_KINDS,
    PLACEHOLDER_KIND,
    PROPERTY_FIELD,
)
from linking.errors import LinkingError, LinkingInvariantError

logger = logging.getLogger(__name__)


class CommentKind(str, Enum):
    """Lexical kind of a raw comment."""

    LINE = "line"
    BLOCK = "block"
    DOC = "doc"

    @classmethod
    def classify(cls, raw_text: str) -> "CommentKind":
        """Classify a raw comment by its opening delimiter.

        Args:
            raw_text: Comment text including its delimiters.

        Returns:
            DOC for `/** ... */`, LINE for `// ...`, BLOCK otherwise.
        """
        if raw_text.startswith("//"):
            return cls.LINE
        if raw_text.startswith(DOC_COMMENT_PREFIX) and not raw_text.startswith("/**/"):
            return cls.DOC
        return cls.BLOCK


@dataclass(frozen=True)
class Comment:
    """A single raw comment as produced by the tokenizer.

    Attributes:
        kind: LINE, BLOCK or DOC.
        start_line: 1-indexed line of the first character.
        start_column: 0-indexed column of the first character.
        end_line: 1-indexed line of the last character.
        end_column: 0-indexed column just past the last character.
        raw_text: Full comment text including delimiters.
    """

    kind: CommentKind
    start_line: int
    start_column: int
    end_line: int
    end_column: int
    raw_text: str

    @property
    def is_doc(self) -> bool:
        return self.kind is CommentKind.DOC


@dataclass(frozen=True)
class KindPolicy:
    """Per-kind metadata used to derive node capabilities."""

    block_like_kinds: FrozenSet[str] = BLOCK_LIKE_KINDS
    ignore_comment_kinds: FrozenSet[str] = IGNORE_COMMENT_KINDS
    member_access_kinds: FrozenSet[str] = MEMBER_ACCESS_KINDS
    property_field: str = PROPERTY_FIELD
    argument_list_kinds: FrozenSet[str] = ARGUMENT_LIST_KINDS


@dataclass(eq=False)
class SyntaxNode:
    """A node of the syntax tree seen by the linker.

    Attributes:
        node_id: Stable integer identity, unique within one tree.
        kind: Grammar node type (e.g. ``expression_statement``).
        start_line: 1-indexed start line.
        start_column: 0-indexed start column.
        end_line: 1-indexed end line.
        end_column: 0-indexed end column (exclusive).
        field_name: Field this node fills in its parent, if any.
        accepts_comments: Whether a comment may be stored on this node.
        tolerates_placeholder: Whether an empty child may be inserted.
        is_placeholder: True for nodes inserted to anchor floating comments.
        child_index: Position in the parent's children, kept current on insert.
    """

    node_id: int
    kind: str
    start_line: int
    start_column: int
    end_line: int
    end_column: int
    field_name: Optional[str] = None
    accepts_comments: bool = True
    tolerates_placeholder: bool = False
    is_placeholder: bool = False
    parent: Optional["SyntaxNode"] = field(default=None, repr=False)
    children: List["SyntaxNode"] = field(default_factory=list, repr=False)
    child_index: int = field(default=-1, repr=False)

    def index_in_parent(self) -> int:
        if self.parent is None:
            return -1
        idx = self.child_index
        siblings = self.parent.children
        if 0 <= idx < len(siblings) and siblings[idx] is self:
            return idx
        raise LinkingInvariantError(
            f"Node {self.node_id} ({self.kind}) is missing from its parent's children"
        )

    def next_sibling(self) -> Optional["SyntaxNode"]:
        """Return the following sibling, or None for the last child."""
        idx = self.index_in_parent()
        if idx < 0 or idx + 1 >= len(self.parent.children):
            return None
        return self.parent.children[idx + 1]

    def iter_ancestors(self) -> Iterator["SyntaxNode"]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent


class SyntaxTree:
    """Syntax tree for a single file.

    Owns the node id counter, so placeholders inserted during linking
    receive ids that never collide with parsed nodes.
    """

    def __init__(
        self,
        source_lines: Optional[List[str]] = None,
        policy: Optional[KindPolicy] = None,
    ):
        self.policy = policy or KindPolicy()
        self.source_lines: List[str] = list(source_lines or [])
        self.root: Optional[SyntaxNode] = None
        self._nodes: Dict[int, SyntaxNode] = {}
        self._ids = itertools.count()
        self.placeholder_count = 0

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, node_id: int) -> SyntaxNode:
        return self._nodes[node_id]

    def source_line(self, line: int) -> str:
        """Return the text of a 1-indexed source line, or '' if out of range."""
        if 1 <= line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return ""

    def add_node(
        self,
        kind: str,
        start: Tuple[int, int],
        end: Tuple[int, int],
        parent: Optional[SyntaxNode] = None,
        field_name: Optional[str] = None,
    ) -> SyntaxNode:
        """Create a node and append it to ``parent``'s children.

        The first node added without a parent becomes the root.

        Args:
            kind: Grammar node type.
            start: (line, column) of the first character, 1-indexed line.
            end: (line, column) just past the last character.
            parent: Parent node, or None for the root.
            field_name: Field name the node fills in its parent.

        Returns:
            The new node.
        """
        if parent is None and self.root is not None:
            raise LinkingError("Syntax tree already has a root node")

        node = SyntaxNode(
            node_id=next(self._ids),
            kind=kind,
            start_line=start[0],
            start_column=start[1],
            end_line=end[0],
            end_column=end[1],
            field_name=field_name,
            accepts_comments=self._accepts_comments(kind, parent, field_name),
            tolerates_placeholder=kind in self.policy.block_like_kinds,
            parent=parent,
        )
        self._nodes[node.node_id] = node
        if parent is None:
            self.root = node
        else:
            node.child_index = len(parent.children)
            parent.children.append(node)
        return node

    def _accepts_comments(
        self,
        kind: str,
        parent: Optional[SyntaxNode],
        field_name: Optional[str],
    ) -> bool:
        # The file root always accepts comments.
        if parent is None:
            return True
        if kind in self.policy.ignore_comment_kinds:
            return False
        if (
            parent.kind in self.policy.member_access_kinds
            and field_name == self.policy.property_field
        ):
            return False
        return True

    def _new_placeholder(self, parent: SyntaxNode, line: int, column: int) -> SyntaxNode:
        node = SyntaxNode(
            node_id=next(self._ids),
            kind=PLACEHOLDER_KIND,
            start_line=line,
            start_column=column,
            end_line=line,
            end_column=column,
            is_placeholder=True,
            parent=parent,
        )
        self._nodes[node.node_id] = node
        self.placeholder_count += 1
        return node

    def insert_placeholder_before(self, anchor: SyntaxNode) -> SyntaxNode:
        """Insert an empty placeholder immediately before ``anchor``."""
        parent = anchor.parent
        if parent is None:
            raise LinkingInvariantError("Cannot insert a placeholder before the root node")
        idx = anchor.index_in_parent()
        placeholder = self._new_placeholder(parent, anchor.start_line, anchor.start_column)
        parent.children.insert(idx, placeholder)
        for position in range(idx, len(parent.children)):
            parent.children[position].child_index = position
        logger.debug(
            "Inserted placeholder %d before %s at line %d",
            placeholder.node_id,
            anchor.kind,
            anchor.start_line,
        )
        return placeholder

    def append_placeholder(self, parent: SyntaxNode) -> SyntaxNode:
        """Append an empty placeholder as the last child of ``parent``."""
        placeholder = self._new_placeholder(parent, parent.end_line, parent.end_column)
        placeholder.child_index = len(parent.children)
        parent.children.append(placeholder)
        logger.debug(
            "Appended placeholder %d to %s", placeholder.node_id, parent.kind
        )
        return placeholder

    def iter_preorder(self) -> Iterator[SyntaxNode]:
        """Yield nodes in source order using an explicit stack."""
        if self.root is None:
            return
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


class CommentMap:
    """Mapping from node id to the final comment text for that node.

    Populated during a single linking pass and frozen when the pass ends.
    Text already stored for a node is never replaced: a later group that
    lands on the same node is appended after it.
    """

    def __init__(self) -> None:
        self._entries: Dict[int, str] = {}
        self._frozen = False

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._entries

    def __iter__(self) -> Iterator[int]:
        return iter(self._entries)

    def add(self, node_id: int, text: str) -> None:
        if self._frozen:
            raise LinkingError("Comment map is frozen; the linking pass has completed")
        existing = self._entries.get(node_id)
        if existing is not None:
            logger.debug("Node %d already holds a comment; appending", node_id)
            text = existing + "\n" + text
        self._entries[node_id] = text

    def get(self, node_id: int) -> Optional[str]:
        return self._entries.get(node_id)

    def items(self) -> Iterator[Tuple[int, str]]:
        return iter(self._entries.items())

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def to_dict(self) -> Dict[int, str]:
        return dict(self._entries)


@dataclass
class LinkedComment:
    """One output entry, in a form suitable for JSON serialization.

    Attributes:
        file_path: Path of the source file, relative to the scanned root.
        node_id: Id of the node holding the comment.
        node_kind: Grammar type of that node (``empty`` for placeholders).
        line: 1-indexed line of the node.
        column: 0-indexed column of the node.
        placeholder: Whether the node was inserted to anchor the comment.
        text: Final comment text.
    """

    file_path: str
    node_id: int
    node_kind: str
    line: int
    column: int
    placeholder: bool
    text: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert the entry to a dictionary suitable for JSON serialization."""
        return asdict(self)
