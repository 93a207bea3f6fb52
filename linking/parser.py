"""
Tree-sitter parser initialization and conversion to the linker's data model.

This module parses JavaScript sources, splits the parse tree into the
position-ordered comment stream and a comment-free syntax tree, and
converts tree-sitter's byte columns to character columns.
"""

import logging
from typing import Iterator, List, Optional, Tuple

import tree_sitter_javascript as tsjs
from tree_sitter import Language, Node, Parser, Tree

from linking.config import COMMENT_NODE
from linking.models import Comment, CommentKind, KindPolicy, SyntaxTree

# Configure logging
logger = logging.getLogger(__name__)

# Module-level language constant
JS_LANGUAGE = Language(tsjs.language())


def create_parser() -> Parser:
    """Create and configure a tree-sitter parser for JavaScript.

    Returns:
        A Parser instance configured with the JavaScript language.

    Example:
        >>> parser = create_parser()
        >>> tree = parser.parse(b"let x = 1; // one")
    """
    parser = Parser(JS_LANGUAGE)
    logger.debug("Created tree-sitter JavaScript parser")
    return parser


def parse_bytes(source: bytes) -> Tree:
    """Parse raw bytes of JavaScript source code.

    Args:
        source: UTF-8 encoded bytes of JavaScript source code.

    Returns:
        A Tree object representing the parsed AST.

    Raises:
        TypeError: If source is not bytes.
    """
    if not isinstance(source, bytes):
        raise TypeError(f"Source must be bytes, got {type(source).__name__}")

    parser = create_parser()
    tree = parser.parse(source)

    logger.debug(f"Parsed {len(source)} bytes of JavaScript code")
    return tree


def parse_file(file_path: str) -> Tuple[Tree, bytes]:
    """Parse a JavaScript source file from disk.

    Args:
        file_path: Path to the .js, .mjs, .cjs or .jsx file.

    Returns:
        A tuple of (Tree, source_bytes).

    Raises:
        FileNotFoundError: If the file does not exist.
        IOError: If the file cannot be read.
    """
    try:
        with open(file_path, "rb") as f:
            source_bytes = f.read()
    except FileNotFoundError:
        logger.error(f"File not found: {file_path}")
        raise
    except IOError as e:
        logger.error(f"Error reading file {file_path}: {e}")
        raise

    tree = parse_bytes(source_bytes)
    logger.debug(f"Parsed file: {file_path}")
    return tree, source_bytes


def _iter_nodes(tree: Tree) -> Iterator[Node]:
    """Yield every node of the tree, named or not, in source order."""
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def count_error_nodes(tree: Tree) -> int:
    """Count ERROR and MISSING nodes in a parsed tree."""
    return sum(1 for node in _iter_nodes(tree) if node.type == "ERROR" or node.is_missing)


def split_source_lines(source: bytes) -> List[str]:
    """Decode source bytes into lines without their line terminators."""
    text = source.decode("utf-8", errors="replace")
    return [line.rstrip("\r") for line in text.split("\n")]


class PositionMapper:
    """Converts tree-sitter (row, byte column) points to (line, char column)."""

    def __init__(self, source: bytes):
        self._lines = source.split(b"\n")
        self._ascii = [line.isascii() for line in self._lines]

    def convert(self, point: Tuple[int, int]) -> Tuple[int, int]:
        row, byte_column = point[0], point[1]
        if row >= len(self._lines) or self._ascii[row]:
            return row + 1, byte_column
        prefix = self._lines[row][:byte_column]
        return row + 1, len(prefix.decode("utf-8", errors="replace"))


def collect_comments(
    tree: Tree,
    source: bytes,
    mapper: Optional[PositionMapper] = None,
) -> List[Comment]:
    """Extract the comments of a parsed file as a position-ordered stream.

    Args:
        tree: The parsed AST.
        source: The raw source bytes.
        mapper: Position converter; built from ``source`` if omitted.

    Returns:
        Comments sorted by start position.
    """
    mapper = mapper or PositionMapper(source)
    nodes = [node for node in _iter_nodes(tree) if node.type == COMMENT_NODE]
    nodes.sort(key=lambda node: node.start_byte)

    comments = []
    for node in nodes:
        raw_text = source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")
        start_line, start_column = mapper.convert(node.start_point)
        end_line, end_column = mapper.convert(node.end_point)
        comments.append(
            Comment(
                kind=CommentKind.classify(raw_text),
                start_line=start_line,
                start_column=start_column,
                end_line=end_line,
                end_column=end_column,
                raw_text=raw_text,
            )
        )
    logger.debug(f"Collected {len(comments)} comments")
    return comments


def build_syntax_tree(
    tree: Tree,
    source: bytes,
    policy: Optional[KindPolicy] = None,
    mapper: Optional[PositionMapper] = None,
) -> SyntaxTree:
    """Convert a tree-sitter tree into the linker's syntax tree.

    Only named nodes are kept; punctuation and comment nodes are dropped.
    Node ids are assigned in pre-order.

    Args:
        tree: The parsed AST.
        source: The raw source bytes.
        policy: Kind policy deciding which nodes accept comments.
        mapper: Position converter; built from ``source`` if omitted.

    Returns:
        The converted SyntaxTree.
    """
    mapper = mapper or PositionMapper(source)
    syntax_tree = SyntaxTree(split_source_lines(source), policy)

    cursor = tree.walk()
    ts_root = cursor.node
    root = syntax_tree.add_node(
        ts_root.type,
        mapper.convert(ts_root.start_point),
        mapper.convert(ts_root.end_point),
    )
    if not cursor.goto_first_child():
        return syntax_tree

    parents = [root]
    while True:
        ts_node = cursor.node
        if ts_node.is_named and ts_node.type != COMMENT_NODE:
            node = syntax_tree.add_node(
                ts_node.type,
                mapper.convert(ts_node.start_point),
                mapper.convert(ts_node.end_point),
                parent=parents[-1],
                field_name=cursor.field_name,
            )
            if cursor.goto_first_child():
                parents.append(node)
                continue

        # Move to the next sibling, climbing as far as needed
        while not cursor.goto_next_sibling():
            cursor.goto_parent()
            parents.pop()
            if not parents:
                logger.debug(f"Built syntax tree with {len(syntax_tree)} nodes")
                return syntax_tree
