"""
Comment Linking Engine

Re-attaches JavaScript source comments to a tree-sitter syntax tree so that
a source-to-source printer can emit each comment next to the code it
documents. Doc comment annotations that the generated code encodes
structurally are normalised away.
"""

from linking.errors import LinkingError, LinkingInvariantError
from linking.models import (
    Comment,
    CommentKind,
    CommentMap,
    KindPolicy,
    LinkedComment,
    SyntaxNode,
    SyntaxTree,
)
from linking.grouper import CommentGroup, starts_new_group
from linking.content_filter import filter_comment_content, preprocess_doc_comment
from linking.call_args import resolve_call_argument
from linking.attachment import link_group_to_node
from linking.floating import place_floating_group, place_trailing_group
from linking.walker import CommentLinker, LinkerSettings, link_comments
from linking.parser import (
    build_syntax_tree,
    collect_comments,
    count_error_nodes,
    create_parser,
    parse_bytes,
    parse_file,
)
from linking.linker import (
    FileLinkResult,
    LinkingStats,
    discover_js_files,
    iter_link_directory,
    iter_link_to_dict_list,
    link_directory,
    link_file,
    link_source,
    link_tree,
)

__all__ = [
    # Data models
    "Comment",
    "CommentKind",
    "CommentMap",
    "CommentGroup",
    "KindPolicy",
    "LinkedComment",
    "SyntaxNode",
    "SyntaxTree",
    "LinkingError",
    "LinkingInvariantError",
    # Core pass
    "starts_new_group",
    "filter_comment_content",
    "preprocess_doc_comment",
    "resolve_call_argument",
    "link_group_to_node",
    "place_floating_group",
    "place_trailing_group",
    "CommentLinker",
    "LinkerSettings",
    "link_comments",
    # Low-level parsing
    "create_parser",
    "parse_bytes",
    "parse_file",
    "count_error_nodes",
    "collect_comments",
    "build_syntax_tree",
    # High-level orchestration
    "FileLinkResult",
    "LinkingStats",
    "discover_js_files",
    "iter_link_directory",
    "iter_link_to_dict_list",
    "link_directory",
    "link_file",
    "link_source",
    "link_tree",
]
