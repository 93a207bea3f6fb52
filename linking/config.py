"""
Configuration constants for comment linking.

Defines the comment normalisation pattern tables and the tree-sitter
JavaScript node type strings used to decide where comments may attach.
All tables are built once at import time and never mutated.
"""

import re
from typing import FrozenSet, Pattern, Tuple

# Matches all three empty comment shells: `//`, `/* */` and `/** */`
EMPTY_COMMENT_PATTERN: Pattern[str] = re.compile(
    r"^\s*(//|/\*(\s|\*)*\*/)\s*$"
)

# Optionally matches the beginning of a doc comment line (` * `)
BEGIN_DOC_LINE: str = r"(?P<block>[ \t]*\*[ \t]*)?"

# Optionally matches the end of a line
EOL: str = r"(?P<eol>[ \t]*\n)?"

# Delete everything except the `block` and `keep` groups.
# Every pattern must define a `keep` group. Order matters.
DOC_REPLACEMENTS_WITH_KEEP: Tuple[Pattern[str], ...] = (
    # @param and @return without a description
    re.compile(
        BEGIN_DOC_LINE
        + r"@param[ \t]*(\{[^@]*\})[ \t]*[\w$]+[ \t]*(?P<keep>\*/|\n)"
    ),
    re.compile(BEGIN_DOC_LINE + r"@returns?[ \t]*(\{.*\})[ \t]*(?P<keep>\*/|\n)"),
    re.compile(BEGIN_DOC_LINE + r"(?P<keep>@(param|returns?))[ \t]*(\{.*\})"),
    # Type expression on @export
    re.compile(BEGIN_DOC_LINE + r"(?P<keep>@export)[ \t]*(\{.*\})"),
)

# Delete everything matched. Every pattern starts with BEGIN_DOC_LINE and
# ends with EOL. Order matters.
DOC_REPLACEMENTS_NO_KEEP: Tuple[Pattern[str], ...] = (
    re.compile(BEGIN_DOC_LINE + r"@(extends|implements|type)[ \t]*(\{[^@]*\})[ \t]*" + EOL),
    re.compile(BEGIN_DOC_LINE + r"@(constructor|interface|record)[ \t]*" + EOL),
    re.compile(
        BEGIN_DOC_LINE
        + r"@(private|protected|public|package|const|enum)[ \t]*(\{.*\})?[ \t]*"
        + EOL
    ),
    re.compile(BEGIN_DOC_LINE + r"@suppress[ \t]*\{extraRequire\}[ \t]*" + EOL),
    # @typedef without a description
    re.compile(BEGIN_DOC_LINE + r"@typedef[ \t]*(\{.*\})" + EOL, re.DOTALL),
    re.compile(BEGIN_DOC_LINE + r"@abstract" + EOL, re.DOTALL),
)

# Literal markers removed from plain (non-doc) comments
PLAIN_COMMENT_REPLACEMENTS: Tuple[Pattern[str], ...] = (
    re.compile(r"//\s*goog.scope\s*"),
)

# `@foo {T} \n * Explanation` -> `@foo {T} Explanation`
DOC_PROSE_AFTER_TYPE: Pattern[str] = re.compile(
    r"\}\s*\*\s{2,}(?![@,/\n])(?P<prose>\S+)"
)

# `@foo {T} name \n * Explanation` -> `@foo {T} name Explanation`
DOC_PROSE_AFTER_NAME: Pattern[str] = re.compile(
    r"\}\s+(?P<identifier>\S+)\s*\*[^\S\n\r@/]{2,}"
)

# Comment node type in the tree-sitter JavaScript grammar
COMMENT_NODE: str = "comment"

# Kind given to inserted placeholder nodes
PLACEHOLDER_KIND: str = "empty"

# Containers that survive code generation with an extra empty child
BLOCK_LIKE_KINDS: FrozenSet[str] = frozenset({
    "program",          # File root
    "statement_block",  # { ... }
})

# Comments assigned to these kinds are never emitted by the printer
IGNORE_COMMENT_KINDS: FrozenSet[str] = frozenset({
    "statement_block",
    "statement_identifier",  # Label names
    "class_body",
    "arguments",
    "formal_parameters",
})

# Member access expressions whose property operand loses comments
MEMBER_ACCESS_KINDS: FrozenSet[str] = frozenset({
    "member_expression",
})

# Field name of the property operand of a member access
PROPERTY_FIELD: str = "property"

# Argument lists of call and new expressions
ARGUMENT_LIST_KINDS: FrozenSet[str] = frozenset({
    "arguments",
})

# Doc comment opener; `/**/` is an ordinary block comment
DOC_COMMENT_PREFIX: str = "/**"

# JavaScript file extensions
JS_EXTENSIONS: FrozenSet[str] = frozenset({
    ".js",
    ".mjs",
    ".cjs",
    ".jsx",
})

# Directories never descended into during discovery
SKIPPED_DIRECTORIES: FrozenSet[str] = frozenset({
    "node_modules",
    "build",
    "dist",
    "out",
    "venv",
    "__pycache__",
})

# Linking policy defaults
DEFAULT_CONTINUE_ON_ERROR: bool = True
