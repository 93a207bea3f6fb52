"""
Comment content normalisation.

Removes doc comment annotations whose information the generated code already
carries structurally (types, visibility, constructor markers) and strips
build-system markers from plain comments. Rules are applied in order; later
rules see the output of earlier ones.
"""

import logging
from typing import Pattern, Sequence

from linking.config import (
    DOC_PROSE_AFTER_NAME,
    DOC_PROSE_AFTER_TYPE,
    DOC_REPLACEMENTS_NO_KEEP,
    DOC_REPLACEMENTS_WITH_KEEP,
    EMPTY_COMMENT_PATTERN,
    PLAIN_COMMENT_REPLACEMENTS,
)
from linking.models import CommentKind

logger = logging.getLogger(__name__)


def preprocess_doc_comment(comment: str) -> str:
    """Move explanatory text following an annotation onto the annotation's line.

    The stripping rules assume an annotation and its description share a
    line. When the description starts on the next line it would otherwise
    be orphaned, so ``@foo {T} \\n * Explanation`` becomes
    ``@foo {T} Explanation`` and ``@foo {T} name \\n * Explanation`` becomes
    ``@foo {T} name Explanation``. Single-line comments are returned as is.

    Lines continuing with another annotation, a closing ``*/`` or an empty
    ``*`` row are left alone.

    Args:
        comment: Raw doc comment text.

    Returns:
        Comment text with prose pulled up onto annotation lines.
    """
    if "\n" not in comment:
        return comment
    comment = DOC_PROSE_AFTER_TYPE.sub(r"} \g<prose>", comment)
    comment = DOC_PROSE_AFTER_NAME.sub(r"} \g<identifier> ", comment)
    return comment


def _apply_keep_rule(pattern: Pattern[str], comment: str) -> str:
    match = pattern.search(comment)
    if match is None:
        return comment
    keep = match.group("keep")
    if keep is not None and keep.strip():
        # Keep the description, drop the type expression
        return pattern.sub(r"\g<block>\g<keep>", comment)
    return pattern.sub("", comment)


def _apply_no_keep_rule(pattern: Pattern[str], comment: str) -> str:
    match = pattern.search(comment)
    if match is None:
        return comment
    eol = match.group("eol")
    if eol is not None and not eol.strip():
        # The whole line matched; remove it with its line break
        return pattern.sub("", comment)
    # Text remains on the line, so keep the leading ` * `
    return pattern.sub(r"\g<block>", comment)


def is_empty_comment(comment: str) -> bool:
    """Check whether a comment is only an empty `//`, `/* */` or `/** */` shell."""
    return EMPTY_COMMENT_PATTERN.search(comment) is not None


def filter_comment_content(
    kind: CommentKind,
    comment: str,
    plain_markers: Sequence[Pattern[str]] = PLAIN_COMMENT_REPLACEMENTS,
) -> str:
    """Remove redundant annotations and markers from a comment.

    Args:
        kind: Lexical kind of the comment.
        comment: Raw comment text including delimiters.
        plain_markers: Patterns deleted from non-doc comments, in order.

    Returns:
        The normalised comment, or '' when nothing meaningful remains.

    Example:
        >>> filter_comment_content(CommentKind.DOC, "/** @param {number} x */")
        ''
    """
    if kind is CommentKind.DOC:
        comment = preprocess_doc_comment(comment)
        for pattern in DOC_REPLACEMENTS_WITH_KEEP:
            comment = _apply_keep_rule(pattern, comment)
        for pattern in DOC_REPLACEMENTS_NO_KEEP:
            comment = _apply_no_keep_rule(pattern, comment)
    else:
        for pattern in plain_markers:
            comment = pattern.sub("", comment)

    if not comment.strip() or is_empty_comment(comment):
        logger.debug("Comment reduced to an empty shell; dropping")
        return ""
    return comment
