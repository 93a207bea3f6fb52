"""
Unit tests for content_filter.py

Tests doc comment normalisation, plain comment marker removal and empty
comment detection.
"""

import re
import unittest

from linking.content_filter import (
    filter_comment_content,
    is_empty_comment,
    preprocess_doc_comment,
)
from linking.models import CommentKind


DOC = CommentKind.DOC
LINE = CommentKind.LINE
BLOCK = CommentKind.BLOCK


class TestEmptyComment(unittest.TestCase):
    """Test detection of empty comment shells."""

    def test_line_shell(self):
        self.assertTrue(is_empty_comment("//"))
        self.assertTrue(is_empty_comment("  //  "))

    def test_block_shell(self):
        self.assertTrue(is_empty_comment("/* */"))
        self.assertTrue(is_empty_comment("/**/"))

    def test_doc_shell(self):
        self.assertTrue(is_empty_comment("/** */"))
        self.assertTrue(is_empty_comment("/**\n *\n */"))
        self.assertTrue(is_empty_comment("/***/"))

    def test_non_empty(self):
        self.assertFalse(is_empty_comment("// note"))
        self.assertFalse(is_empty_comment("/** Widget. */"))


class TestPreprocessDocComment(unittest.TestCase):
    """Test pulling explanatory prose onto annotation lines."""

    def test_single_line_untouched(self):
        comment = "/** @param {string} name */"
        self.assertEqual(preprocess_doc_comment(comment), comment)

    def test_prose_after_type(self):
        comment = "/**\n * @return {string}\n *     The greeting.\n */"
        self.assertEqual(
            preprocess_doc_comment(comment),
            "/**\n * @return {string} The greeting.\n */",
        )

    def test_prose_after_name(self):
        comment = "/**\n * @param {string} name\n *     The name.\n */"
        self.assertEqual(
            preprocess_doc_comment(comment),
            "/**\n * @param {string} name The name.\n */",
        )

    def test_following_annotation_not_pulled(self):
        comment = "/**\n * @param {string} a\n * @param {string} b\n */"
        self.assertEqual(preprocess_doc_comment(comment), comment)

    def test_closing_delimiter_not_pulled(self):
        comment = "/**\n * @return {string}\n */"
        self.assertEqual(preprocess_doc_comment(comment), comment)


class TestDocRulesWithKeep(unittest.TestCase):
    """Test annotation rules that keep descriptions."""

    def test_param_without_description_removed(self):
        self.assertEqual(filter_comment_content(DOC, "/** @param {number} x */"), "")

    def test_return_without_description_removed(self):
        self.assertEqual(filter_comment_content(DOC, "/** @return {number} */"), "")
        self.assertEqual(filter_comment_content(DOC, "/** @returns {number} */"), "")

    def test_param_description_kept_type_removed(self):
        self.assertEqual(
            filter_comment_content(DOC, "/** @param {string} name The user name. */"),
            "/** @param name The user name. */",
        )

    def test_return_description_kept_type_removed(self):
        self.assertEqual(
            filter_comment_content(DOC, "/** @return {boolean} Whether it worked. */"),
            "/** @return Whether it worked. */",
        )

    def test_export_type_removed(self):
        self.assertEqual(
            filter_comment_content(DOC, "/** @export {number} */"),
            "/** @export */",
        )

    def test_multi_line_block(self):
        comment = (
            "/**\n"
            " * Adds numbers.\n"
            " * @param {number} a\n"
            " * @param {number} b\n"
            " * @return {number}\n"
            " */"
        )
        self.assertEqual(
            filter_comment_content(DOC, comment),
            "/**\n * Adds numbers.\n */",
        )

    def test_description_on_next_line_survives(self):
        comment = "/**\n * @param {string} name\n *     The name.\n */"
        self.assertEqual(
            filter_comment_content(DOC, comment),
            "/**\n * @param name The name.\n */",
        )


class TestDocRulesNoKeep(unittest.TestCase):
    """Test annotation rules that always delete."""

    def test_extends_line_removed_with_newline(self):
        comment = "/**\n * Widget.\n * @extends {Base}\n */"
        self.assertEqual(filter_comment_content(DOC, comment), "/**\n * Widget.\n */")

    def test_extends_alone_is_empty(self):
        self.assertEqual(filter_comment_content(DOC, "/** @extends {Base} */"), "")

    def test_implements_and_type(self):
        comment = "/**\n * Thing.\n * @implements {Iface}\n * @type {number}\n */"
        self.assertEqual(filter_comment_content(DOC, comment), "/**\n * Thing.\n */")

    def test_constructor_marker(self):
        comment = "/**\n * A widget.\n * @constructor\n */"
        self.assertEqual(filter_comment_content(DOC, comment), "/**\n * A widget.\n */")

    def test_visibility_with_remaining_text_keeps_prefix(self):
        self.assertEqual(
            filter_comment_content(DOC, "/** @private Internal helper. */"),
            "/** Internal helper. */",
        )

    def test_const_with_type(self):
        comment = "/**\n * Limit.\n * @const {number}\n */"
        self.assertEqual(filter_comment_content(DOC, comment), "/**\n * Limit.\n */")

    def test_suppress_extra_require(self):
        comment = "/**\n * Import.\n * @suppress {extraRequire}\n */"
        self.assertEqual(filter_comment_content(DOC, comment), "/**\n * Import.\n */")

    def test_typedef_without_description(self):
        self.assertEqual(filter_comment_content(DOC, "/** @typedef {{a: number}} */"), "")

    def test_abstract_marker(self):
        comment = "/**\n * Shape.\n * @abstract\n */"
        self.assertEqual(filter_comment_content(DOC, comment), "/**\n * Shape.\n */")

    def test_unrelated_annotation_kept(self):
        comment = "/**\n * Old.\n * @deprecated Use bar.\n */"
        self.assertEqual(filter_comment_content(DOC, comment), comment)


class TestPlainComments(unittest.TestCase):
    """Test filtering of non-doc comments."""

    def test_plain_comment_unchanged(self):
        self.assertEqual(filter_comment_content(LINE, "// note"), "// note")

    def test_goog_scope_marker_removed(self):
        self.assertEqual(filter_comment_content(LINE, "// goog.scope"), "")

    def test_doc_rules_not_applied_to_block(self):
        comment = "/* @param {number} x */"
        self.assertEqual(filter_comment_content(BLOCK, comment), comment)

    def test_empty_line_comment(self):
        self.assertEqual(filter_comment_content(LINE, "//"), "")

    def test_custom_markers(self):
        markers = (re.compile(r"//\s*eslint-disable-line\s*"),)
        self.assertEqual(
            filter_comment_content(LINE, "// eslint-disable-line", plain_markers=markers),
            "",
        )
        self.assertEqual(
            filter_comment_content(LINE, "// goog.scope", plain_markers=markers),
            "// goog.scope",
        )


class TestIdempotence(unittest.TestCase):
    """Filtering already filtered text changes nothing."""

    SAMPLES = [
        (DOC, "/** @param {string} name The user name. */"),
        (DOC, "/**\n * Adds numbers.\n * @param {number} a\n * @return {number} Sum.\n */"),
        (DOC, "/**\n * @param {string} name\n *     The name.\n */"),
        (DOC, "/**\n * Widget.\n * @extends {Base}\n * @constructor\n */"),
        (DOC, "/** @private Internal helper. */"),
        (LINE, "// keep me"),
        (BLOCK, "/* inline */"),
    ]

    def test_second_pass_is_noop(self):
        for kind, comment in self.SAMPLES:
            with self.subTest(comment=comment):
                once = filter_comment_content(kind, comment)
                self.assertEqual(filter_comment_content(kind, once), once)


if __name__ == "__main__":
    unittest.main()
