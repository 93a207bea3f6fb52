"""
Integration tests for linker.py

Tests the high-level orchestration functions against real parses.
"""

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from linking import linker
from linking.errors import LinkingInvariantError
from linking.linker import (
    LinkingStats,
    discover_js_files,
    iter_link_to_dict_list,
    link_directory,
    link_file,
    link_source,
    link_tree,
)
from linking.parser import parse_bytes, parse_file

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class TestLinkingStats(unittest.TestCase):
    """Test LinkingStats class."""

    def test_creation(self):
        stats = LinkingStats()
        self.assertEqual(stats.files_processed, 0)
        self.assertEqual(stats.files_failed, 0)
        self.assertEqual(stats.entries_written, 0)

    def test_record(self):
        """Test that a file result is folded into the counters."""
        stats = LinkingStats()
        stats.record(link_source(b"// a\nfoo();\n\n// b\n"))
        self.assertEqual(stats.files_processed, 1)
        self.assertEqual(stats.comments_seen, 2)
        self.assertEqual(stats.entries_written, 2)
        self.assertEqual(stats.placeholders_inserted, 1)
        self.assertEqual(stats.to_dict()["comments_seen"], 2)
        self.assertIn("processed=1", str(stats))


class TestLinkSource(unittest.TestCase):
    """End-to-end scenarios on in-memory sources."""

    def test_comment_above_statement(self):
        result = link_source(b"// note\nfoo();\n")
        self.assertEqual(result.comment_map.to_dict(), {1: "// note"})
        self.assertEqual(result.tree.get(1).kind, "expression_statement")

    def test_doc_comment_filtered(self):
        result = link_source(b"/** @param {number} x The value. */\nfunction f(x) {}\n")
        self.assertEqual(result.comment_map.to_dict(), {1: "/** @param x The value. */"})

    def test_blank_line_makes_floating_comment(self):
        result = link_source(b"// first\n\n// second\nfoo();\n")
        root = result.tree.root
        placeholder, stmt = root.children
        self.assertTrue(placeholder.is_placeholder)
        self.assertEqual(placeholder.node_id, 5)
        self.assertEqual(placeholder.kind, "empty")
        self.assertEqual(
            result.comment_map.to_dict(),
            {5: "// first", stmt.node_id: "// second"},
        )

    def test_comment_between_arguments(self):
        result = link_source(b"foo(a, /* mid */ b);\n")
        b = result.tree.get(6)
        self.assertEqual((b.kind, b.start_column), ("identifier", 17))
        self.assertEqual(result.comment_map.to_dict(), {6: "/* mid */"})

    def test_comment_after_last_argument(self):
        result = link_source(b"foo(a, b /* last */);\n")
        b = result.tree.get(6)
        self.assertEqual(b.start_column, 7)
        self.assertEqual(result.comment_map.to_dict(), {6: "/* last */"})

    def test_trailing_comment_at_end_of_file(self):
        result = link_source(b"foo();\n// trailing\n")
        last = result.tree.root.children[-1]
        self.assertTrue(last.is_placeholder)
        self.assertEqual(last.node_id, 5)
        self.assertEqual(result.comment_map.to_dict(), {5: "// trailing"})

    def test_comment_only_file(self):
        result = link_source(b"// just a note\n")
        self.assertEqual(len(result.tree.root.children), 1)
        self.assertEqual(
            [e.text for e in result.linked_comments()], ["// just a note"]
        )

    def test_no_comments(self):
        result = link_source(b"foo();\n")
        self.assertEqual(len(result.comment_map), 0)
        self.assertTrue(result.comment_map.frozen)

    def test_syntax_errors_counted(self):
        result = link_source(b"// x\nfoo(a, ;\n")
        self.assertGreater(result.parse_error_count, 0)

    def test_syntax_errors_warned_once(self):
        with self.assertLogs("linking", level="WARNING") as logs:
            result = link_source(b"// x\nfoo(a, ;\n", "broken.js")
        self.assertEqual(len(logs.records), 1)
        self.assertIn(
            f"broken.js contains syntax errors ({result.parse_error_count} error nodes)",
            logs.output[0],
        )

    def test_link_tree_matches_link_source(self):
        source = (FIXTURES_DIR / "greet.js").read_bytes()
        from_tree = link_tree(parse_bytes(source), source, "greet.js")
        from_source = link_source(source, "greet.js")
        self.assertEqual(
            [e.to_dict() for e in from_tree.linked_comments()],
            [e.to_dict() for e in from_source.linked_comments()],
        )

    def test_deterministic(self):
        source = (FIXTURES_DIR / "greet.js").read_bytes()
        first = [e.to_dict() for e in link_source(source).linked_comments()]
        second = [e.to_dict() for e in link_source(source).linked_comments()]
        self.assertEqual(first, second)


class TestLinkFixture(unittest.TestCase):
    """Test a realistic file mixing every placement rule."""

    def setUp(self):
        source = (FIXTURES_DIR / "greet.js").read_bytes()
        self.result = link_source(source, "greet.js")
        self.entries = self.result.linked_comments()

    def test_entries_in_tree_order(self):
        self.assertEqual(
            [(e.node_kind, e.text) for e in self.entries],
            [
                ("empty", "// Header comment for the module."),
                ("function_declaration",
                 "/**\n * Greets someone.\n * @param name The name.\n */"),
                ("lexical_declaration", "// Build the message."),
                ("empty", "// trailing remark"),
                ("empty", "/* floating inside block */"),
                ("identifier", "/* mid */"),
                ("empty", "// end of file"),
            ],
        )

    def test_placeholders_inside_block(self):
        body = next(
            node for node in self.result.tree.iter_preorder()
            if node.kind == "statement_block"
        )
        self.assertEqual(
            [child.kind for child in body.children],
            ["lexical_declaration", "empty", "empty", "return_statement"],
        )
        self.assertEqual(self.result.tree.placeholder_count, 4)

    def test_every_comment_survives(self):
        texts = "\n".join(e.text for e in self.entries)
        for comment in self.result.comments:
            if not comment.is_doc:
                self.assertIn(comment.raw_text, texts)

    def test_each_node_written_once(self):
        node_ids = [e.node_id for e in self.entries]
        self.assertEqual(len(node_ids), len(set(node_ids)))

    def test_records_are_json_serializable(self):
        for entry in self.entries:
            record = json.loads(json.dumps(entry.to_dict()))
            self.assertEqual(record["file_path"], "greet.js")


class TestLinkFile(unittest.TestCase):
    """Test linking a single file from disk."""

    def test_link_fixture(self):
        result = link_file(str(FIXTURES_DIR / "greet.js"), str(FIXTURES_DIR))
        self.assertEqual(result.file_path, "greet.js")
        self.assertEqual(len(result.comments), 7)

    def test_default_root_is_parent_directory(self):
        result = link_file(str(FIXTURES_DIR / "nested" / "widget.mjs"))
        self.assertEqual(result.file_path, "widget.mjs")
        self.assertEqual(
            [e.text for e in result.linked_comments()],
            ["/**\n * A widget.\n */"],
        )

    def test_file_parsed_once(self):
        """Test that link_file reads and parses through parse_file only."""
        with mock.patch("linking.linker.parse_file", wraps=parse_file) as read, \
                mock.patch("linking.linker.parse_bytes") as reparse:
            result = link_file(str(FIXTURES_DIR / "greet.js"))
        read.assert_called_once_with(os.path.abspath(FIXTURES_DIR / "greet.js"))
        reparse.assert_not_called()
        self.assertEqual(len(result.linked_comments()), 7)

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            link_file(str(FIXTURES_DIR / "missing.js"))

    def test_wrong_extension(self):
        with self.assertRaises(ValueError):
            link_file(str(FIXTURES_DIR / "nested" / "notes.txt"))


class TestDirectoryLinking(unittest.TestCase):
    """Test discovery and per-file isolation."""

    def test_discover_skips_dependencies(self):
        files = discover_js_files(str(FIXTURES_DIR))
        names = [os.path.relpath(f, FIXTURES_DIR) for f in files]
        self.assertEqual(names, ["greet.js", os.path.join("nested", "widget.mjs")])

    def test_link_directory(self):
        results, stats = link_directory(str(FIXTURES_DIR))
        self.assertEqual(
            [r.file_path for r in results],
            ["greet.js", os.path.join("nested", "widget.mjs")],
        )
        self.assertEqual(stats.files_processed, 2)
        self.assertEqual(stats.files_failed, 0)
        self.assertEqual(stats.comments_seen, 8)

    def test_failing_file_is_isolated(self):
        """Test that a linking failure in one file does not stop the others."""
        with tempfile.TemporaryDirectory() as tmp:
            Path(tmp, "a.js").write_text("// a\nfoo();\n")
            Path(tmp, "b.js").write_text("// b\nbar();\n")

            real_link = linker.link_comments
            calls = []

            def flaky(tree, comments, settings):
                calls.append(comments[0].raw_text)
                if len(calls) == 1:
                    raise LinkingInvariantError("boom")
                return real_link(tree, comments, settings)

            with mock.patch("linking.linker.link_comments", side_effect=flaky):
                results, stats = link_directory(tmp)

            self.assertEqual(stats.files_failed, 1)
            self.assertEqual(stats.files_processed, 1)
            self.assertEqual([r.file_path for r in results], ["b.js"])

    def test_fail_fast_reraises(self):
        with tempfile.TemporaryDirectory() as tmp:
            Path(tmp, "a.js").write_text("// a\nfoo();\n")
            with mock.patch(
                "linking.linker.link_comments",
                side_effect=LinkingInvariantError("boom"),
            ):
                with self.assertRaises(LinkingInvariantError):
                    link_directory(tmp, continue_on_error=False)

    def test_missing_directory(self):
        with self.assertRaises(FileNotFoundError):
            link_directory(str(FIXTURES_DIR / "missing"))

    def test_dict_records_for_file_source(self):
        stats = LinkingStats()
        records = list(
            iter_link_to_dict_list(
                str(FIXTURES_DIR / "greet.js"), str(FIXTURES_DIR), stats=stats
            )
        )
        self.assertEqual(len(records), 7)
        self.assertEqual(stats.entries_written, 7)
        self.assertEqual(
            set(records[0]),
            {"file_path", "node_id", "node_kind", "line", "column", "placeholder", "text"},
        )

    def test_dict_records_count_single_file_failure(self):
        stats = LinkingStats()
        with self.assertRaises(ValueError):
            list(iter_link_to_dict_list(
                str(FIXTURES_DIR / "nested" / "notes.txt"), stats=stats
            ))
        self.assertEqual(stats.files_failed, 1)
        self.assertEqual(stats.files_processed, 0)

        with mock.patch(
            "linking.linker.link_comments",
            side_effect=LinkingInvariantError("boom"),
        ):
            with self.assertRaises(LinkingInvariantError):
                list(iter_link_to_dict_list(str(FIXTURES_DIR / "greet.js"), stats=stats))
        self.assertEqual(stats.files_failed, 2)

    def test_dict_records_missing_source(self):
        with self.assertRaises(FileNotFoundError):
            list(iter_link_to_dict_list(str(FIXTURES_DIR / "missing.js")))


if __name__ == "__main__":
    unittest.main()
