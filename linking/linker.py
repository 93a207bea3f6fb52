"""
High-level orchestrator for comment linking.

This module provides the main entry points for linking comments in single
sources, single files or entire directory trees. Every file is linked
independently; a failure in one file never affects another.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterator, List, Optional, Tuple

from tree_sitter import Tree

from core.structured_logging import file_scope
from linking.config import (
    DEFAULT_CONTINUE_ON_ERROR,
    JS_EXTENSIONS,
    SKIPPED_DIRECTORIES,
)
from linking.errors import LinkingError
from linking.models import Comment, CommentMap, LinkedComment, SyntaxTree
from linking.parser import (
    PositionMapper,
    build_syntax_tree,
    collect_comments,
    count_error_nodes,
    parse_bytes,
    parse_file,
)
from linking.walker import LinkerSettings, link_comments

logger = logging.getLogger(__name__)


@dataclass
class FileLinkResult:
    """Outcome of linking one source file."""

    file_path: str
    tree: SyntaxTree
    comments: List[Comment]
    comment_map: CommentMap
    parse_error_count: int

    def linked_comments(self) -> List[LinkedComment]:
        """Return the output entries in tree order."""
        entries = []
        for node in self.tree.iter_preorder():
            text = self.comment_map.get(node.node_id)
            if text is None:
                continue
            entries.append(
                LinkedComment(
                    file_path=self.file_path,
                    node_id=node.node_id,
                    node_kind=node.kind,
                    line=node.start_line,
                    column=node.start_column,
                    placeholder=node.is_placeholder,
                    text=text,
                )
            )
        return entries


class LinkingStats:
    """Statistics for a linking operation."""

    def __init__(self):
        self.files_processed = 0
        self.files_failed = 0
        self.comments_seen = 0
        self.entries_written = 0
        self.placeholders_inserted = 0
        self.parse_errors = 0

    def record(self, result: FileLinkResult) -> None:
        self.files_processed += 1
        self.comments_seen += len(result.comments)
        self.entries_written += len(result.comment_map)
        self.placeholders_inserted += result.tree.placeholder_count
        self.parse_errors += result.parse_error_count

    def to_dict(self) -> Dict[str, int]:
        """Convert stats to dictionary."""
        return {
            "files_processed": self.files_processed,
            "files_failed": self.files_failed,
            "comments_seen": self.comments_seen,
            "entries_written": self.entries_written,
            "placeholders_inserted": self.placeholders_inserted,
            "parse_errors": self.parse_errors,
        }

    def __str__(self) -> str:
        """String representation of stats."""
        return (
            f"LinkingStats(processed={self.files_processed}, "
            f"failed={self.files_failed}, comments={self.comments_seen}, "
            f"entries={self.entries_written}, "
            f"placeholders={self.placeholders_inserted}, "
            f"parse_errors={self.parse_errors})"
        )


def link_source(
    source_bytes: bytes,
    file_path: str = "<memory>",
    settings: LinkerSettings = LinkerSettings(),
) -> FileLinkResult:
    """Parse JavaScript source and link its comments to the syntax tree.

    Args:
        source_bytes: UTF-8 encoded JavaScript source.
        file_path: Name used in logs and output records.
        settings: Linker settings.

    Returns:
        FileLinkResult holding the tree (with any inserted placeholders),
        the comment stream and the frozen comment map.

    Example:
        >>> result = link_source(b"// note\\nfoo();\\n")
        >>> list(result.comment_map.items())
        [(1, '// note')]
    """
    return link_tree(parse_bytes(source_bytes), source_bytes, file_path, settings)


def link_tree(
    tree: Tree,
    source_bytes: bytes,
    file_path: str = "<memory>",
    settings: LinkerSettings = LinkerSettings(),
) -> FileLinkResult:
    """Link the comments of an already parsed tree.

    Args:
        tree: tree-sitter parse of ``source_bytes``.
        source_bytes: The source the tree was parsed from.
        file_path: Name used in logs and output records.
        settings: Linker settings.

    Returns:
        FileLinkResult for the source.
    """
    parse_error_count = count_error_nodes(tree)
    if parse_error_count:
        logger.warning(
            "File %s contains syntax errors (%d error nodes)",
            file_path,
            parse_error_count,
        )

    mapper = PositionMapper(source_bytes)
    comments = collect_comments(tree, source_bytes, mapper)
    syntax_tree = build_syntax_tree(tree, source_bytes, settings.policy, mapper)
    comment_map = link_comments(syntax_tree, comments, settings)

    return FileLinkResult(
        file_path=file_path,
        tree=syntax_tree,
        comments=comments,
        comment_map=comment_map,
        parse_error_count=parse_error_count,
    )


def link_file(
    file_path: str,
    repo_root: Optional[str] = None,
    settings: LinkerSettings = LinkerSettings(),
    extensions: FrozenSet[str] = JS_EXTENSIONS,
) -> FileLinkResult:
    """Link the comments of a single JavaScript file.

    Args:
        file_path: Absolute or relative path to the file.
        repo_root: Root used to compute the reported relative path. If None,
            uses the file's parent directory.
        settings: Linker settings.
        extensions: Accepted file extensions.

    Returns:
        FileLinkResult for the file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a JavaScript source file.
        LinkingError: If the linking pass fails for this file.
    """
    file_path = os.path.abspath(file_path)

    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    ext = os.path.splitext(file_path)[1]
    if ext not in extensions:
        raise ValueError(
            f"File {file_path} is not a JavaScript source file. "
            f"Expected one of: {sorted(extensions)}"
        )

    if repo_root is None:
        resolved_root = os.path.dirname(file_path)
    else:
        resolved_root = os.path.abspath(repo_root)

    try:
        relative_path = os.path.relpath(file_path, resolved_root)
    except ValueError:
        logger.warning(
            "Cannot compute relative path for %s from %s. Using absolute path.",
            file_path,
            resolved_root,
        )
        relative_path = file_path

    with file_scope(relative_path):
        tree, source_bytes = parse_file(file_path)
        try:
            result = link_tree(tree, source_bytes, relative_path, settings)
        except LinkingError as e:
            logger.error("Error linking comments in %s: %s", relative_path, e)
            raise
        logger.info(
            "Linked %d comments into %d entries in %s",
            len(result.comments),
            len(result.comment_map),
            relative_path,
        )
    return result


def discover_js_files(
    directory: str,
    extensions: FrozenSet[str] = JS_EXTENSIONS,
) -> List[str]:
    """Recursively discover all JavaScript source files in a directory.

    Args:
        directory: Root directory to search.
        extensions: Accepted file extensions.

    Returns:
        Sorted list of absolute paths.
    """
    js_files = []
    directory = os.path.abspath(directory)

    logger.info(f"Discovering JavaScript files in {directory}")

    for root, dirs, files in os.walk(directory):
        # Skip hidden directories and common build/dependency directories
        dirs[:] = [
            d for d in dirs if not d.startswith('.') and d not in SKIPPED_DIRECTORIES
        ]

        for file in files:
            ext = os.path.splitext(file)[1]
            if ext in extensions:
                js_files.append(os.path.join(root, file))

    logger.info(f"Found {len(js_files)} JavaScript files")
    return sorted(js_files)


def iter_link_directory(
    directory: str,
    repo_root: Optional[str] = None,
    continue_on_error: bool = DEFAULT_CONTINUE_ON_ERROR,
    settings: LinkerSettings = LinkerSettings(),
    extensions: FrozenSet[str] = JS_EXTENSIONS,
    stats: Optional[LinkingStats] = None,
) -> Iterator[FileLinkResult]:
    """Link every JavaScript file under ``directory``, yielding one result per file.

    Args:
        directory: Root directory to process.
        repo_root: Root for computing relative paths; defaults to ``directory``.
        continue_on_error: If True, log and count failing files and go on.
            If False, re-raise the first failure.
        settings: Linker settings.
        extensions: Accepted file extensions.
        stats: Optional stats object updated as files are processed.

    Raises:
        FileNotFoundError: If directory does not exist.
    """
    directory = os.path.abspath(directory)

    if not os.path.isdir(directory):
        raise FileNotFoundError(f"Directory not found: {directory}")

    repo_root = directory if repo_root is None else os.path.abspath(repo_root)
    stats = stats if stats is not None else LinkingStats()

    js_files = discover_js_files(directory, extensions)
    if not js_files:
        logger.warning(f"No JavaScript files found in {directory}")
        return

    logger.info(f"Processing {len(js_files)} JavaScript files from {directory}")

    for file_path in js_files:
        try:
            result = link_file(file_path, repo_root, settings, extensions)
        except FileNotFoundError as e:
            logger.error(f"File not found: {e}")
            stats.files_failed += 1
            if not continue_on_error:
                raise
            continue
        except LinkingError as e:
            logger.error(f"Linking failed for {file_path}: {e}")
            stats.files_failed += 1
            if not continue_on_error:
                raise
            continue
        except Exception as e:
            logger.error(f"Unexpected error processing {file_path}: {e}", exc_info=True)
            stats.files_failed += 1
            if not continue_on_error:
                raise
            continue

        stats.record(result)
        yield result

    logger.info(f"Linking complete: {stats}")


def link_directory(
    directory: str,
    repo_root: Optional[str] = None,
    continue_on_error: bool = DEFAULT_CONTINUE_ON_ERROR,
    settings: LinkerSettings = LinkerSettings(),
    extensions: FrozenSet[str] = JS_EXTENSIONS,
) -> Tuple[List[FileLinkResult], LinkingStats]:
    """Link comments in all JavaScript files in a directory tree.

    Returns:
        A tuple of (results, stats).
    """
    stats = LinkingStats()
    results = list(
        iter_link_directory(
            directory,
            repo_root=repo_root,
            continue_on_error=continue_on_error,
            settings=settings,
            extensions=extensions,
            stats=stats,
        )
    )
    return results, stats


def iter_link_to_dict_list(
    source: str,
    repo_root: Optional[str] = None,
    continue_on_error: bool = DEFAULT_CONTINUE_ON_ERROR,
    settings: LinkerSettings = LinkerSettings(),
    extensions: FrozenSet[str] = JS_EXTENSIONS,
    stats: Optional[LinkingStats] = None,
) -> Iterator[Dict[str, Any]]:
    """Stream linked comment records as dictionaries ready for JSON output.

    Args:
        source: Path to a file or directory.
        repo_root: Root for computing relative paths.
        continue_on_error: Directory mode only; see ``iter_link_directory``.
        settings: Linker settings.
        extensions: Accepted file extensions.
        stats: Optional stats object updated as files are processed.

    Raises:
        FileNotFoundError: If ``source`` does not exist.
    """
    source = os.path.abspath(source)

    if os.path.isfile(source):
        try:
            result = link_file(source, repo_root, settings, extensions)
        except Exception:
            if stats is not None:
                stats.files_failed += 1
            raise
        if stats is not None:
            stats.record(result)
        results: Iterator[FileLinkResult] = iter([result])
    elif os.path.isdir(source):
        results = iter_link_directory(
            source,
            repo_root=repo_root,
            continue_on_error=continue_on_error,
            settings=settings,
            extensions=extensions,
            stats=stats,
        )
    else:
        raise FileNotFoundError(f"Source not found: {source}")

    for result in results:
        for entry in result.linked_comments():
            yield entry.to_dict()
