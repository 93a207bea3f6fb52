#!/usr/bin/env python3
"""
Top-level driver for JavaScript comment linking.

Links the comments of a file or directory tree to their syntax nodes and
writes one JSONL record per linked comment, followed by a JSON run report.

Usage:
    python run_linking.py --source ./src
    python run_linking.py --source ./src/app.js --output-file out/comments.jsonl
    python run_linking.py --source ./src --config linking.yaml --fail-fast
"""

import argparse
import json
import logging
import os
import sys
import time

from core.run_artifacts import build_run_report, write_run_report
from core.settings import ConfigValidationError, load_linking_config
from core.structured_logging import configure_structured_logging, set_run_id
from linking.errors import LinkingError
from linking.linker import LinkingStats, iter_link_to_dict_list

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="JavaScript Comment Linking",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python run_linking.py --source ./src\n"
            "  python run_linking.py --source ./src --config linking.yaml --fail-fast\n"
        )
    )

    parser.add_argument(
        "--source",
        required=True,
        help="JavaScript file or directory to link."
    )
    parser.add_argument(
        "--output-file",
        default="output/linked_comments.jsonl",
        help="Path for the JSONL output. Default: output/linked_comments.jsonl"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional YAML config file (defaults to $COMMENT_LINKING_CONFIG)."
    )
    parser.add_argument(
        "--report-dir",
        default="output/run_reports",
        help="Directory for the JSON run report. Default: output/run_reports"
    )
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        default=False,
        help="Stop at the first file that fails instead of skipping it."
    )
    parser.add_argument(
        "--strict-config",
        action="store_true",
        default=None,
        help="Reject invalid configuration instead of falling back to defaults."
    )

    return parser.parse_args(argv)


def run_linking(
    source: str,
    output_file: str,
    continue_on_error: bool,
    settings,
    extensions,
    stats: LinkingStats,
) -> int:
    """Link comments under ``source`` and stream records to ``output_file``.

    Returns:
        Number of records written.

    Raises:
        FileNotFoundError: If source does not exist.
    """
    if not os.path.exists(source):
        raise FileNotFoundError(f"Source not found: {source}")

    logger.info(f"Source           : {os.path.abspath(source)}")
    logger.info(f"Output file      : {os.path.abspath(output_file)}")

    os.makedirs(os.path.dirname(os.path.abspath(output_file)), exist_ok=True)

    lines_written = 0
    with open(output_file, "w", encoding="utf-8") as f:
        for record in iter_link_to_dict_list(
            source,
            continue_on_error=continue_on_error,
            settings=settings,
            extensions=extensions,
            stats=stats,
        ):
            f.write(json.dumps(record, ensure_ascii=False) + "\n")
            lines_written += 1

    logger.info(f"Wrote {lines_written} lines to {output_file}")
    return lines_written


def main(argv=None) -> int:
    """Main entry point for the driver."""
    args = parse_args(argv)

    try:
        config = load_linking_config(args.config, strict=args.strict_config)
    except ConfigValidationError as e:
        configure_structured_logging()
        logger.error(f"Configuration error: {e}")
        return 1

    configure_structured_logging(config.log_level)
    run_id = set_run_id()
    continue_on_error = config.continue_on_error and not args.fail_fast

    stats = LinkingStats()
    t0 = time.time()
    status = "success"
    error = None
    try:
        run_linking(
            args.source,
            args.output_file,
            continue_on_error,
            config.to_settings(),
            config.extensions,
            stats,
        )
        if stats.files_failed:
            status = "partial"
    except FileNotFoundError as e:
        logger.error(f"File error: {e}")
        status, error = "failed", str(e)
    except (LinkingError, ValueError) as e:
        logger.error(f"Linking failed: {e}")
        status, error = "failed", str(e)
    except Exception as e:
        logger.error(f"Run failed: {e}", exc_info=True)
        status, error = "failed", str(e)

    report = build_run_report(
        source=os.path.abspath(args.source),
        stats=stats.to_dict(),
        status=status,
        duration_seconds=time.time() - t0,
        output_file=os.path.abspath(args.output_file),
        config_path=config.source_path,
        error=error,
    )
    report_path = write_run_report(report, run_id, args.report_dir)
    logger.info(f"Run report written to {report_path}")
    logger.info(f"Final stats: {stats}")

    return 0 if status == "success" else 1


if __name__ == "__main__":
    sys.exit(main())
