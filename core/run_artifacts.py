"""Run artifact helpers for operational reporting."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any, Optional


def build_run_report(
    source: str,
    stats: dict[str, int],
    status: str,
    duration_seconds: float,
    output_file: Optional[str] = None,
    config_path: Optional[str] = None,
    error: Optional[str] = None,
) -> dict[str, Any]:
    """Assemble the summary of one linking run."""
    report: dict[str, Any] = {
        "source": source,
        "status": status,
        "duration_seconds": round(duration_seconds, 3),
        "stats": dict(stats),
        "output_file": output_file,
        "config_path": config_path,
    }
    if error is not None:
        report["error"] = error
    return report


def write_run_report(
    report: dict[str, Any],
    run_id: str,
    output_dir: str = "output/run_reports",
) -> str:
    """Write a JSON linking run report and return its path.

    ``run_id`` and a UTC timestamp are added unless ``report`` sets them.
    """
    os.makedirs(output_dir, exist_ok=True)
    payload = dict(report)
    payload.setdefault("run_id", run_id)
    payload.setdefault("timestamp_utc", datetime.now(timezone.utc).isoformat())
    path = os.path.join(output_dir, f"linking-{run_id}.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)
    return path
