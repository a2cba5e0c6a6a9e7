"""Run artifact helpers: extracted element output and run reports."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any, Iterable, Optional


def _ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)


def write_jsonl(records: Iterable[dict[str, Any]], output_file: str) -> int:
    """Stream element dicts to a JSONL file and return the line count."""
    _ensure_parent_dir(output_file)
    lines_written = 0
    with open(output_file, "w", encoding="utf-8") as f:
        for record in records:
            f.write(json.dumps(record, ensure_ascii=False) + "\n")
            lines_written += 1
    return lines_written


def write_run_report(
    status: str,
    run_id: str,
    stats: dict[str, Any],
    output_dir: str = "output/run_reports",
    output_file: Optional[str] = None,
    failures: Optional[list[dict[str, str]]] = None,
) -> str:
    """Write a JSON report for one extraction run and return its path.

    Args:
        status: ``success`` or ``failed``.
        run_id: Run correlation ID; also the report file name.
        stats: Extraction counters (see ``ExtractionStats.to_dict``).
        output_dir: Directory for reports.
        output_file: JSONL file the elements were written to, if any.
        failures: Declarations skipped under continue-on-error.
    """
    os.makedirs(output_dir, exist_ok=True)
    payload = {
        "run_id": run_id,
        "status": status,
        "stats": dict(stats),
        "output_file": output_file,
        "failures": list(failures or []),
        "timestamp_utc": datetime.now(timezone.utc).isoformat(),
    }
    path = os.path.join(output_dir, f"{run_id}.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)
    return path
