"""Append-only JSON log of what each run did to the mailbox."""

from __future__ import annotations

import json
from pathlib import Path

from .constants import RUN_LOG_FILE, config_dir
from .models import RunSummary


def save_run_log(summary: RunSummary, path: Path | None = None) -> None:
    """Append a run entry to the audit log."""
    path = Path(path or config_dir() / RUN_LOG_FILE)
    path.parent.mkdir(parents=True, exist_ok=True)

    log: list = []
    if path.exists():
        with open(path) as f:
            try:
                log = json.load(f)
            except json.JSONDecodeError:
                log = []
        if not isinstance(log, list):
            log = []

    entry = {
        "date": summary.started_at,
        "query": summary.query,
        "processed": summary.processed,
        "kept": summary.kept,
        "discarded": summary.discarded,
        "failed": summary.failed,
        "messages": [
            {
                "message_id": r.message_id,
                "subject": r.subject,
                "disposition": r.disposition.value if r.disposition else None,
                "found_name": r.found_name,
                "failed_stage": r.failed_stage.value if r.failed_stage else None,
            }
            for r in summary.results
        ],
    }
    log.append(entry)

    with open(path, "w") as f:
        json.dump(log, f, indent=2)
