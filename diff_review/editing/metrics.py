"""
Review metrics — tracks how AI rewrites fare under review in a JSONL log.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

_METRICS_DIR = ".diffreview"
_METRICS_FILE = "review_metrics.jsonl"


def _metrics_path(project_root: str | None = None,
                  metrics_dir: str = _METRICS_DIR) -> str:
    """Return the absolute path to the metrics file."""
    base = project_root or os.getcwd()
    return os.path.join(base, metrics_dir, _METRICS_FILE)


def log_review_metric(data: dict, project_root: str | None = None,
                      metrics_dir: str = _METRICS_DIR) -> None:
    """Append a single review entry to the JSONL log.

    Parameters
    ----------
    data:
        Fields to log (file, hunks, accepted, rejected, outcome, bulk).
    project_root:
        Optional project root directory. Defaults to CWD.
    metrics_dir:
        Directory (relative to *project_root*) holding the log.
    """
    path = _metrics_path(project_root, metrics_dir)
    entry = {"timestamp": datetime.now(timezone.utc).isoformat()}
    entry.update(data)

    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as exc:
        logger.warning("[DiffReview] Failed to write metrics: %s", exc)


def _read_entries(path: str) -> list[dict]:
    # Corrupt lines are skipped
    if not os.path.isfile(path):
        return []
    entries = []
    try:
        with open(path, encoding="utf-8") as f:
            raw_lines = [raw.strip() for raw in f]
    except OSError as exc:
        logger.warning("[DiffReview] Failed to read metrics: %s", exc)
        return []
    for raw in filter(None, raw_lines):
        try:
            entries.append(json.loads(raw))
        except json.JSONDecodeError:
            logger.debug("[DiffReview] Skipping bad metrics line: %.60s", raw)
    return entries


def read_review_stats(
    last_n: int = 50,
    project_root: str | None = None,
    metrics_dir: str = _METRICS_DIR,
) -> dict:
    """Compute rolling statistics from the metrics log.

    Returns
    -------
    dict
        ``total_reviews``, ``avg_hunks``, ``acceptance_rate`` (percent of
        decided hunks that were accepted), ``bulk_rate`` (percent of reviews
        resolved with accept-all/reject-all) and ``outcomes`` (percent per
        outcome).
    """
    path = _metrics_path(project_root, metrics_dir)

    entries = _read_entries(path)[-last_n:]

    if not entries:
        return {
            "total_reviews": 0,
            "avg_hunks": 0.0,
            "acceptance_rate": 0.0,
            "bulk_rate": 0.0,
            "outcomes": {},
        }

    total = len(entries)
    hunk_counts = [e.get("hunks", 0) for e in entries if "hunks" in e]
    accepted = sum(e.get("accepted", 0) for e in entries)
    rejected = sum(e.get("rejected", 0) for e in entries)
    bulk = sum(1 for e in entries if e.get("bulk", False))
    outcomes = Counter(e.get("outcome", "unknown") for e in entries)

    return {
        "total_reviews": total,
        "avg_hunks": (
            sum(hunk_counts) / len(hunk_counts) if hunk_counts else 0.0
        ),
        "acceptance_rate": (
            accepted / (accepted + rejected) * 100
            if accepted + rejected else 0.0
        ),
        "bulk_rate": bulk / total * 100,
        "outcomes": {
            outcome: count / total * 100
            for outcome, count in outcomes.most_common()
        },
    }
