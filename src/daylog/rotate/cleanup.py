"""Removal of expired dated backups."""

from __future__ import annotations

import os
from datetime import date, timedelta
from typing import List

import structlog

from daylog.monitoring.metrics import BACKUPS_REMOVED, CLEANUP_RUNS
from daylog.rotate.naming import parse_backup_date, split_filename

logger = structlog.get_logger(__name__)


def cleanup_expired(filename: str, max_age_days: int, today: date) -> List[str]:
    """
    Delete backups of ``filename`` dated strictly before ``today - max_age_days``.

    Best-effort: a directory that cannot be listed, or a backup that cannot
    be removed, is logged and skipped. Nothing is raised.

    Args:
        filename: Normalized live file path
        max_age_days: Retention window in days, 0 disables cleanup
        today: Local calendar date the cutoff is computed from

    Returns:
        Paths that were removed.
    """
    if max_age_days <= 0:
        return []

    directory = os.path.dirname(filename) or "."
    base, ext = split_filename(filename)
    base_name = os.path.basename(base)
    cutoff = today - timedelta(days=max_age_days)

    try:
        with os.scandir(directory) as it:
            entries = list(it)
    except OSError as exc:
        logger.debug("cleanup_scan_failed", directory=directory, error=str(exc))
        CLEANUP_RUNS.labels(file=filename, outcome="scan_failed").inc()
        return []

    removed: List[str] = []
    for entry in entries:
        try:
            if entry.is_dir(follow_symlinks=False):
                continue
        except OSError:
            continue

        backup_day = parse_backup_date(entry.name, base_name, ext)
        if backup_day is None or backup_day >= cutoff:
            continue

        try:
            os.remove(entry.path)
        except OSError as exc:
            logger.debug("expired_backup_remove_failed", path=entry.path, error=str(exc))
            continue

        removed.append(entry.path)
        logger.info(
            "expired_backup_removed",
            path=entry.path,
            backup_day=backup_day.isoformat(),
            cutoff=cutoff.isoformat(),
        )

    if removed:
        BACKUPS_REMOVED.labels(file=filename).inc(len(removed))
    CLEANUP_RUNS.labels(file=filename, outcome="ok").inc()
    return removed


__all__ = ["cleanup_expired"]
