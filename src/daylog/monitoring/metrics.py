"""Prometheus metrics for daylog writers."""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)

# Counters
BYTES_WRITTEN = Counter(
    "daylog_bytes_written_total", "Bytes appended to live log files", ["file"]
)
ROTATIONS = Counter(
    "daylog_rotations_total",
    "Completed rotations by how the live file was archived",
    ["file", "mode"],
)
BACKUPS_REMOVED = Counter(
    "daylog_backups_removed_total",
    "Expired backup files deleted by cleanup",
    ["file"],
)
CLEANUP_RUNS = Counter(
    "daylog_cleanup_runs_total",
    "Background cleanup passes",
    ["file", "outcome"],
)

# Histograms
ROTATION_DURATION = Histogram(
    "daylog_rotation_duration_seconds",
    "Time spent closing, archiving and reopening the live file",
    ["file"],
)

__all__ = [
    "BYTES_WRITTEN",
    "ROTATIONS",
    "BACKUPS_REMOVED",
    "CLEANUP_RUNS",
    "ROTATION_DURATION",
    "CONTENT_TYPE_LATEST",
    "generate_latest",
]
