"""
Monitoring utilities for daylog.
"""

from daylog.monitoring.metrics import (
    BACKUPS_REMOVED,
    BYTES_WRITTEN,
    CLEANUP_RUNS,
    CONTENT_TYPE_LATEST,
    ROTATION_DURATION,
    ROTATIONS,
    generate_latest,
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
