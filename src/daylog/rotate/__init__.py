"""Daily log rotation."""

from .clock import Clock, ManualClock, SystemClock
from .config import RotationConfig
from .errors import InvalidConfigError, RotateError, RotateIOError
from .naming import backup_name, parse_backup_date
from .writer import Rotation, RotatingWriter, must_new, new

__all__ = [
    "RotatingWriter",
    "Rotation",
    "RotationConfig",
    "new",
    "must_new",
    "Clock",
    "SystemClock",
    "ManualClock",
    "RotateError",
    "InvalidConfigError",
    "RotateIOError",
    "backup_name",
    "parse_backup_date",
]
