"""daylog - daily rotating log file writer."""

__version__ = "0.1.0"

from .rotate import (  # noqa: E402
    InvalidConfigError,
    ManualClock,
    RotateError,
    RotateIOError,
    RotatingWriter,
    RotationConfig,
    must_new,
    new,
)
from .utils import DailyRotatingHandler, configure_logging  # noqa: E402

__all__ = [
    "RotatingWriter",
    "RotationConfig",
    "new",
    "must_new",
    "ManualClock",
    "RotateError",
    "InvalidConfigError",
    "RotateIOError",
    "DailyRotatingHandler",
    "configure_logging",
]
