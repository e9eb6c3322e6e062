import logging
import sys
from datetime import date, datetime, time
from pathlib import Path
from typing import Iterator

import pytest
import structlog

# Ensure src/ is on sys.path for local test runs without installation
PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from daylog.rotate.clock import ManualClock  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: fast unit tests")
    config.addinivalue_line("markers", "slow: slow-running tests")


@pytest.fixture
def manual_clock() -> ManualClock:
    """Clock pinned to midday today; advance it to simulate midnight."""
    return ManualClock(datetime.combine(date.today(), time(12, 0)))


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    """Not-yet-existing directory for live logs and backups."""
    return tmp_path / "logs"


@pytest.fixture
def reset_logging() -> Iterator[None]:
    """Restore root logging handlers and structlog defaults after the test."""
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    try:
        yield
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            if handler not in saved_handlers:
                handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
        structlog.reset_defaults()
