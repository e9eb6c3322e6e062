import json
import logging
import sys
from datetime import date
from pathlib import Path

import pytest
import structlog

from daylog.rotate import ManualClock, RotatingWriter, backup_name
from daylog.utils.logging import (
    DailyRotatingHandler,
    _coerce_level,
    configure_logging,
    get_logger,
    log_context,
    resolve_output,
)


def _backup(log_dir: Path, day: date) -> Path:
    return Path(backup_name(str(log_dir / "app"), day, ".log"))


@pytest.mark.unit
def test_coerce_level():
    assert _coerce_level("debug") == logging.DEBUG
    assert _coerce_level(logging.WARNING) == logging.WARNING
    with pytest.raises(ValueError, match="Invalid log level"):
        _coerce_level("chatty")


@pytest.mark.unit
@pytest.mark.parametrize(
    "output, expected",
    [("stdout", "stdout"), ("STDERR", "stderr"), ("", "stderr")],
)
def test_resolve_output_streams(output, expected):
    stream, closer = resolve_output(output)

    assert stream is getattr(sys, expected)
    assert closer is None


@pytest.mark.unit
def test_resolve_output_file_builds_rotating_writer(log_dir: Path):
    stream, closer = resolve_output(str(log_dir / "app"), max_age_days=5)
    try:
        assert isinstance(stream, RotatingWriter)
        assert stream is closer
        assert stream.filename == str(log_dir / "app.log")
        assert stream.max_age_days == 5
    finally:
        closer.close()


@pytest.mark.unit
def test_handler_routes_records_through_rotation(log_dir: Path, manual_clock: ManualClock):
    day1 = manual_clock.now().date()
    writer = RotatingWriter({"filename": str(log_dir / "app.log")}, clock=manual_clock)
    handler = DailyRotatingHandler(writer)
    handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))

    test_logger = logging.getLogger("daylog.tests.handler")
    test_logger.propagate = False
    test_logger.setLevel(logging.INFO)
    test_logger.addHandler(handler)
    try:
        test_logger.info("first day")
        manual_clock.advance(days=1)
        test_logger.warning("second day")
    finally:
        test_logger.removeHandler(handler)
        handler.close()

    assert writer.closed
    assert _backup(log_dir, day1).read_text(encoding="utf-8") == "INFO first day\n"
    assert (log_dir / "app.log").read_text(encoding="utf-8") == "WARNING second day\n"


@pytest.mark.unit
def test_configure_logging_to_file(log_dir: Path, reset_logging, monkeypatch):
    monkeypatch.delenv("SERVICE_NAME", raising=False)
    writer = configure_logging(level="INFO", json_output=True, output=str(log_dir / "app.log"))
    assert isinstance(writer, RotatingWriter)

    get_logger("daylog.tests").info("service_started", port=8080)
    logging.getLogger("daylog.tests.stdlib").debug("filtered out")
    with log_context(request_id="abc"):
        structlog.get_logger("daylog.tests").warning("slow_request")
    logging.getLogger().handlers[0].flush()

    lines = (log_dir / "app.log").read_text(encoding="utf-8").splitlines()
    records = [json.loads(line) for line in lines]
    records = [r for r in records if r.get("logger") == "daylog.tests"]

    assert [r["event"] for r in records] == ["service_started", "slow_request"]
    assert records[0]["port"] == 8080
    assert records[0]["service_name"] == "daylog"
    assert records[0]["level"] == "info"
    assert records[1]["request_id"] == "abc"


@pytest.mark.unit
def test_configure_logging_stream_returns_no_writer(reset_logging):
    assert configure_logging(level="WARNING", json_output=False, output="stderr") is None
    assert logging.getLogger().level == logging.WARNING


@pytest.mark.unit
def test_rotation_event_logged_into_rotating_file(
    log_dir: Path, manual_clock: ManualClock, reset_logging
):
    """A writer used as the root log destination can log its own rotations."""
    configure_logging(level="INFO", json_output=True, output="stderr")
    root = logging.getLogger()
    formatter = root.handlers[0].formatter

    writer = RotatingWriter({"filename": str(log_dir / "app.log")}, clock=manual_clock)
    handler = DailyRotatingHandler(writer)
    handler.setFormatter(formatter)
    root.handlers = [handler]

    writer.write(b"before midnight\n")
    manual_clock.advance(days=1)
    writer.write(b"after midnight\n")
    handler.flush()

    lines = (log_dir / "app.log").read_text(encoding="utf-8").splitlines()
    assert lines[0] == "after midnight"
    events = [json.loads(line) for line in lines[1:]]
    event = next(e for e in events if e["event"] == "log_rotated")
    assert event["event"] == "log_rotated"
    assert event["mode"] == "rename"
    assert event["file"] == str(log_dir / "app.log")


@pytest.mark.unit
def test_configure_logging_announces_itself(log_dir: Path, reset_logging, monkeypatch):
    monkeypatch.setenv("SERVICE_NAME", "billing")
    monkeypatch.setenv("APP_VERSION", "9.9.9")
    output = str(log_dir / "app.log")
    writer = configure_logging(level="DEBUG", json_output=True, output=output)
    assert writer is not None
    writer.flush()

    records = [json.loads(line) for line in (log_dir / "app.log").read_text().splitlines()]
    event = next(r for r in records if r["event"] == "logging_configured")
    assert event["logger"] == "daylog.utils.logging"
    assert event["level"] == "debug"
    assert event["log_level"] == "DEBUG"
    assert event["output"] == output
    assert event["service_name"] == "billing"
    assert event["version"] == "9.9.9"


@pytest.mark.unit
def test_log_context_restores_outer_bindings():
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id="outer")
    try:
        with log_context(request_id="inner", user="u1"):
            assert structlog.contextvars.get_contextvars() == {
                "request_id": "inner",
                "user": "u1",
            }
        assert structlog.contextvars.get_contextvars() == {"request_id": "outer"}
    finally:
        structlog.contextvars.clear_contextvars()
