from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from typing import IO, Any, Iterator, Optional, Tuple, cast

import structlog
from structlog.dev import ConsoleRenderer
from structlog.stdlib import BoundLogger
from structlog.types import Processor

from daylog import __version__
from daylog.rotate.writer import RotatingWriter


def _coerce_level(level: str | int) -> int:
    """Translate a string/int level into the numeric logging level."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if isinstance(resolved, str):
            raise ValueError(f"Invalid log level: {level}")
        return int(resolved)
    return int(level)


class DailyRotatingHandler(logging.Handler):
    """Logging handler that appends formatted records to a RotatingWriter."""

    terminator = "\n"

    def __init__(
        self,
        writer: RotatingWriter,
        encoding: str = "utf-8",
        level: int = logging.NOTSET,
    ) -> None:
        super().__init__(level)
        self.writer = writer
        self.encoding = encoding

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record) + self.terminator
            self.writer.write(msg.encode(self.encoding, "backslashreplace"))
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)

    def flush(self) -> None:
        self.acquire()
        try:
            self.writer.flush()
        finally:
            self.release()

    def close(self) -> None:
        try:
            self.writer.close()
        finally:
            super().close()


def resolve_output(
    output: str = "stderr", max_age_days: int = 0
) -> Tuple[IO[str] | RotatingWriter, Optional[RotatingWriter]]:
    """
    Map an output setting to a destination.

    "stdout" / "stderr" (any case, empty means stderr) return the process
    stream and no closer. Anything else is treated as a file path and opened
    as a daily RotatingWriter, which is also returned as the closer.
    """
    name = (output or "stderr").strip()
    if name.lower() == "stdout":
        return sys.stdout, None
    if name.lower() == "stderr":
        return sys.stderr, None

    writer = RotatingWriter({"filename": name, "max_age_days": max_age_days})
    return writer, writer


def configure_logging(
    level: str | int = "INFO",
    json_output: bool = True,
    output: str = "stderr",
    max_age_days: int = 0,
) -> Optional[RotatingWriter]:
    """
    Configure structlog with JSON (or console) rendering and stdlib bridge.

    File outputs rotate daily; the returned writer (None for stdout/stderr)
    should be closed on shutdown.
    """
    numeric_level = _coerce_level(level)
    timestamper = structlog.processors.TimeStamper(fmt="iso")
    renderer = structlog.processors.JSONRenderer() if json_output else ConsoleRenderer(colors=False)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        timestamper,
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    destination, closer = resolve_output(output, max_age_days)
    handler: logging.Handler
    if closer is not None:
        handler = DailyRotatingHandler(closer)
    else:
        handler = logging.StreamHandler(cast(IO[str], destination))
    handler.setFormatter(formatter)

    logging.basicConfig(level=numeric_level, handlers=[handler], force=True)
    logging.captureWarnings(True)
    get_logger(__name__).debug(
        "logging_configured",
        log_level=logging.getLevelName(numeric_level),
        output=output or "stderr",
    )
    return closer


def get_logger(name: str = "daylog", **initial_values: Any) -> BoundLogger:
    """Return a structlog logger tagged with the service name and daylog version."""
    bound = structlog.get_logger(name).bind(
        service_name=os.getenv("SERVICE_NAME", "daylog"),
        version=os.getenv("APP_VERSION", __version__),
        **initial_values,
    )
    return cast(BoundLogger, bound)


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Bind ``kwargs`` into the structlog context for the duration of the block."""
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield


__all__ = [
    "DailyRotatingHandler",
    "configure_logging",
    "get_logger",
    "log_context",
    "resolve_output",
]
