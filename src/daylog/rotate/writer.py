"""
Daily rotating file writer.

The writer appends bytes to a live file (e.g. ``logs/app.log``). The first
write on a new local calendar day archives the live file as
``logs/app-YYYY-MM-DD.log`` (named for the day its content belongs to) and
continues in a fresh live file. With ``max_age_days > 0`` every rotation
also schedules a background scan that deletes expired backups.
"""

from __future__ import annotations

import os
import shutil
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, BinaryIO, List, Mapping, Optional, Union

import structlog

from daylog.monitoring.metrics import BYTES_WRITTEN, ROTATION_DURATION, ROTATIONS
from daylog.rotate.cleanup import cleanup_expired
from daylog.rotate.clock import Clock, SystemClock
from daylog.rotate.config import RotationConfig
from daylog.rotate.errors import InvalidConfigError, RotateError, RotateIOError
from daylog.rotate.naming import backup_name, normalize_filename, split_filename

logger = structlog.get_logger(__name__)

DIR_MODE = 0o755
FILE_MODE = 0o666

ConfigLike = Union[RotationConfig, Mapping[str, Any]]


@dataclass(frozen=True)
class Rotation:
    """Outcome of one rotation."""

    backup: str
    day: date
    mode: str  # "rename", "merge" or "empty"


def _open_append(path: str, flags: int) -> int:
    return os.open(path, flags, FILE_MODE)


class RotatingWriter:
    """
    Thread-safe binary sink that rotates its file once per calendar day.

    One lock serializes the day check, the rotation it may trigger and the
    append, so concurrent writers never interleave within a single call.
    Only one writer per path is supported (no cross-process coordination).
    """

    def __init__(self, config: ConfigLike, *, clock: Optional[Clock] = None):
        """
        Args:
            config: RotationConfig or a mapping with ``filename`` and
                    optional ``max_age_days``
            clock: Local time source, defaults to the system clock

        Raises:
            InvalidConfigError: If the filename is empty or the mapping is invalid
            RotateIOError: If the directory or live file cannot be prepared
        """
        if not isinstance(config, RotationConfig):
            config = RotationConfig.from_dict(config)

        if not config.filename or not config.filename.strip():
            raise InvalidConfigError("filename is required")

        self.config = config
        self.filename = normalize_filename(config.filename)
        self.base, self.ext = split_filename(self.filename)

        self._clock: Clock = clock or SystemClock()
        self._lock = threading.Lock()
        self._file: Optional[BinaryIO] = None
        self._current_day: Optional[date] = None

        self._cleanup_lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._cleanups: List[Future] = []

        self._init()

    @property
    def max_age_days(self) -> int:
        return self.config.max_age_days

    @property
    def current_day(self) -> Optional[date]:
        """Day the open live file belongs to."""
        with self._lock:
            return self._current_day

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._file is None

    def readable(self) -> bool:
        return False

    def writable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False

    def write(self, data: Any) -> int:
        """
        Append ``data`` to the live file, rotating first if the day changed.

        Args:
            data: bytes-like object

        Returns:
            Number of bytes written

        Raises:
            TypeError: If data is not bytes-like
            RotateIOError: If opening, rotating or appending fails
        """
        if isinstance(data, str):
            raise TypeError("write() argument must be bytes-like, not str")
        view = memoryview(data).cast("B")

        rotation: Optional[Rotation] = None
        with self._lock:
            if self._file is None:
                rotation = self._resume()

            today = self._today()
            if today != self._current_day:
                rotation = self._rotate(today)

            assert self._file is not None
            written = 0
            try:
                while written < len(view):
                    n = self._file.write(view[written:])
                    if not n:
                        break
                    written += n
            except OSError as exc:
                raise RotateIOError(
                    "failed to write log file", step="write", path=self.filename
                ) from exc

        if rotation is not None:
            self._log_rotation(rotation)
        BYTES_WRITTEN.labels(file=self.filename).inc(written)
        return written

    def flush(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.flush()

    def fileno(self) -> int:
        with self._lock:
            if self._file is None:
                raise ValueError("I/O operation on closed writer")
            return self._file.fileno()

    def close(self, wait: bool = False) -> None:
        """
        Release the live file handle. Calling it again is a no-op.

        A later ``write`` reopens the live file, archiving it first if it
        was last modified on an earlier day.

        Args:
            wait: Also wait for scheduled cleanups and stop the cleanup worker
        """
        with self._lock:
            self._close_file()

        if wait:
            self.wait_for_cleanup()
            with self._cleanup_lock:
                if self._executor is not None:
                    self._executor.shutdown(wait=True)
                    self._executor = None

    def wait_for_cleanup(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every scheduled cleanup has finished.

        Returns:
            False if ``timeout`` expired with cleanups still running
        """
        with self._cleanup_lock:
            pending = list(self._cleanups)
        if not pending:
            return True
        _, not_done = wait_futures(pending, timeout=timeout)
        return not not_done

    def __enter__(self) -> "RotatingWriter":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"RotatingWriter(filename={self.filename!r}, "
            f"max_age_days={self.max_age_days})"
        )

    def _today(self) -> date:
        return self._clock.now().date()

    def _init(self) -> None:
        directory = os.path.dirname(self.filename)
        if directory:
            try:
                os.makedirs(directory, mode=DIR_MODE, exist_ok=True)
            except OSError as exc:
                raise RotateIOError(
                    "failed to create log directory", step="mkdir", path=directory
                ) from exc

        rotation = self._resume()
        if rotation is not None:
            self._log_rotation(rotation)

    def _resume(self) -> Optional[Rotation]:
        """Open the live file, rotating it first if it is left over from an earlier day."""
        try:
            st = os.stat(self.filename)
        except FileNotFoundError:
            self._open_file()
            return None
        except OSError as exc:
            raise RotateIOError(
                "failed to stat log file", step="stat", path=self.filename
            ) from exc

        modified_day = datetime.fromtimestamp(st.st_mtime).date()
        today = self._today()
        if modified_day != today:
            # leftover from an earlier day: archive it under its own date
            self._current_day = modified_day
            return self._rotate(today)

        self._open_file(today)
        return None

    def _open_file(self, today: Optional[date] = None) -> None:
        today = today or self._today()
        try:
            f = open(self.filename, "ab", buffering=0, opener=_open_append)
        except OSError as exc:
            raise RotateIOError(
                "failed to open log file", step="open", path=self.filename
            ) from exc

        self._file = f
        self._current_day = today

    def _close_file(self) -> None:
        f, self._file = self._file, None
        if f is None:
            return
        try:
            f.close()
        except OSError as exc:
            raise RotateIOError(
                "failed to close log file", step="close", path=self.filename
            ) from exc

    def _rotate(self, today: date) -> Rotation:
        """Archive the live file under _current_day and reopen it for today (lock held)."""
        started = time.perf_counter()
        self._close_file()

        assert self._current_day is not None
        backup = backup_name(self.base, self._current_day, self.ext)

        if os.path.exists(backup):
            mode = "merge" if self._merge_into(backup) else "empty"
        else:
            try:
                os.rename(self.filename, backup)
                mode = "rename"
            except FileNotFoundError:
                mode = "empty"
            except OSError as exc:
                raise RotateIOError(
                    f"failed to rename log file to {backup}",
                    step="rename",
                    path=self.filename,
                ) from exc

        rotated_day = self._current_day
        self._open_file(today)

        ROTATIONS.labels(file=self.filename, mode=mode).inc()
        ROTATION_DURATION.labels(file=self.filename).observe(
            time.perf_counter() - started
        )
        if self.config.max_age_days > 0:
            self._schedule_cleanup()

        return Rotation(backup=backup, day=rotated_day, mode=mode)

    def _log_rotation(self, rotation: Rotation) -> None:
        # called without the lock: the writer may itself be a logging destination
        logger.info(
            "log_rotated",
            file=self.filename,
            backup=rotation.backup,
            backup_day=rotation.day.isoformat(),
            mode=rotation.mode,
        )

    def _merge_into(self, backup: str) -> bool:
        """Append the live file onto an existing backup, then remove it."""
        try:
            src = open(self.filename, "rb")
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise RotateIOError(
                "failed to open log file for merge", step="merge", path=self.filename
            ) from exc

        with src:
            try:
                with open(backup, "ab", opener=_open_append) as dst:
                    shutil.copyfileobj(src, dst)
            except OSError as exc:
                raise RotateIOError(
                    f"failed to append log file to {backup}",
                    step="merge",
                    path=self.filename,
                ) from exc

        try:
            os.remove(self.filename)
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise RotateIOError(
                "failed to remove rotated file", step="remove", path=self.filename
            ) from exc

        return True

    def _schedule_cleanup(self) -> None:
        with self._cleanup_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="daylog-cleanup"
                )
            future = self._executor.submit(self._run_cleanup)
            self._cleanups = [f for f in self._cleanups if not f.done()]
            self._cleanups.append(future)

    def _run_cleanup(self) -> List[str]:
        try:
            return cleanup_expired(
                self.filename, self.config.max_age_days, self._today()
            )
        except Exception:
            logger.exception("cleanup_failed", file=self.filename)
            return []


def new(config: ConfigLike, *, clock: Optional[Clock] = None) -> RotatingWriter:
    """
    Create a daily rotating writer.

    Raises:
        InvalidConfigError: On unusable configuration
        RotateIOError: If the log directory or file cannot be prepared
    """
    return RotatingWriter(config, clock=clock)


def must_new(config: ConfigLike, *, clock: Optional[Clock] = None) -> RotatingWriter:
    """
    Create a daily rotating writer, treating any failure as fatal.

    Meant for startup code where running without the log file is not an
    option.

    Raises:
        RuntimeError: Wrapping the underlying RotateError
    """
    try:
        return new(config, clock=clock)
    except RotateError as exc:
        logger.critical("rotate_writer_init_failed", error=str(exc))
        raise RuntimeError(f"failed to initialize rotate writer: {exc}") from exc


__all__ = ["RotatingWriter", "Rotation", "new", "must_new", "DIR_MODE", "FILE_MODE"]
