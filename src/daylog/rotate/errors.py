"""Exceptions raised by the rotating writer."""

from __future__ import annotations

from typing import Optional


class RotateError(Exception):
    """Base class for all rotating writer errors."""


class InvalidConfigError(RotateError, ValueError):
    """Raised when the writer configuration is unusable (e.g. empty filename)."""


class RotateIOError(RotateError, OSError):
    """
    Filesystem failure during a synchronous writer operation.

    Attributes:
        step: Which step failed ("mkdir", "stat", "open", "close",
              "rename", "merge", "remove" or "write")
        path: Path the failing step operated on
    """

    def __init__(self, message: str, *, step: str, path: Optional[str] = None):
        super().__init__(message)
        self.step = step
        self.path = path

    def __str__(self) -> str:
        message = self.args[0] if self.args else ""
        cause = self.__cause__
        if cause is not None:
            return f"{message}: {cause}"
        return message


__all__ = ["RotateError", "InvalidConfigError", "RotateIOError"]
