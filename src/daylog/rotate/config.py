"""Rotation policy configuration."""

from __future__ import annotations

import os
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from daylog.rotate.errors import InvalidConfigError


class RotationConfig(BaseModel):
    """
    Daily rotation policy.

    Example:
        RotationConfig(filename="logs/app.log", max_age_days=7)
    """

    model_config = ConfigDict(frozen=True)

    filename: str = Field(..., description="Live log file path (.log appended if no extension)")
    max_age_days: int = Field(
        0,
        ge=0,
        description="Days to keep dated backups, 0 keeps them forever",
    )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RotationConfig":
        """Build from a plain mapping, e.g. a parsed config section."""
        try:
            return cls(**dict(data))
        except ValidationError as exc:
            raise InvalidConfigError(f"invalid rotation config: {exc}") from exc

    @classmethod
    def from_yaml(cls, path: str) -> "RotationConfig":
        """Load configuration from YAML file."""
        import yaml

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise InvalidConfigError(f"rotation config in {path} must be a mapping")
        return cls.from_dict(data)

    @classmethod
    def from_env(cls, prefix: str = "DAYLOG_") -> "RotationConfig":
        filename = os.getenv(f"{prefix}FILENAME", "")
        if not filename:
            raise InvalidConfigError(f"{prefix}FILENAME must be set")

        raw_max_age = os.getenv(f"{prefix}MAX_AGE_DAYS", "0")
        try:
            max_age_days = int(raw_max_age)
        except ValueError as exc:
            raise InvalidConfigError(
                f"{prefix}MAX_AGE_DAYS must be an integer, got {raw_max_age!r}"
            ) from exc

        return cls.from_dict({"filename": filename, "max_age_days": max_age_days})


__all__ = ["RotationConfig"]
