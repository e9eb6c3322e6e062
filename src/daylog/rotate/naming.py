"""
Live/backup file naming.

Backups are named ``{base}-{YYYY-MM-DD}{ext}``::

    logs/app.log  rotated for 2023-12-08  ->  logs/app-2023-12-08.log
"""

from __future__ import annotations

import os
import re
from datetime import date
from typing import Optional, Tuple

DATE_FORMAT = "%Y-%m-%d"
DEFAULT_EXT = ".log"

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def normalize_filename(filename: str) -> str:
    """Append the default extension when ``filename`` has none."""
    _, ext = os.path.splitext(filename)
    if not ext:
        return filename + DEFAULT_EXT
    return filename


def split_filename(filename: str) -> Tuple[str, str]:
    """
    Split a path into (base, ext).

    "logs/app.log" -> ("logs/app", ".log")
    """
    base, ext = os.path.splitext(filename)
    return base, ext


def backup_name(base: str, day: date, ext: str) -> str:
    # YYYY-MM-DD, year always zero-padded to four digits
    return f"{base}-{day.isoformat()}{ext}"


def parse_backup_date(name: str, base_name: str, ext: str) -> Optional[date]:
    """
    Extract the date from a backup file name.

    Args:
        name: Directory entry name (no directory part)
        base_name: Live file base name without directory and extension
        ext: Extension including the leading dot

    Returns:
        The embedded date, or None if ``name`` is not a backup of this file.
    """
    prefix = base_name + "-"
    if not name.startswith(prefix) or not name.endswith(ext):
        return None
    if len(name) < len(prefix) + len(ext):
        return None

    middle = name[len(prefix) : len(name) - len(ext)]
    if not _DATE_RE.fullmatch(middle):
        return None
    try:
        return date.fromisoformat(middle)
    except ValueError:
        return None


__all__ = [
    "DATE_FORMAT",
    "DEFAULT_EXT",
    "normalize_filename",
    "split_filename",
    "backup_name",
    "parse_backup_date",
]
