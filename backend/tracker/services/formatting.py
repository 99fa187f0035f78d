"""Display helpers for tracker rows. None of these raise on malformed input."""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timezone
from typing import Any, Optional

PATH_SEPARATOR = "\\"

_TRAILING_SEPARATORS = re.compile(r"[\\/]+$")
_LEADING_SEPARATORS = re.compile(r"^[\\/]+")


def as_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return ""


def as_int(value: Any) -> int:
    """Coerce a numeric-ish value to a whole number of seconds, 0 when unusable."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    return int(number)


def to_hms(seconds: Any) -> str:
    total = max(0, as_int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def normalize_file_path(folder_path: Any, file_name: Any) -> str:
    folder = as_string(folder_path).strip()
    name = as_string(file_name).strip()
    if not folder:
        return name
    if not name:
        return folder
    return _TRAILING_SEPARATORS.sub("", folder) + PATH_SEPARATOR + _LEADING_SEPARATORS.sub("", name)


def ensure_aware(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive timestamps read back from the store as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
