"""Which calendar date bucket a tracker read reports on.

An explicit ``date`` (or ``dateFrom``/``dateTo`` range) is honoured verbatim.
Without one, the read defaults to today in the canonical timezone and, for the
dashboard, falls back to the most recent day that has work-log data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta, tzinfo
from typing import Callable, Optional, Tuple

from tracker.core.observability import record_date_fallback
from tracker.services.formatting import ensure_aware

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DateWindow:
    start: str
    end: str
    explicit: bool = False
    is_range: bool = False

    @classmethod
    def single(cls, bucket: str, *, explicit: bool = False) -> "DateWindow":
        return cls(start=bucket, end=bucket, explicit=explicit)


def today_bucket(now: datetime, tz: tzinfo) -> str:
    return ensure_aware(now).astimezone(tz).date().isoformat()


def parse_date_bucket(value: Optional[str]) -> Optional[str]:
    """Return ``YYYY-MM-DD`` for a valid date string, ``None`` otherwise."""
    if not value or not value.strip():
        return None
    raw = value.strip()
    try:
        if "T" not in raw:
            return date.fromisoformat(raw).isoformat()
        # A full timestamp names the calendar date it was written in.
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return None


def parse_hours(value: Optional[str]) -> Optional[float]:
    if value is None or not str(value).strip():
        return None
    try:
        hours = float(str(value).strip())
    except ValueError:
        return None
    if hours != hours or hours <= 0 or hours == float("inf"):
        return None
    return hours


def build_window(
    *,
    now: datetime,
    tz: tzinfo,
    date_value: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> DateWindow:
    start = parse_date_bucket(date_from)
    end = parse_date_bucket(date_to)
    if start and end:
        if start > end:
            start, end = end, start
        return DateWindow(start=start, end=end, explicit=True, is_range=True)

    requested = parse_date_bucket(date_value)
    if requested:
        return DateWindow.single(requested, explicit=True)
    return DateWindow.single(today_bucket(now, tz))


def resolve_window(
    window: DateWindow,
    *,
    has_data: Callable[[DateWindow], bool],
    latest_date: Callable[[], Optional[str]],
) -> DateWindow:
    """Apply the fallback to the latest active day for a defaulted window.

    ``has_data`` reports whether either store holds rows for a window and
    ``latest_date`` returns the newest work-log date bucket for the same
    username filter. Both are only consulted when the window was defaulted.
    """
    if window.explicit or has_data(window):
        return window

    latest = latest_date()
    if not latest or latest == window.start:
        return window

    logger.info(
        "dashboard_date_fallback",
        extra={"requested_date": window.start, "used_date": latest},
    )
    record_date_fallback()
    return replace(window, start=latest, end=latest)


def hour_window(
    window: DateWindow,
    *,
    hours: Optional[float],
    now: datetime,
    tz: tzinfo,
) -> Optional[Tuple[datetime, datetime]]:
    """``updated_at`` bounds for the live view, or ``None`` for no cutoff.

    Only applies to a single-day window on today; a range ignores it.
    """
    if hours is None or window.is_range:
        return None
    if window.start != today_bucket(now, tz):
        return None
    until = ensure_aware(now)
    return until - timedelta(hours=hours), until
