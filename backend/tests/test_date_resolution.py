"""Tests for date bucket parsing and window resolution."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from conftest import NOW

from tracker.services.date_resolution import (
    DateWindow,
    build_window,
    hour_window,
    parse_date_bucket,
    parse_hours,
    resolve_window,
    today_bucket,
)

UTC = timezone.utc


def test_parse_date_bucket():
    assert parse_date_bucket("2024-01-05") == "2024-01-05"
    assert parse_date_bucket(" 2024-01-05T10:30:00Z ") == "2024-01-05"
    assert parse_date_bucket("2024-01-05T10:30:00+05:30") == "2024-01-05"
    assert parse_date_bucket("2024-13-40") is None
    assert parse_date_bucket("2024-01-10garbage") is None
    assert parse_date_bucket("2024-01-10Tnoon") is None
    assert parse_date_bucket("yesterday") is None
    assert parse_date_bucket("   ") is None
    assert parse_date_bucket(None) is None


def test_parse_hours():
    assert parse_hours("2") == 2.0
    assert parse_hours("0.5") == 0.5
    assert parse_hours("0") is None
    assert parse_hours("-3") is None
    assert parse_hours("abc") is None
    assert parse_hours("nan") is None
    assert parse_hours("inf") is None
    assert parse_hours(None) is None


def test_today_bucket_uses_canonical_timezone():
    late_evening = datetime(2024, 1, 10, 23, 30, tzinfo=UTC)
    assert today_bucket(late_evening, UTC) == "2024-01-10"
    assert today_bucket(late_evening, ZoneInfo("Asia/Kolkata")) == "2024-01-11"


def test_build_window_defaults_to_today():
    window = build_window(now=NOW, tz=UTC)
    assert window == DateWindow(start="2024-01-10", end="2024-01-10")
    assert window.explicit is False


def test_build_window_explicit_date():
    window = build_window(now=NOW, tz=UTC, date_value="2024-01-05")
    assert window.start == window.end == "2024-01-05"
    assert window.explicit is True
    assert window.is_range is False


def test_build_window_range_wins_and_swaps_reversed_bounds():
    window = build_window(
        now=NOW,
        tz=UTC,
        date_value="2024-01-05",
        date_from="2024-01-09",
        date_to="2024-01-03",
    )
    assert (window.start, window.end) == ("2024-01-03", "2024-01-09")
    assert window.explicit is True
    assert window.is_range is True


def test_build_window_half_range_falls_back_to_date():
    window = build_window(now=NOW, tz=UTC, date_value="2024-01-05", date_from="2024-01-01")
    assert window == DateWindow.single("2024-01-05", explicit=True)


def test_build_window_malformed_date_is_treated_as_absent():
    window = build_window(now=NOW, tz=UTC, date_value="not-a-date")
    assert window == DateWindow.single("2024-01-10")

    trailing = build_window(now=NOW, tz=UTC, date_value="2024-01-05garbage")
    assert trailing == DateWindow.single("2024-01-10")
    assert trailing.explicit is False


def test_resolve_window_falls_back_to_latest_day_when_defaulted():
    window = DateWindow.single("2024-01-10")
    used = resolve_window(window, has_data=lambda w: False, latest_date=lambda: "2024-01-08")
    assert used.start == used.end == "2024-01-08"


def test_resolve_window_keeps_explicit_date_without_data():
    calls = []
    window = DateWindow.single("2024-01-05", explicit=True)

    used = resolve_window(
        window,
        has_data=lambda w: calls.append("has_data") or False,
        latest_date=lambda: calls.append("latest") or "2024-01-08",
    )

    assert used == window
    assert calls == []


def test_resolve_window_keeps_today_when_it_has_data():
    window = DateWindow.single("2024-01-10")
    used = resolve_window(window, has_data=lambda w: True, latest_date=lambda: "2024-01-08")
    assert used == window


def test_resolve_window_without_any_data_keeps_today():
    window = DateWindow.single("2024-01-10")
    used = resolve_window(window, has_data=lambda w: False, latest_date=lambda: None)
    assert used == window


def test_hour_window_applies_to_today_only():
    today = DateWindow.single("2024-01-10")
    assert hour_window(today, hours=2, now=NOW, tz=UTC) == (NOW - timedelta(hours=2), NOW)

    past = DateWindow.single("2024-01-09", explicit=True)
    assert hour_window(past, hours=2, now=NOW, tz=UTC) is None


def test_hour_window_ignored_for_ranges_and_missing_hours():
    span = DateWindow(start="2024-01-10", end="2024-01-10", explicit=True, is_range=True)
    assert hour_window(span, hours=2, now=NOW, tz=UTC) is None
    assert hour_window(DateWindow.single("2024-01-10"), hours=None, now=NOW, tz=UTC) is None
