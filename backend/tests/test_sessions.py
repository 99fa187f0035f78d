"""Tests for session reconstruction."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from conftest import NOW, at

from tracker.models.user_session import UserSession
from tracker.services.pipeline import merge_groups
from tracker.services.sessions import BY_USERNAME, order_sessions, reconstruct_sessions


def _row(username, login_at, logout_at=None, duration=None):
    return UserSession(username=username, login_at=login_at, logout_at=logout_at, duration_session=duration)


def _alice_rows():
    return [
        _row("alice", at(9), at(12), 10800),
        _row("alice", at(13)),
    ]


def test_open_and_closed_sessions_combine():
    [alice] = reconstruct_sessions(_alice_rows(), now=NOW)

    assert alice.username == "alice"
    assert alice.is_active is True
    assert alice.closed_duration_seconds == 10800
    assert alice.active_elapsed_seconds == 3600
    assert alice.total_duration_seconds == 14400
    assert alice.first_login_at == at(9)
    assert alice.last_login_at == at(13)
    assert alice.last_logout_at == at(12)
    assert alice.active_login_at == at(13)


def test_closed_only_user_is_inactive():
    [bob] = reconstruct_sessions([_row("bob", at(8), at(10), 7200)], now=NOW)
    assert bob.is_active is False
    assert bob.active_login_at is None
    assert bob.active_elapsed_seconds == 0
    assert bob.total_duration_seconds == 7200


def test_is_active_iff_some_row_is_open():
    rows = [
        _row("a", at(8), at(9), 3600),
        _row("b", at(8)),
        _row("c", at(8), at(9), 3600),
        _row("c", at(10)),
    ]
    result = {s.username: s.is_active for s in reconstruct_sessions(rows, now=NOW)}
    assert result == {"a": False, "b": True, "c": True}


def test_reconstruction_is_idempotent_for_fixed_now():
    first = reconstruct_sessions(_alice_rows(), now=NOW)
    second = reconstruct_sessions(_alice_rows(), now=NOW)
    assert [s.model_dump() for s in first] == [s.model_dump() for s in second]


def test_elapsed_time_grows_with_evaluation_instant():
    earlier = reconstruct_sessions(_alice_rows(), now=NOW)[0]
    later = reconstruct_sessions(_alice_rows(), now=NOW + timedelta(minutes=25))[0]
    assert later.active_elapsed_seconds >= earlier.active_elapsed_seconds
    assert later.active_elapsed_seconds - earlier.active_elapsed_seconds == 1500


def test_login_after_now_clamps_elapsed_to_zero():
    [carol] = reconstruct_sessions([_row("carol", at(15))], now=NOW)
    assert carol.is_active is True
    assert carol.active_elapsed_seconds == 0


def test_newest_open_row_anchors_elapsed_time():
    rows = [_row("dave", at(8)), _row("dave", at(12))]
    [dave] = reconstruct_sessions(rows, now=NOW)
    assert dave.active_login_at == at(12)
    assert dave.active_elapsed_seconds == 7200
    assert dave.closed_duration_seconds == 0


def test_closed_row_without_duration_counts_zero():
    [erin] = reconstruct_sessions([_row("erin", at(8), at(9), None)], now=NOW)
    assert erin.closed_duration_seconds == 0
    assert erin.last_logout_at == at(9)


def test_naive_store_timestamps_are_read_as_utc():
    naive = datetime(2024, 1, 10, 13, 0)
    [frank] = reconstruct_sessions([_row("frank", naive)], now=NOW)
    assert frank.active_login_at == datetime(2024, 1, 10, 13, 0, tzinfo=timezone.utc)
    assert frank.active_elapsed_seconds == 3600


def test_active_sessions_come_first_then_latest_login():
    rows = [
        _row("closed_late", at(11), at(12), 3600),
        _row("closed_early", at(8), at(9), 3600),
        _row("open_early", at(7)),
        _row("open_late", at(10)),
    ]
    names = [s.username for s in reconstruct_sessions(rows, now=NOW)]
    assert names == ["open_late", "open_early", "closed_late", "closed_early"]


def test_ties_on_login_break_by_latest_logout():
    rows = [
        _row("short", at(8), at(9), 3600),
        _row("long", at(8), at(11), 10800),
    ]
    names = [s.username for s in order_sessions(reconstruct_sessions(rows, now=NOW))]
    assert names == ["long", "short"]


def test_sharded_accumulation_matches_single_pass():
    rows = [
        _row("alice", at(8), at(9), 3600),
        _row("bob", at(9)),
        _row("alice", at(10), at(11), 3600),
        _row("alice", at(13)),
        _row("bob", at(7), at(8), 3600),
    ]
    single = BY_USERNAME.run(rows)
    merged = merge_groups(BY_USERNAME.run(rows[:2]), BY_USERNAME.run(rows[2:]))

    assert set(single) == set(merged)
    for name in single:
        assert single[name].finalize(NOW) == merged[name].finalize(NOW)


def test_usernames_differing_only_in_case_form_one_user():
    rows = [
        _row("Alice", at(9), at(12), 10800),
        _row(" alice", at(13)),
    ]

    [alice] = reconstruct_sessions(rows, now=NOW)

    assert alice.username == "Alice"
    assert alice.is_active is True
    assert alice.closed_duration_seconds == 10800
    assert alice.active_elapsed_seconds == 3600
    assert alice.total_duration_seconds == 14400
