"""Session reconstruction: live/closed state per user as of one instant."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from tracker.models.user_session import UserSession
from tracker.schemas.tracker import SessionAggregate
from tracker.services.formatting import as_int, ensure_aware
from tracker.services.pipeline import Group


def _min(a: Optional[datetime], b: Optional[datetime]) -> Optional[datetime]:
    if a is None:
        return b
    if b is None:
        return a
    return min(a, b)


def _max(a: Optional[datetime], b: Optional[datetime]) -> Optional[datetime]:
    if a is None:
        return b
    if b is None:
        return a
    return max(a, b)


@dataclass
class SessionAccumulator:
    username: str = ""
    first_login_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    last_logout_at: Optional[datetime] = None
    closed_duration_seconds: int = 0
    # Newest open row anchors the elapsed time; older open rows are ignored.
    active_login_at: Optional[datetime] = None
    is_active: bool = False

    def add(self, row: UserSession) -> None:
        login_at = ensure_aware(row.login_at)
        logout_at = ensure_aware(row.logout_at)
        self.username = self.username or (row.username or "")
        self.first_login_at = _min(self.first_login_at, login_at)
        self.last_login_at = _max(self.last_login_at, login_at)
        if row.is_open:
            self.is_active = True
            self.active_login_at = _max(self.active_login_at, login_at)
        else:
            self.last_logout_at = _max(self.last_logout_at, logout_at)
            self.closed_duration_seconds += as_int(row.duration_session)

    def merge(self, other: "SessionAccumulator") -> "SessionAccumulator":
        return SessionAccumulator(
            username=self.username or other.username,
            first_login_at=_min(self.first_login_at, other.first_login_at),
            last_login_at=_max(self.last_login_at, other.last_login_at),
            last_logout_at=_max(self.last_logout_at, other.last_logout_at),
            closed_duration_seconds=self.closed_duration_seconds + other.closed_duration_seconds,
            active_login_at=_max(self.active_login_at, other.active_login_at),
            is_active=self.is_active or other.is_active,
        )

    def finalize(self, now: datetime) -> SessionAggregate:
        elapsed = 0
        if self.is_active and self.active_login_at is not None:
            elapsed = max(0, int((ensure_aware(now) - self.active_login_at).total_seconds()))
        return SessionAggregate(
            username=self.username,
            first_login_at=self.first_login_at,
            last_login_at=self.last_login_at,
            last_logout_at=self.last_logout_at,
            closed_duration_seconds=self.closed_duration_seconds,
            active_login_at=self.active_login_at,
            is_active=self.is_active,
            active_elapsed_seconds=elapsed,
            total_duration_seconds=self.closed_duration_seconds + elapsed,
        )


def username_key(username: Optional[str]) -> str:
    return (username or "").strip().lower()


# Matches the case-insensitive username filter; the first-seen spelling is reported.
BY_USERNAME: Group[UserSession, SessionAccumulator] = Group(
    key=lambda row: username_key(row.username),
    seed=SessionAccumulator,
)


def _desc(value: Optional[datetime]) -> float:
    return -value.timestamp() if value is not None else float("inf")


def order_sessions(aggregates: Iterable[SessionAggregate]) -> List[SessionAggregate]:
    """Active sessions first, then newest login, then newest logout."""
    return sorted(
        aggregates,
        key=lambda a: (not a.is_active, _desc(a.last_login_at), _desc(a.last_logout_at)),
    )


def reconstruct_sessions(rows: Iterable[UserSession], *, now: datetime) -> List[SessionAggregate]:
    groups = BY_USERNAME.run(rows)
    return order_sessions(acc.finalize(now) for acc in groups.values())
