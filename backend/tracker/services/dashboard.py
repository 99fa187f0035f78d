"""Compose the "today" dashboard and the live tracking view.

Session and work-log aggregates are computed independently from separate
store reads. They are never reconciled: an open session with no filed work,
or filed work with no session, is reported as-is.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Optional

from sqlalchemy.orm import Session

from tracker.schemas.tracker import (
    DashboardTodayData,
    DashboardTodayResponse,
    LiveTrackingResponse,
    WorkLogBatchRead,
)
from tracker.services import stores
from tracker.services.date_resolution import DateWindow, hour_window, resolve_window
from tracker.services.productivity import aggregate_productivity
from tracker.services.sessions import reconstruct_sessions


def build_today_dashboard(
    db: Session,
    *,
    window: DateWindow,
    now: datetime,
    username: Optional[str] = None,
) -> DashboardTodayResponse:
    used = resolve_window(
        window,
        has_data=lambda w: stores.has_activity(db, window=w, username=username),
        latest_date=lambda: stores.latest_work_log_date(db, username=username),
    )

    batches = stores.query_work_logs(db, window=used, username=username)
    session_rows = stores.query_sessions(db, window=used, username=username)

    totals, by_client = aggregate_productivity(batches)
    return DashboardTodayResponse(
        data=DashboardTodayData(
            used_date=used.start,
            used_date_to=used.end if used.is_range else None,
            totals=totals,
            by_client=by_client,
        ),
        work_logs=[WorkLogBatchRead.model_validate(b) for b in batches],
        sessions=reconstruct_sessions(session_rows, now=now),
    )


def build_live_tracking(
    db: Session,
    *,
    window: DateWindow,
    now: datetime,
    tz: tzinfo,
    username: Optional[str] = None,
    hours: Optional[float] = None,
) -> LiveTrackingResponse:
    bounds = hour_window(window, hours=hours, now=now, tz=tz)

    batches = stores.query_work_logs(db, window=window, username=username, updated_within=bounds)
    session_rows = stores.query_sessions(db, window=window, username=username, updated_within=bounds)

    return LiveTrackingResponse(
        data=[WorkLogBatchRead.model_validate(b) for b in batches],
        sessions=reconstruct_sessions(session_rows, now=now),
    )
