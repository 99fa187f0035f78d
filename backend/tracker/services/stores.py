"""Read contracts over the session, work-log and order stores.

Every function here is a single snapshot read. A database error is logged,
counted and re-raised as ``UpstreamReadFailure`` so callers abort the whole
response instead of returning partial data.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tracker.core.errors import UpstreamReadFailure
from tracker.core.observability import record_store_failure
from tracker.models.order import Order
from tracker.models.user_session import UserSession
from tracker.models.work_log import WorkLogBatch, WorkLogFile
from tracker.services.date_resolution import DateWindow
from tracker.services.pipeline import Limit, Match, Sort, Stage, apply_stages

logger = logging.getLogger(__name__)

SESSION_STORE = "user_sessions"
WORK_LOG_STORE = "qc_work_logs"
ORDER_STORE = "orders"

OPEN_JOB_STATUSES = ("running", "correction")


@contextmanager
def _store_read(store: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        record_store_failure(store)
        logger.exception("store_read_failed", extra={"store": store})
        raise UpstreamReadFailure(store) from exc


def _like_escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _ci_equals(column, value: str):
    return func.lower(column) == value.strip().lower()


def _date_match(column, window: DateWindow):
    if window.start == window.end:
        return column == window.start
    return column.between(window.start, window.end)


def session_stages(
    *,
    window: DateWindow,
    username: Optional[str] = None,
    updated_within: Optional[Tuple[datetime, datetime]] = None,
) -> List[Stage]:
    criteria = [_date_match(UserSession.session_date, window)]
    if username:
        criteria.append(_ci_equals(UserSession.username, username))
    if updated_within is not None:
        since, until = updated_within
        criteria.append(UserSession.updated_at.between(since, until))
    return [Match.of(*criteria), Sort.by(UserSession.login_at.asc(), UserSession.id.asc())]


def work_log_stages(
    *,
    window: DateWindow,
    username: Optional[str] = None,
    client_code: Optional[str] = None,
    updated_within: Optional[Tuple[datetime, datetime]] = None,
) -> List[Stage]:
    criteria = [_date_match(WorkLogBatch.date_today, window)]
    if username:
        criteria.append(_ci_equals(WorkLogBatch.employee_name, username))
    if client_code:
        criteria.append(_ci_equals(WorkLogBatch.client_code, client_code))
    if updated_within is not None:
        since, until = updated_within
        criteria.append(WorkLogBatch.updated_at.between(since, until))
    # Oldest first so last-write-wins labels follow update order.
    return [Match.of(*criteria), Sort.by(WorkLogBatch.updated_at.asc(), WorkLogBatch.id.asc())]


def query_sessions(
    db: Session,
    *,
    window: DateWindow,
    username: Optional[str] = None,
    updated_within: Optional[Tuple[datetime, datetime]] = None,
) -> List[UserSession]:
    stages = session_stages(window=window, username=username, updated_within=updated_within)
    with _store_read(SESSION_STORE):
        return apply_stages(db.query(UserSession), stages).all()


def query_work_logs(
    db: Session,
    *,
    window: DateWindow,
    username: Optional[str] = None,
    client_code: Optional[str] = None,
    updated_within: Optional[Tuple[datetime, datetime]] = None,
) -> List[WorkLogBatch]:
    stages = work_log_stages(
        window=window,
        username=username,
        client_code=client_code,
        updated_within=updated_within,
    )
    with _store_read(WORK_LOG_STORE):
        return apply_stages(db.query(WorkLogBatch), stages).all()


def latest_work_log_date(db: Session, *, username: Optional[str] = None) -> Optional[str]:
    stages: List[Stage] = []
    if username:
        stages.append(Match.of(_ci_equals(WorkLogBatch.employee_name, username)))
    with _store_read(WORK_LOG_STORE):
        return apply_stages(db.query(func.max(WorkLogBatch.date_today)), stages).scalar()


def has_activity(db: Session, *, window: DateWindow, username: Optional[str] = None) -> bool:
    """True when either store holds at least one row for the window."""
    session_probe: Sequence[Stage] = [*session_stages(window=window, username=username), Limit(1)]
    work_log_probe: Sequence[Stage] = [*work_log_stages(window=window, username=username), Limit(1)]
    with _store_read(SESSION_STORE):
        if apply_stages(db.query(UserSession.id), session_probe).first() is not None:
            return True
    with _store_read(WORK_LOG_STORE):
        return apply_stages(db.query(WorkLogBatch.id), work_log_probe).first() is not None


def query_file_entries(
    db: Session,
    *,
    file_query: str,
    client_code: Optional[str] = None,
    limit: int = 50,
) -> List[Tuple[WorkLogFile, WorkLogBatch]]:
    criteria = [WorkLogFile.file_name.ilike(f"%{_like_escape(file_query)}%", escape="\\")]
    if client_code:
        criteria.append(_ci_equals(WorkLogBatch.client_code, client_code))
    stages: List[Stage] = [
        Match.of(*criteria),
        Sort.by(WorkLogBatch.updated_at.desc(), WorkLogBatch.id.desc(), WorkLogFile.position.asc()),
        Limit(limit),
    ]
    query = db.query(WorkLogFile, WorkLogBatch).join(WorkLogBatch, WorkLogFile.batch_id == WorkLogBatch.id)
    with _store_read(WORK_LOG_STORE):
        return [(entry, batch) for entry, batch in apply_stages(query, stages).all()]


def query_open_orders(db: Session, *, client_code: Optional[str] = None) -> List[Order]:
    criteria = [func.lower(Order.status).in_(OPEN_JOB_STATUSES)]
    if client_code:
        criteria.append(_ci_equals(Order.client_code, client_code))
    stages: List[Stage] = [
        Match.of(*criteria),
        Sort.by(Order.updated_at.desc(), Order.created_at.desc()),
    ]
    with _store_read(ORDER_STORE):
        return apply_stages(db.query(Order), stages).all()
