"""Tracker read endpoints: job list, file search, today dashboard, live tracking."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from tracker.core.deps import can_view_everyone, get_current_principal, get_now, require_live_tracking
from tracker.core.errors import InvalidInput, UpstreamReadFailure
from tracker.core.security import Principal
from tracker.core.settings import settings
from tracker.db.session import get_db
from tracker.schemas.tracker import (
    DashboardTodayResponse,
    FileSearchResponse,
    JobListResponse,
    LiveTrackingResponse,
)
from tracker.services.dashboard import build_live_tracking, build_today_dashboard
from tracker.services.date_resolution import build_window, parse_hours
from tracker.services.search import list_jobs, search_files

router = APIRouter(prefix="/api/tracker", tags=["tracker"])
logger = logging.getLogger(__name__)


@contextmanager
def _service_errors(operation: str) -> Iterator[None]:
    """Map service failures to HTTP errors without leaking the cause."""
    try:
        yield
    except HTTPException:
        raise
    except InvalidInput as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except UpstreamReadFailure as exc:
        logger.error(f"{operation} aborted: {exc}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service unavailable") from exc
    except Exception as exc:
        logger.exception(f"{operation} failed")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service unavailable") from exc


def _scoped_username(principal: Principal, requested: Optional[str]) -> Optional[str]:
    username = (requested or "").strip() or None
    if can_view_everyone(principal):
        return username
    if username and username.lower() != principal.username.lower():
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorised")
    return principal.username


@router.get("/job-list", response_model=JobListResponse)
def job_list(
    client_code: Optional[str] = Query(None, alias="clientCode"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> JobListResponse:
    with _service_errors("job_list"):
        return list_jobs(db, client_code=client_code)


@router.get("/search-file", response_model=FileSearchResponse)
def search_file(
    query: Optional[str] = Query(None),
    client_code: Optional[str] = Query(None, alias="clientCode"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> FileSearchResponse:
    with _service_errors("search_file"):
        return search_files(db, query=query, client_code=client_code, limit=settings.search_limit)


@router.get("/dashboard-today", response_model=DashboardTodayResponse)
def dashboard_today(
    username: Optional[str] = Query(None),
    date: Optional[str] = Query(None),
    date_from: Optional[str] = Query(None, alias="dateFrom"),
    date_to: Optional[str] = Query(None, alias="dateTo"),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
    principal: Principal = Depends(get_current_principal),
) -> DashboardTodayResponse:
    scoped = _scoped_username(principal, username)
    window = build_window(now=now, tz=settings.tzinfo, date_value=date, date_from=date_from, date_to=date_to)
    with _service_errors("dashboard_today"):
        return build_today_dashboard(db, window=window, now=now, username=scoped)


@router.get("/live-tracking", response_model=LiveTrackingResponse)
def live_tracking(
    username: Optional[str] = Query(None),
    date: Optional[str] = Query(None),
    date_from: Optional[str] = Query(None, alias="dateFrom"),
    date_to: Optional[str] = Query(None, alias="dateTo"),
    hours: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
    principal: Principal = Depends(require_live_tracking),
) -> LiveTrackingResponse:
    window = build_window(now=now, tz=settings.tzinfo, date_value=date, date_from=date_from, date_to=date_to)
    with _service_errors("live_tracking"):
        return build_live_tracking(
            db,
            window=window,
            now=now,
            tz=settings.tzinfo,
            username=(username or "").strip() or None,
            hours=parse_hours(hours),
        )
