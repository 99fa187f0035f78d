"""Auxiliary tracker lookups: file search and the open job list."""

from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from tracker.core.errors import InvalidInput
from tracker.models.order import Order
from tracker.models.work_log import WorkLogBatch, WorkLogFile
from tracker.schemas.tracker import FileSearchResponse, FileSearchResult, JobListItem, JobListResponse
from tracker.services import stores
from tracker.services.formatting import as_int, as_string, normalize_file_path, to_hms


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def file_search_row(entry: WorkLogFile, batch: WorkLogBatch) -> FileSearchResult:
    return FileSearchResult(
        file_name=as_string(entry.file_name),
        employee_name=as_string(batch.employee_name),
        work_type=as_string(batch.work_type),
        shift=as_string(batch.shift),
        client_name=as_string(batch.client_code),
        client_code=as_string(batch.client_code),
        time_spent=to_hms(entry.time_spent),
        file_path=normalize_file_path(batch.folder_path, entry.file_name),
        folder_path=as_string(batch.folder_path),
        date_today=as_string(batch.date_today),
        report=as_string(entry.report),
    )


def search_files(
    db: Session,
    *,
    query: Optional[str],
    client_code: Optional[str] = None,
    limit: int = 50,
) -> FileSearchResponse:
    file_query = _clean(query)
    if not file_query:
        raise InvalidInput("Missing search query")

    rows = stores.query_file_entries(
        db,
        file_query=file_query,
        client_code=_clean(client_code),
        limit=limit,
    )
    return FileSearchResponse(results=[file_search_row(entry, batch) for entry, batch in rows])


def job_row(order: Order) -> JobListItem:
    return JobListItem(
        client_code=as_string(order.client_code).strip(),
        folder=as_string(order.folder).strip(),
        folder_path=as_string(order.folder_path).strip(),
        task=as_string(order.task).strip(),
        et=as_int(order.et),
        nof=as_int(order.quantity),
        status=as_string(order.status).strip(),
        type=as_string(order.type).strip(),
    )


def list_jobs(db: Session, *, client_code: Optional[str] = None) -> JobListResponse:
    orders = stores.query_open_orders(db, client_code=_clean(client_code))
    return JobListResponse(jobs=[job_row(order) for order in orders])
