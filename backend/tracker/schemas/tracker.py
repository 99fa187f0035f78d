"""Response schemas for the tracker read endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from tracker.schemas.base import CamelModel, ORMModel


class WorkLogFileRead(ORMModel):
    file_name: Optional[str] = None
    file_status: Optional[str] = None
    report: Optional[str] = None
    time_spent: Optional[int] = None


class WorkLogBatchRead(ORMModel):
    id: int
    employee_name: str
    client_code: Optional[str] = None
    folder_path: Optional[str] = None
    shift: Optional[str] = None
    work_type: Optional[str] = None
    categories: Optional[str] = None
    date_today: str
    estimate_time: Optional[int] = None
    total_times: Optional[int] = None
    pause_count: Optional[int] = None
    pause_time: Optional[int] = None
    files: List[WorkLogFileRead] = []
    created_at: datetime
    updated_at: datetime


class SessionAggregate(ORMModel):
    username: str
    first_login_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    last_logout_at: Optional[datetime] = None
    closed_duration_seconds: int = 0
    active_login_at: Optional[datetime] = None
    is_active: bool = False
    active_elapsed_seconds: int = 0
    total_duration_seconds: int = 0


class ClientAggregate(CamelModel):
    total_files: int = 0
    work_seconds: int = 0
    pause_seconds: int = 0
    avg_seconds: int = 0
    last_work_type: str = ""
    last_category: str = ""


class ProductivityTotals(CamelModel):
    total_files: int = 0
    total_work_seconds: int = 0
    total_pause_seconds: int = 0
    avg_seconds: int = 0


class DashboardTodayData(CamelModel):
    used_date: str
    used_date_to: Optional[str] = None
    totals: ProductivityTotals
    by_client: Dict[str, ClientAggregate] = {}


class DashboardTodayResponse(CamelModel):
    success: bool = True
    data: DashboardTodayData
    work_logs: List[WorkLogBatchRead] = []
    sessions: List[SessionAggregate] = []


class LiveTrackingResponse(CamelModel):
    success: bool = True
    data: List[WorkLogBatchRead] = []
    sessions: List[SessionAggregate] = []


class FileSearchResult(CamelModel):
    file_name: str = ""
    employee_name: str = ""
    work_type: str = ""
    shift: str = ""
    client_name: str = ""
    client_code: str = ""
    time_spent: str = "00:00:00"
    file_path: str = ""
    folder_path: str = ""
    date_today: str = ""
    report: str = ""


class FileSearchResponse(CamelModel):
    success: bool = True
    results: List[FileSearchResult] = []


class JobListItem(CamelModel):
    client_code: str = ""
    folder: str = ""
    folder_path: str = ""
    task: str = ""
    et: int = 0
    nof: int = 0
    status: str = ""
    type: str = ""


class JobListResponse(CamelModel):
    success: bool = True
    jobs: List[JobListItem] = []
