from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import datetime, timezone
from itertools import count
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tracker.core.deps import get_current_principal, get_now
from tracker.core.security import Principal
from tracker.db.base import Base
from tracker.db.session import get_db
from tracker.main import app
from tracker.models.order import Order
from tracker.models.user_session import UserSession
from tracker.models.work_log import WorkLogBatch, WorkLogFile

NOW = datetime(2024, 1, 10, 14, 0, tzinfo=timezone.utc)

_session_ids = count(1)


def at(hour: int, minute: int = 0, day: int = 10) -> datetime:
    return datetime(2024, 1, day, hour, minute, tzinfo=timezone.utc)


@pytest.fixture()
def db():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def principal():
    return Principal(username="admin", role="admin")


@pytest.fixture()
def client(db: Session, principal: Principal):
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_principal] = lambda: principal
    app.dependency_overrides[get_now] = lambda: NOW

    client_instance = TestClient(app)
    try:
        yield client_instance
    finally:
        client_instance.close()
        app.dependency_overrides.clear()


def add_session(
    db: Session,
    *,
    username: str,
    login_at: datetime,
    logout_at: Optional[datetime] = None,
    duration: Optional[int] = None,
    session_date: str = "2024-01-10",
    updated_at: Optional[datetime] = None,
    user_type: str = "employee",
) -> UserSession:
    row = UserSession(
        session_id=f"sess-{next(_session_ids)}",
        username=username,
        user_type=user_type,
        session_date=session_date,
        login_at=login_at,
        logout_at=logout_at,
        duration_session=duration,
        created_at=login_at,
        updated_at=updated_at or logout_at or login_at,
    )
    db.add(row)
    db.commit()
    return row


def add_batch(
    db: Session,
    *,
    employee_name: str = "alice",
    client_code: Optional[str] = "0001_XY",
    work_type: Optional[str] = "qc",
    date_today: str = "2024-01-10",
    files=(),
    pause_time: Optional[int] = 0,
    categories: str = "",
    folder_path: str = r"\\nas\jobs\0001_XY",
    shift: str = "morning",
    updated_at: Optional[datetime] = None,
) -> WorkLogBatch:
    batch = WorkLogBatch(
        employee_name=employee_name,
        client_code=client_code,
        work_type=work_type,
        date_today=date_today,
        pause_time=pause_time,
        categories=categories,
        folder_path=folder_path,
        shift=shift,
        created_at=updated_at or at(9),
        updated_at=updated_at or at(9),
        files=[
            WorkLogFile(
                position=i,
                file_name=f.get("file_name"),
                time_spent=f.get("time_spent"),
                file_status=f.get("file_status"),
                report=f.get("report", ""),
            )
            for i, f in enumerate(files)
        ],
    )
    db.add(batch)
    db.commit()
    return batch


def add_order(db: Session, *, client_code: str, status: str, updated_at: datetime, **fields) -> Order:
    order = Order(client_code=client_code, status=status, created_at=updated_at, updated_at=updated_at, **fields)
    db.add(order)
    db.commit()
    return order
