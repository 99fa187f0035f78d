"""QC work-log batches and their file entries, written by the desktop tracker."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tracker.db.base import Base, IDMixin, TimestampMixin


class WorkLogBatch(IDMixin, TimestampMixin, Base):
    __tablename__ = "qc_work_logs"

    employee_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    client_code: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    folder_path: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    shift: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    work_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    date_today: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    estimate_time: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, default=0)
    categories: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, default="")
    total_times: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, default=0)
    pause_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, default=0)
    pause_time: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, default=0)

    files: Mapped[List["WorkLogFile"]] = relationship(
        back_populates="batch",
        order_by="WorkLogFile.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_qc_work_logs_employee_date", "employee_name", "date_today"),
    )


class WorkLogFile(IDMixin, Base):
    __tablename__ = "qc_work_log_files"

    batch_id: Mapped[int] = mapped_column(ForeignKey("qc_work_logs.id", ondelete="CASCADE"), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    file_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    file_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, default="")
    report: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default="")
    time_spent: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, default=0)

    batch: Mapped[WorkLogBatch] = relationship(back_populates="files")
