"""UserSession model: login/logout records written by the auth service."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from tracker.db.base import Base, IDMixin, TimestampMixin


class UserSession(IDMixin, TimestampMixin, Base):
    __tablename__ = "user_sessions"

    session_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    user_type: Mapped[str] = mapped_column(String(50), nullable=False, default="employee")
    session_date: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    login_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    logout_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    duration_session: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        Index("ix_user_sessions_username_date_login", "username", "session_date", "login_at"),
        Index("ix_user_sessions_type_date_login", "user_type", "session_date", "login_at"),
    )

    @property
    def is_open(self) -> bool:
        return self.logout_at is None
