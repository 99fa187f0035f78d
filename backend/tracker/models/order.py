"""Order model, read only for the tracker job list."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tracker.db.base import Base, IDMixin, TimestampMixin


class Order(IDMixin, TimestampMixin, Base):
    __tablename__ = "orders"

    client_code: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    folder: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    folder_path: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    task: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    et: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, default=0)
    quantity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, default=0)
    status: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
