"""Create session, QC work-log and order tables read by the tracker.

Revision ID: 0001_tracker_read_models
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0001_tracker_read_models"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "user_sessions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("session_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("user_type", sa.String(50), nullable=False),
        sa.Column("session_date", sa.String(10), nullable=False),
        sa.Column("login_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("logout_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_session", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("session_id", name="uq_user_sessions_session_id"),
    )
    op.create_index("ix_user_sessions_id", "user_sessions", ["id"])
    op.create_index("ix_user_sessions_user_id", "user_sessions", ["user_id"])
    op.create_index("ix_user_sessions_username", "user_sessions", ["username"])
    op.create_index("ix_user_sessions_session_date", "user_sessions", ["session_date"])
    op.create_index(
        "ix_user_sessions_username_date_login",
        "user_sessions",
        ["username", "session_date", "login_at"],
    )
    op.create_index(
        "ix_user_sessions_type_date_login",
        "user_sessions",
        ["user_type", "session_date", "login_at"],
    )

    op.create_table(
        "qc_work_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("employee_name", sa.String(255), nullable=False),
        sa.Column("client_code", sa.String(100), nullable=True),
        sa.Column("folder_path", sa.Text(), nullable=True),
        sa.Column("shift", sa.String(50), nullable=True),
        sa.Column("work_type", sa.String(100), nullable=True),
        sa.Column("date_today", sa.String(10), nullable=False),
        sa.Column("estimate_time", sa.Integer(), nullable=True),
        sa.Column("categories", sa.String(255), nullable=True),
        sa.Column("total_times", sa.Integer(), nullable=True),
        sa.Column("pause_count", sa.Integer(), nullable=True),
        sa.Column("pause_time", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_qc_work_logs_id", "qc_work_logs", ["id"])
    op.create_index("ix_qc_work_logs_employee_name", "qc_work_logs", ["employee_name"])
    op.create_index("ix_qc_work_logs_client_code", "qc_work_logs", ["client_code"])
    op.create_index("ix_qc_work_logs_date_today", "qc_work_logs", ["date_today"])
    op.create_index("ix_qc_work_logs_employee_date", "qc_work_logs", ["employee_name", "date_today"])

    op.create_table(
        "qc_work_log_files",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "batch_id",
            sa.Integer(),
            sa.ForeignKey("qc_work_logs.id", ondelete="CASCADE", name="fk_qc_work_log_files_batch_id_qc_work_logs"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("file_name", sa.Text(), nullable=True),
        sa.Column("file_status", sa.String(50), nullable=True),
        sa.Column("report", sa.Text(), nullable=True),
        sa.Column("time_spent", sa.Integer(), nullable=True),
    )
    op.create_index("ix_qc_work_log_files_id", "qc_work_log_files", ["id"])
    op.create_index("ix_qc_work_log_files_batch_id", "qc_work_log_files", ["batch_id"])

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("client_code", sa.String(100), nullable=False),
        sa.Column("folder", sa.String(255), nullable=True),
        sa.Column("folder_path", sa.Text(), nullable=True),
        sa.Column("task", sa.Text(), nullable=True),
        sa.Column("et", sa.Integer(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("type", sa.String(50), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_orders_id", "orders", ["id"])
    op.create_index("ix_orders_client_code", "orders", ["client_code"])
    op.create_index("ix_orders_status", "orders", ["status"])


def downgrade() -> None:
    op.drop_table("orders")
    op.drop_index("ix_qc_work_log_files_batch_id", table_name="qc_work_log_files")
    op.drop_index("ix_qc_work_log_files_id", table_name="qc_work_log_files")
    op.drop_table("qc_work_log_files")
    op.drop_table("qc_work_logs")
    op.drop_table("user_sessions")
