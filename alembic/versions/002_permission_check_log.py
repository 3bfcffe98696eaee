"""Add permission check audit log.

Revision ID: 002
Revises: 001
Create Date: 2026-10-19

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "permission_check_log",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("checked_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("client_id", sa.String(200), nullable=False),
        sa.Column("subject_id", sa.String(200), nullable=True),
        sa.Column("user_name", sa.String(200), nullable=True),
        sa.Column("resource", sa.String(200), nullable=False),
        sa.Column("requested_scopes", sa.String(500), nullable=False),
        sa.Column("granted_scopes", sa.String(500), nullable=True),
        sa.Column("allowed", sa.Boolean(), nullable=False),
        sa.Column("success", sa.Boolean(), nullable=False),
        sa.Column("error_code", sa.String(50), nullable=True),
        sa.Column("error_message", sa.String(500), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.String(500), nullable=True),
        sa.Column("processing_time_ms", sa.Integer(), nullable=True),
    )
    op.create_index("ix_permission_check_log_checked_at", "permission_check_log", ["checked_at"])
    op.create_index(
        "ix_permission_check_log_client_subject",
        "permission_check_log",
        ["client_id", "subject_id"],
    )


def downgrade() -> None:
    op.drop_table("permission_check_log")
