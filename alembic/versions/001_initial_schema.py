"""Initial schema - scopes, resources, grants, memberships, clients, revoked tokens.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "permission_scope",
        sa.Column("code", sa.String(20), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
    )
    scope_table = sa.table(
        "permission_scope",
        sa.column("code", sa.String),
        sa.column("name", sa.String),
        sa.column("sort_order", sa.Integer),
    )
    op.bulk_insert(
        scope_table,
        [
            {"code": "r", "name": "Read", "sort_order": 1},
            {"code": "c", "name": "Create", "sort_order": 2},
            {"code": "u", "name": "Update", "sort_order": 3},
            {"code": "d", "name": "Delete", "sort_order": 4},
            {"code": "e", "name": "Export", "sort_order": 5},
            {"code": "all", "name": "All", "sort_order": 99},
        ],
    )

    op.create_table(
        "permission_resource",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("client_id", sa.String(200), nullable=False),
        sa.Column("client_name", sa.String(200), nullable=True),
        sa.Column("code", sa.String(200), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("resource_type", sa.String(50), nullable=True),
        sa.Column(
            "parent_id",
            sa.UUID(),
            sa.ForeignKey("permission_resource.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("uri", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_permission_resource_client_code",
        "permission_resource",
        ["client_id", "code"],
        unique=True,
    )
    op.create_index("ix_permission_resource_parent", "permission_resource", ["parent_id"])

    op.create_table(
        "permission_grant",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("subject_type", sa.String(20), nullable=False),
        sa.Column("subject_id", sa.String(200), nullable=False),
        sa.Column("subject_name", sa.String(200), nullable=True),
        sa.Column(
            "resource_id",
            sa.UUID(),
            sa.ForeignKey("permission_resource.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("scopes", sa.String(500), nullable=False),
        sa.Column("inherit_to_children", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("granted_by", sa.String(200), nullable=True),
        sa.Column("granted_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "subject_type IN ('User', 'Group', 'Organization', 'Role')",
            name="ck_permission_grant_subject_type",
        ),
    )
    op.create_index(
        "ix_permission_grant_subject",
        "permission_grant",
        ["subject_type", "subject_id"],
    )
    op.create_index("ix_permission_grant_resource", "permission_grant", ["resource_id"])
    # at most one enabled grant per (subject, resource)
    op.create_index(
        "ux_permission_grant_enabled",
        "permission_grant",
        ["subject_type", "subject_id", "resource_id"],
        unique=True,
        postgresql_where=sa.text("enabled"),
    )

    op.create_table(
        "app_user",
        sa.Column("subject_id", sa.String(200), primary_key=True),
        sa.Column("user_name", sa.String(200), nullable=True),
        sa.Column("display_name", sa.String(200), nullable=True),
        sa.Column("english_name", sa.String(200), nullable=True),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        "user_group",
        sa.Column("id", sa.String(200), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
    )
    op.create_table(
        "group_membership",
        sa.Column("user_id", sa.String(200), sa.ForeignKey("app_user.subject_id", ondelete="CASCADE"), primary_key=True),
        sa.Column("group_id", sa.String(200), sa.ForeignKey("user_group.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "organization",
        sa.Column("id", sa.String(200), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("parent_id", sa.String(200), sa.ForeignKey("organization.id", ondelete="SET NULL"), nullable=True),
        sa.Column(
            "inherit_parent_permissions",
            sa.Boolean(),
            nullable=False,
            server_default=sa.true(),
        ),
    )
    op.create_table(
        "organization_membership",
        sa.Column("user_id", sa.String(200), sa.ForeignKey("app_user.subject_id", ondelete="CASCADE"), primary_key=True),
        sa.Column(
            "organization_id",
            sa.String(200),
            sa.ForeignKey("organization.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "registered_client",
        sa.Column("client_id", sa.String(200), primary_key=True),
        sa.Column("client_name", sa.String(200), nullable=True),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_table(
        "client_secret",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "client_id",
            sa.String(200),
            sa.ForeignKey("registered_client.client_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("value", sa.String(4000), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_client_secret_client", "client_secret", ["client_id"])

    op.create_table(
        "revoked_token",
        sa.Column("jti", sa.String(200), primary_key=True),
        sa.Column("jti_hash", sa.String(64), nullable=False),
        sa.Column("client_id", sa.String(200), nullable=False),
        sa.Column("subject_id", sa.String(200), nullable=True),
        sa.Column("token_type", sa.String(50), nullable=False, server_default="access_token"),
        sa.Column("expiration_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reason", sa.String(500), nullable=True),
        sa.Column("revoked_by", sa.String(200), nullable=True),
    )
    op.create_index("ix_revoked_token_jti_hash", "revoked_token", ["jti_hash"])
    op.create_index("ix_revoked_token_expiration", "revoked_token", ["expiration_time"])
    op.create_index("ix_revoked_token_subject", "revoked_token", ["subject_id"])


def downgrade() -> None:
    op.drop_table("revoked_token")
    op.drop_table("client_secret")
    op.drop_table("registered_client")
    op.drop_table("organization_membership")
    op.drop_table("organization")
    op.drop_table("group_membership")
    op.drop_table("user_group")
    op.drop_table("app_user")
    op.drop_table("permission_grant")
    op.drop_table("permission_resource")
    op.drop_table("permission_scope")
