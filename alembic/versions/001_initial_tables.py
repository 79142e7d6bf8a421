"""001_initial_tables

Revision ID: 001
Revises:
Create Date: 2024-01-01 00:00:00.000000

Creates the initial tables:
  - users
  - activity
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | None = None
depends_on: str | None = None


def upgrade() -> None:
    # ── Enums ─────────────────────────────────────────────────────────────────
    activity_type_enum = postgresql.ENUM(
        "ENTRY", "FILES", "SETTINGS", "LOGIN", "COMMENT",
        name="activity_type_enum", create_type=False,
    )
    activity_type_enum.create(op.get_bind(), checkfirst=True)

    activity_action_enum = postgresql.ENUM(
        "ADD", "UPDATE", "DELETE", "LOGIN", "SOFT_DELETE", "REVERT",
        name="activity_action_enum", create_type=False,
    )
    activity_action_enum.create(op.get_bind(), checkfirst=True)

    # ── users ─────────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # ── activity ──────────────────────────────────────────────────────────────
    op.create_table(
        "activity",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("type", activity_type_enum, nullable=False),
        sa.Column("action", activity_action_enum, nullable=False),
        sa.Column("collection", sa.String(64), nullable=False),
        sa.Column("item", sa.String(255), nullable=False),
        sa.Column("user", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("datetime", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ip", sa.String(50), nullable=False, server_default=""),
        sa.Column("user_agent", sa.String(255), nullable=False, server_default=""),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(
            ["user"], ["users.id"],
            name="fk_activity_user_users",
        ),
        sa.ForeignKeyConstraint(
            ["parent_id"], ["activity.id"],
            name="fk_activity_parent_id_activity",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_activity"),
    )
    op.create_index("ix_activity_collection_item", "activity", ["collection", "item"])
    op.create_index("ix_activity_datetime", "activity", ["datetime"])
    op.create_index("ix_activity_user", "activity", ["user"])
    op.create_index("ix_activity_parent_id", "activity", ["parent_id"])


def downgrade() -> None:
    op.drop_table("activity")
    op.drop_table("users")

    sa.Enum(name="activity_action_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="activity_type_enum").drop(op.get_bind(), checkfirst=True)
