"""Initial schema.

Revision ID: 20261018_000001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261018_000001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "routine",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=200), nullable=True),
        sa.Column("repeat_pattern", sa.String(length=20), nullable=False),
        sa.Column("repeat_days", sa.JSON(), nullable=True),
        sa.Column("deadline", sa.String(length=5), nullable=True),
        sa.Column("item_type", sa.String(length=20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_routine_name", "routine", ["name"])
    op.create_index("ix_routine_is_active", "routine", ["is_active"])
    op.create_table(
        "routine_instance",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("routine_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False),
        sa.Column("value", sa.JSON(), nullable=True),
        sa.Column("photos", sa.JSON(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_routine_instance_routine_id", "routine_instance", ["routine_id"])
    op.create_index("ix_routine_instance_date_routine", "routine_instance", ["date", "routine_id"])
    op.create_table(
        "app_settings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("pin_enabled", sa.Boolean(), nullable=False),
        sa.Column("pin_hash", sa.String(length=200), nullable=True),
        sa.Column("biometric_enabled", sa.Boolean(), nullable=False),
        sa.Column("notifications_enabled", sa.Boolean(), nullable=False),
        sa.Column("encryption_key", sa.String(length=200), nullable=False),
        sa.Column("last_backup", sa.DateTime(), nullable=True),
        sa.Column("version", sa.String(length=20), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("app_settings")
    op.drop_index("ix_routine_instance_date_routine", table_name="routine_instance")
    op.drop_index("ix_routine_instance_routine_id", table_name="routine_instance")
    op.drop_table("routine_instance")
    op.drop_index("ix_routine_is_active", table_name="routine")
    op.drop_index("ix_routine_name", table_name="routine")
    op.drop_table("routine")
