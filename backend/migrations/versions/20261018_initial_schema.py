"""Initial schema: accounts, sessions, drivers, punch ledger, return forms

Revision ID: 20261018_initial
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261018_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False),
        sa.Column("driver_id", sa.String(length=64), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_users_email", "users", ["email"])
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_driver_id", "users", ["driver_id"])

    op.create_table(
        "session_tokens",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("token_hash", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_revoked", sa.Boolean(), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_reason", sa.String(length=255), nullable=True),
        sa.Column("user_agent", sa.String(length=512), nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_session_tokens_user_id", "session_tokens", ["user_id"])
    op.create_index("ix_session_tokens_token_hash", "session_tokens", ["token_hash"], unique=True)
    op.create_index("ix_session_tokens_expires_at", "session_tokens", ["expires_at"])
    op.create_index("ix_session_tokens_is_revoked", "session_tokens", ["is_revoked"])
    op.create_index("ix_session_tokens_user_active", "session_tokens", ["user_id", "is_revoked"])

    op.create_table(
        "drivers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("driver_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=64), nullable=True),
        sa.Column("pin_hash", sa.String(length=255), nullable=True),
        sa.Column("face_descriptor", sa.JSON(), nullable=True),
        sa.Column("face_enrolled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("driver_id", name="uq_drivers_driver_id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_drivers_driver_id", "drivers", ["driver_id"])
    op.create_index("ix_drivers_name", "drivers", ["name"])
    op.create_index("ix_drivers_is_active", "drivers", ["is_active"])

    op.create_table(
        "punch_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("driver_id", sa.String(length=64), nullable=False),
        sa.Column("driver_name", sa.String(length=255), nullable=False),
        sa.Column("punch_type", sa.String(length=8), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("method", sa.String(length=8), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=True),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_punch_logs_driver_id", "punch_logs", ["driver_id"])
    op.create_index("ix_punch_logs_timestamp", "punch_logs", ["timestamp"])
    op.create_index("ix_punch_logs_driver_time", "punch_logs", ["driver_id", "timestamp"])

    op.create_table(
        "return_forms",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("driver_id", sa.String(length=64), nullable=False),
        sa.Column("driver_name", sa.String(length=255), nullable=False),
        sa.Column("punch_log_id", sa.Integer(), sa.ForeignKey("punch_logs.id"), nullable=False),
        sa.Column("total_items", sa.Integer(), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_return_forms_driver_id", "return_forms", ["driver_id"])
    op.create_index("ix_return_forms_punch_log_id", "return_forms", ["punch_log_id"])
    op.create_index("ix_return_forms_submitted_at", "return_forms", ["submitted_at"])
    op.create_index("ix_return_forms_driver_submitted", "return_forms", ["driver_id", "submitted_at"])
    op.create_index("ix_return_forms_status", "return_forms", ["status"])

    op.create_table(
        "return_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("return_form_id", sa.Integer(), sa.ForeignKey("return_forms.id"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("item_name", sa.String(length=255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("condition", sa.String(length=16), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_return_items_form", "return_items", ["return_form_id"])


def downgrade():
    op.drop_index("ix_return_items_form", table_name="return_items")
    op.drop_table("return_items")

    op.drop_index("ix_return_forms_status", table_name="return_forms")
    op.drop_index("ix_return_forms_driver_submitted", table_name="return_forms")
    op.drop_index("ix_return_forms_submitted_at", table_name="return_forms")
    op.drop_index("ix_return_forms_punch_log_id", table_name="return_forms")
    op.drop_index("ix_return_forms_driver_id", table_name="return_forms")
    op.drop_table("return_forms")

    op.drop_index("ix_punch_logs_driver_time", table_name="punch_logs")
    op.drop_index("ix_punch_logs_timestamp", table_name="punch_logs")
    op.drop_index("ix_punch_logs_driver_id", table_name="punch_logs")
    op.drop_table("punch_logs")

    op.drop_index("ix_drivers_is_active", table_name="drivers")
    op.drop_index("ix_drivers_name", table_name="drivers")
    op.drop_index("ix_drivers_driver_id", table_name="drivers")
    op.drop_table("drivers")

    op.drop_index("ix_session_tokens_user_active", table_name="session_tokens")
    op.drop_index("ix_session_tokens_is_revoked", table_name="session_tokens")
    op.drop_index("ix_session_tokens_expires_at", table_name="session_tokens")
    op.drop_index("ix_session_tokens_token_hash", table_name="session_tokens")
    op.drop_index("ix_session_tokens_user_id", table_name="session_tokens")
    op.drop_table("session_tokens")

    op.drop_index("ix_users_driver_id", table_name="users")
    op.drop_index("ix_users_role", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
