"""Initial schema – users, sessions, tickets and ticket images

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

The session table name follows SESSION_TABLE so it matches the ORM model.
"""

from alembic import op
import sqlalchemy as sa

from helpdesk.core.config import get_settings

# Alembic revision identifiers
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

_PRIORITY = sa.Enum("LOW", "MEDIUM", "HIGH", name="ticket_priority")
_WORK_TYPE = sa.Enum("INSTALL", "REMOVAL", name="ticket_work_type")


def upgrade() -> None:
    session_table = get_settings().session_table

    # -- users ----------------------------------------------------------
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(150), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    # -- sessions -------------------------------------------------------
    op.create_table(
        session_table,
        sa.Column("sid", sa.String(128), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index(f"ix_{session_table}_user_id", session_table, ["user_id"])
    # Expired-session purge scans by expiry
    op.create_index(f"ix_{session_table}_expires_at", session_table, ["expires_at"])

    # -- tickets --------------------------------------------------------
    op.create_table(
        "tickets",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("account_name", sa.String(255), nullable=False),
        sa.Column("city", sa.String(255), nullable=False),
        sa.Column("contact_person", sa.String(255), nullable=True),
        sa.Column("contact_info", sa.String(255), nullable=True),
        sa.Column("priority", _PRIORITY, nullable=False, server_default="LOW"),
        sa.Column("work_type", _WORK_TYPE, nullable=True),
        sa.Column("lease", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("under_warranty", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("machine_model_or_type", sa.String(255), nullable=True),
        sa.Column("issue_description", sa.Text(), nullable=True),
        sa.Column("requesting_tech_name", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # -- ticket_images --------------------------------------------------
    op.create_table(
        "ticket_images",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "ticket_id",
            sa.Integer(),
            sa.ForeignKey("tickets.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("url", sa.String(2048), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_ticket_images_ticket_id", "ticket_images", ["ticket_id"])


def downgrade() -> None:
    session_table = get_settings().session_table

    op.drop_index("ix_ticket_images_ticket_id", table_name="ticket_images")
    op.drop_table("ticket_images")
    op.drop_table("tickets")
    op.drop_index(f"ix_{session_table}_expires_at", table_name=session_table)
    op.drop_index(f"ix_{session_table}_user_id", table_name=session_table)
    op.drop_table(session_table)
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
    _WORK_TYPE.drop(op.get_bind(), checkfirst=True)
    _PRIORITY.drop(op.get_bind(), checkfirst=True)
