"""Messages and booking disputes.

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None

_DISPUTE_STATUS = sa.Enum(
    "OPEN", "UNDER_REVIEW", "RESOLVED", "CLOSED", name="disputestatus"
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def _profile_fk(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.Uuid(as_uuid=True),
        sa.ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    if op.get_bind().dialect.name == "postgresql":
        # ADD VALUE cannot run inside the migration transaction.
        with op.get_context().autocommit_block():
            op.execute("ALTER TYPE notificationtype ADD VALUE IF NOT EXISTS 'DISPUTE'")

    op.create_table(
        "messages",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        _profile_fk("sender_id"),
        _profile_fk("recipient_id"),
        sa.Column(
            "booking_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("bookings.id", ondelete="SET NULL"),
        ),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "message_type", sa.String(length=32), nullable=False, server_default="text"
        ),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_messages_sender_id", "messages", ["sender_id"], unique=False)
    op.create_index(
        "ix_messages_recipient_id", "messages", ["recipient_id"], unique=False
    )
    op.create_index("ix_messages_booking_id", "messages", ["booking_id"], unique=False)

    op.create_table(
        "disputes",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "booking_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        _profile_fk("complainant_id"),
        _profile_fk("respondent_id"),
        sa.Column("reason", sa.String(length=64), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("status", _DISPUTE_STATUS, nullable=False),
        sa.Column("resolution", sa.Text()),
        sa.Column("refund_amount", sa.Numeric(10, 2)),
        sa.Column("auto_refund_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index(
        "ix_disputes_complainant_id", "disputes", ["complainant_id"], unique=False
    )
    op.create_index(
        "ix_disputes_respondent_id", "disputes", ["respondent_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_disputes_respondent_id", table_name="disputes")
    op.drop_index("ix_disputes_complainant_id", table_name="disputes")
    op.drop_table("disputes")
    op.drop_index("ix_messages_booking_id", table_name="messages")
    op.drop_index("ix_messages_recipient_id", table_name="messages")
    op.drop_index("ix_messages_sender_id", table_name="messages")
    op.drop_table("messages")
    _DISPUTE_STATUS.drop(op.get_bind(), checkfirst=True)
    # Postgres cannot drop a single enum value; DISPUTE stays on notificationtype.
