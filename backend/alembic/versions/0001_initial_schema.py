"""Initial marketplace schema.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

_BOOKING_STATUS = sa.Enum(
    "PENDING", "CONFIRMED", "COMPLETED", "CANCELLED", name="bookingstatus"
)
_NOTIFICATION_TYPE = sa.Enum(
    "BOOKING", "MESSAGE", "PAYMENT", "LISTING", name="notificationtype"
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


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("first_name", sa.String(length=120)),
        sa.Column("last_name", sa.String(length=120)),
        sa.Column("phone", sa.String(length=32)),
        sa.Column("stripe_account_id", sa.String(length=255)),
        *_timestamps(),
    )

    op.create_table(
        "parking_spaces",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "owner_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("address", sa.String(length=512)),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("length_cm", sa.Integer(), nullable=False),
        sa.Column("width_cm", sa.Integer(), nullable=False),
        sa.Column("height_cm", sa.Integer()),
        sa.Column("max_weight_kg", sa.Integer()),
        sa.Column("hourly_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("daily_price", sa.Numeric(10, 2), nullable=False),
        sa.Column(
            "minimum_duration_hours", sa.Integer(), nullable=False, server_default="1"
        ),
        sa.Column(
            "maximum_duration_hours", sa.Integer(), nullable=False, server_default="720"
        ),
        sa.Column("amenities", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint("length_cm >= 0", name="ck_space_length_nonneg"),
        sa.CheckConstraint("width_cm >= 0", name="ck_space_width_nonneg"),
        sa.CheckConstraint(
            "height_cm IS NULL OR height_cm >= 0", name="ck_space_height_nonneg"
        ),
        sa.CheckConstraint(
            "max_weight_kg IS NULL OR max_weight_kg >= 0",
            name="ck_space_weight_nonneg",
        ),
        sa.CheckConstraint("hourly_price >= 0", name="ck_space_hourly_nonneg"),
        sa.CheckConstraint("daily_price >= 0", name="ck_space_daily_nonneg"),
        sa.CheckConstraint(
            "minimum_duration_hours <= maximum_duration_hours",
            name="ck_space_duration_bounds",
        ),
    )
    op.create_index(
        "ix_parking_spaces_owner_id", "parking_spaces", ["owner_id"], unique=False
    )

    op.create_table(
        "availability_slots",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "space_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("parking_spaces.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("start_hour", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("end_hour", sa.Integer(), nullable=False, server_default="24"),
        *_timestamps(),
        sa.UniqueConstraint("space_id", "date", name="uq_availability_space_date"),
        sa.CheckConstraint(
            "start_hour >= 0 AND end_hour <= 24 AND start_hour <= end_hour",
            name="ck_availability_hour_range",
        ),
    )

    op.create_table(
        "vehicles",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("make", sa.String(length=120)),
        sa.Column("model", sa.String(length=120)),
        sa.Column("license_plate", sa.String(length=32)),
        sa.Column("length_cm", sa.Integer()),
        sa.Column("width_cm", sa.Integer()),
        sa.Column("height_cm", sa.Integer()),
        sa.Column("weight_kg", sa.Integer()),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_vehicles_user_id", "vehicles", ["user_id"], unique=False)

    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "space_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("parking_spaces.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "renter_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "vehicle_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("vehicles.id", ondelete="SET NULL"),
        ),
        sa.Column("start_at", sa.DateTime(), nullable=False),
        sa.Column("end_at", sa.DateTime(), nullable=False),
        sa.Column("is_hourly", sa.Boolean(), nullable=False),
        sa.Column("duration_hours", sa.Numeric(8, 2), nullable=False, server_default="0"),
        sa.Column("duration_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="eur"),
        sa.Column("status", _BOOKING_STATUS, nullable=False, server_default="PENDING"),
        sa.Column("special_requests", sa.String(length=1024)),
        sa.Column("stripe_payment_intent_id", sa.String(length=255)),
        *_timestamps(),
    )
    op.create_index("ix_bookings_space_id", "bookings", ["space_id"], unique=False)
    op.create_index("ix_bookings_renter_id", "bookings", ["renter_id"], unique=False)
    op.create_index(
        "ix_bookings_stripe_payment_intent_id",
        "bookings",
        ["stripe_payment_intent_id"],
        unique=False,
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("type", _NOTIFICATION_TYPE, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.String(length=1024), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index(
        "ix_notifications_user_id", "notifications", ["user_id"], unique=False
    )

    op.create_table(
        "reviews",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "booking_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "space_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("parking_spaces.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "reviewer_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.String(length=2000)),
        *_timestamps(),
        sa.UniqueConstraint(
            "booking_id", "reviewer_id", name="uq_review_booking_reviewer"
        ),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_review_rating_range"),
    )
    op.create_index("ix_reviews_space_id", "reviews", ["space_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_reviews_space_id", table_name="reviews")
    op.drop_table("reviews")
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_bookings_stripe_payment_intent_id", table_name="bookings")
    op.drop_index("ix_bookings_renter_id", table_name="bookings")
    op.drop_index("ix_bookings_space_id", table_name="bookings")
    op.drop_table("bookings")
    op.drop_index("ix_vehicles_user_id", table_name="vehicles")
    op.drop_table("vehicles")
    op.drop_table("availability_slots")
    op.drop_index("ix_parking_spaces_owner_id", table_name="parking_spaces")
    op.drop_table("parking_spaces")
    op.drop_table("profiles")
    _NOTIFICATION_TYPE.drop(op.get_bind(), checkfirst=True)
    _BOOKING_STATUS.drop(op.get_bind(), checkfirst=True)
