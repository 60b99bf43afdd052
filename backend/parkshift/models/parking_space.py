"""Listed parking spaces."""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parkshift.db.base import Base
from parkshift.models.mixins import TimestampMixin


if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from parkshift.models.availability import AvailabilitySlot
    from parkshift.models.profile import Profile
    from parkshift.models.review import Review


class ParkingSpace(TimestampMixin, Base):
    """A parking spot with dimensions, prices and availability."""

    __tablename__ = "parking_spaces"
    __table_args__ = (
        CheckConstraint("length_cm >= 0", name="ck_space_length_nonneg"),
        CheckConstraint("width_cm >= 0", name="ck_space_width_nonneg"),
        CheckConstraint("height_cm IS NULL OR height_cm >= 0", name="ck_space_height_nonneg"),
        CheckConstraint(
            "max_weight_kg IS NULL OR max_weight_kg >= 0", name="ck_space_weight_nonneg"
        ),
        CheckConstraint("hourly_price >= 0", name="ck_space_hourly_nonneg"),
        CheckConstraint("daily_price >= 0", name="ck_space_daily_nonneg"),
        CheckConstraint(
            "minimum_duration_hours <= maximum_duration_hours",
            name="ck_space_duration_bounds",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text())
    address: Mapped[str | None] = mapped_column(String(512))
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    length_cm: Mapped[int] = mapped_column(Integer, nullable=False)
    width_cm: Mapped[int] = mapped_column(Integer, nullable=False)
    height_cm: Mapped[int | None] = mapped_column(Integer)
    max_weight_kg: Mapped[int | None] = mapped_column(Integer)

    hourly_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    daily_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    minimum_duration_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    maximum_duration_hours: Mapped[int] = mapped_column(
        Integer, nullable=False, default=720
    )

    amenities: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    owner: Mapped["Profile"] = relationship("Profile", back_populates="spaces")
    availability_slots: Mapped[list["AvailabilitySlot"]] = relationship(
        "AvailabilitySlot",
        back_populates="space",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="AvailabilitySlot.date",
    )
    reviews: Mapped[list["Review"]] = relationship(
        "Review",
        back_populates="space",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
