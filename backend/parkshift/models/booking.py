"""Bookings of parking spaces by renters."""
from __future__ import annotations

import enum
import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parkshift.db.base import Base
from parkshift.models.mixins import TimestampMixin


if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from parkshift.models.parking_space import ParkingSpace
    from parkshift.models.profile import Profile
    from parkshift.models.vehicle import Vehicle


class BookingStatus(str, enum.Enum):
    """Lifecycle states for bookings."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Booking(TimestampMixin, Base):
    """A priced reservation of a space for an hourly or daily window."""

    __tablename__ = "bookings"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    space_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("parking_spaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    renter_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    vehicle_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("vehicles.id", ondelete="SET NULL")
    )
    # Wall-clock times of the space; no time zone conversion is applied.
    start_at: Mapped[datetime] = mapped_column(DateTime(), nullable=False)
    end_at: Mapped[datetime] = mapped_column(DateTime(), nullable=False)
    is_hourly: Mapped[bool] = mapped_column(Boolean, nullable=False)
    duration_hours: Mapped[Decimal] = mapped_column(
        Numeric(8, 2), nullable=False, default=Decimal("0")
    )
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="eur")
    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus), nullable=False, default=BookingStatus.PENDING
    )
    special_requests: Mapped[str | None] = mapped_column(String(1024))
    stripe_payment_intent_id: Mapped[str | None] = mapped_column(String(255), index=True)

    space: Mapped["ParkingSpace"] = relationship("ParkingSpace")
    renter: Mapped["Profile"] = relationship("Profile")
    vehicle: Mapped["Vehicle | None"] = relationship("Vehicle")
