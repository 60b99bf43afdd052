"""Per-date availability slots for parking spaces."""

from __future__ import annotations

import uuid
import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parkshift.db.base import Base
from parkshift.models.mixins import TimestampMixin


if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from parkshift.models.parking_space import ParkingSpace

ALL_DAY_START_HOUR = 0
ALL_DAY_END_HOUR = 24


class AvailabilitySlot(TimestampMixin, Base):
    """One calendar date of availability for a space.

    A date with no row is not available. "All day" has no column of its own:
    it is the hour range ``(0, 24)``.
    """

    __tablename__ = "availability_slots"
    __table_args__ = (
        UniqueConstraint("space_id", "date", name="uq_availability_space_date"),
        CheckConstraint(
            "start_hour >= 0 AND end_hour <= 24 AND start_hour <= end_hour",
            name="ck_availability_hour_range",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    space_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("parking_spaces.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    start_hour: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    end_hour: Mapped[int] = mapped_column(Integer, nullable=False, default=24)

    space: Mapped["ParkingSpace"] = relationship(
        "ParkingSpace", back_populates="availability_slots"
    )

    @property
    def is_all_day(self) -> bool:
        return (
            self.start_hour == ALL_DAY_START_HOUR and self.end_hour == ALL_DAY_END_HOUR
        )
