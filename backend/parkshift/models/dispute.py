"""Disputes raised by one party of a booking against the other."""
from __future__ import annotations

import enum
import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parkshift.db.base import Base
from parkshift.models.mixins import TimestampMixin


if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from parkshift.models.booking import Booking


class DisputeStatus(str, enum.Enum):
    OPEN = "open"
    UNDER_REVIEW = "under_review"
    RESOLVED = "resolved"
    CLOSED = "closed"


class DisputeReason(str, enum.Enum):
    """Reasons offered to the complainant."""

    NOT_AS_DESCRIBED = "Space not as described"
    ACCESS_ISSUES = "Access issues"
    SAFETY_CONCERNS = "Safety concerns"
    CLEANLINESS = "Cleanliness issues"
    OWNER_NO_SHOW = "No-show (owner)"
    RENTER_NO_SHOW = "No-show (renter)"
    PAYMENT = "Payment dispute"
    DAMAGE = "Damage claim"
    OTHER = "Other"


class Dispute(TimestampMixin, Base):
    """At most one dispute per booking, between its renter and the space owner."""

    __tablename__ = "disputes"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    booking_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    complainant_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    respondent_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reason: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[DisputeStatus] = mapped_column(
        Enum(DisputeStatus), nullable=False, default=DisputeStatus.OPEN
    )
    resolution: Mapped[str | None] = mapped_column(Text)
    refund_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    # Recorded for support follow-up; nothing refunds automatically.
    auto_refund_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    booking: Mapped["Booking"] = relationship("Booking")
