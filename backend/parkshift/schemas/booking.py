"""Schemas for booking quotes and bookings."""
from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from parkshift.models.booking import BookingStatus
from parkshift.schemas.availability import CLOCK_PATTERN


class BookingWindowIn(BaseModel):
    """Requested time window: hourly on one date, or daily across dates."""

    is_hourly: bool
    start_date: date
    end_date: date | None = None
    start_time: str | None = Field(default=None, pattern=CLOCK_PATTERN)
    end_time: str | None = Field(default=None, pattern=CLOCK_PATTERN)

    @model_validator(mode="after")
    def _normalise(self) -> "BookingWindowIn":
        if self.is_hourly:
            if self.start_time is None or self.end_time is None:
                raise ValueError("start_time and end_time are required for hourly bookings")
            # Zero-padded HH:MM compares in clock order.
            if self.end_time <= self.start_time:
                raise ValueError("end_time must be later than start_time")
            # Hourly bookings never cross midnight.
            self.end_date = self.start_date
        else:
            if self.end_date is None:
                raise ValueError("end_date is required for daily bookings")
            if self.end_date < self.start_date:
                raise ValueError("end_date must not be before start_date")
        return self


class BookingQuoteRequest(BookingWindowIn):
    space_id: uuid.UUID
    vehicle_id: uuid.UUID | None = None


class BookingQuoteRead(BaseModel):
    """Priced booking candidate."""

    space_id: uuid.UUID
    is_hourly: bool
    hours: Decimal
    days: int
    total_amount: Decimal
    amount_minor_units: int
    currency: str
    vehicle_compatible: bool
    available: bool


class BookingCreate(BookingQuoteRequest):
    vehicle_id: uuid.UUID  # type: ignore[assignment]
    special_requests: str | None = Field(default=None, max_length=1024)


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class BookingRead(BaseModel):
    id: uuid.UUID
    space_id: uuid.UUID
    renter_id: uuid.UUID
    vehicle_id: uuid.UUID | None
    start_at: datetime
    end_at: datetime
    is_hourly: bool
    duration_hours: Decimal
    duration_days: int
    total_amount: Decimal
    currency: str
    status: BookingStatus
    special_requests: str | None = None
    stripe_payment_intent_id: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
