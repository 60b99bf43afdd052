"""Schemas for space availability."""
from __future__ import annotations

import uuid
import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

CLOCK_PATTERN = r"^(([01]\d|2[0-3]):[0-5]\d|24:00)$"


class DayAvailability(BaseModel):
    """Per-date settings as edited in the owner's scheduling calendar."""

    available: bool = False
    all_day: bool = Field(default=False, alias="allDay")
    start_time: str = Field(default="09:00", alias="startTime", pattern=CLOCK_PATTERN)
    end_time: str = Field(default="18:00", alias="endTime", pattern=CLOCK_PATTERN)

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def _check_hour_range(self) -> "DayAvailability":
        if self.available and not self.all_day:
            start_hour = int(self.start_time.split(":")[0])
            end_hour = int(self.end_time.split(":")[0])
            if start_hour > end_hour:
                raise ValueError("startTime must not be later than endTime")
        return self


class AvailabilityReplace(BaseModel):
    """Full availability set for a space; dates missing here become unavailable."""

    availability: dict[datetime.date, DayAvailability]


class AvailabilityCopyRequest(BaseModel):
    """Duplicate one date's settings onto other dates."""

    source_date: datetime.date
    target_dates: list[datetime.date] = Field(min_length=1)


class AvailabilitySlotRead(BaseModel):
    id: uuid.UUID
    space_id: uuid.UUID
    date: datetime.date
    is_available: bool
    start_hour: int
    end_hour: int
    is_all_day: bool

    model_config = ConfigDict(from_attributes=True)


class AvailabilityCalendar(BaseModel):
    """Every day of a month keyed by ISO date."""

    space_id: uuid.UUID
    month: str
    days: dict[datetime.date, DayAvailability]


class AvailabilityCheckRead(BaseModel):
    """Open slots in an inclusive date range and whether every date has one."""

    start_date: datetime.date
    end_date: datetime.date
    available: bool
    slots: list[AvailabilitySlotRead]
