"""Schemas for the space search endpoint."""
from __future__ import annotations

import uuid
from decimal import Decimal

from pydantic import BaseModel, Field

from parkshift.schemas.booking import BookingWindowIn
from parkshift.schemas.space import SpaceRead
from parkshift.schemas.vehicle import VehicleDimensions


class SearchLocation(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class SearchFilters(BaseModel):
    """Optional narrowing; price bounds apply to the hourly or daily price."""

    price_min: Decimal | None = Field(default=None, ge=Decimal("0"))
    price_max: Decimal | None = Field(default=None, ge=Decimal("0"))
    ev_charging: bool = False
    covered: bool = False
    security: bool = False
    accessibility: bool = False

    def required_amenities(self) -> list[str]:
        return [
            name
            for name in ("ev_charging", "covered", "security", "accessibility")
            if getattr(self, name)
        ]


class SearchRequest(BaseModel):
    location: SearchLocation
    radius_km: float | None = Field(default=None, gt=0)
    window: BookingWindowIn | None = None
    vehicle_id: uuid.UUID | None = None
    vehicle: VehicleDimensions | None = None
    filters: SearchFilters = Field(default_factory=SearchFilters)


class SearchResult(SpaceRead):
    distance_km: float
    average_rating: float | None = None
    review_count: int = 0
    quoted_total: Decimal | None = None
