"""Schemas for parking space listings."""
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SpaceBase(BaseModel):
    """Shared listing fields."""

    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    address: str | None = Field(default=None, max_length=512)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    length_cm: int = Field(ge=0)
    width_cm: int = Field(ge=0)
    height_cm: int | None = Field(default=None, ge=0)
    max_weight_kg: int | None = Field(default=None, ge=0)
    hourly_price: Decimal = Field(ge=Decimal("0"))
    daily_price: Decimal = Field(ge=Decimal("0"))
    minimum_duration_hours: int = Field(default=1, ge=0)
    maximum_duration_hours: int = Field(default=720, ge=0)
    amenities: dict[str, bool] = Field(default_factory=dict)


class SpaceCreate(SpaceBase):
    """Payload for listing a new space."""

    @model_validator(mode="after")
    def _check_duration_bounds(self) -> "SpaceCreate":
        if self.minimum_duration_hours > self.maximum_duration_hours:
            raise ValueError(
                "minimum_duration_hours must not exceed maximum_duration_hours"
            )
        return self


class SpaceUpdate(BaseModel):
    """Mutable listing fields."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    address: str | None = Field(default=None, max_length=512)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    length_cm: int | None = Field(default=None, ge=0)
    width_cm: int | None = Field(default=None, ge=0)
    height_cm: int | None = Field(default=None, ge=0)
    max_weight_kg: int | None = Field(default=None, ge=0)
    hourly_price: Decimal | None = Field(default=None, ge=Decimal("0"))
    daily_price: Decimal | None = Field(default=None, ge=Decimal("0"))
    minimum_duration_hours: int | None = Field(default=None, ge=0)
    maximum_duration_hours: int | None = Field(default=None, ge=0)
    amenities: dict[str, bool] | None = None
    is_active: bool | None = None


class SpaceRead(SpaceBase):
    """Serialized listing."""

    id: uuid.UUID
    owner_id: uuid.UUID
    is_active: bool
    amenities: dict[str, Any]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
