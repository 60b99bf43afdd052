"""Schemas for renter vehicles."""
from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field


class VehicleDimensions(BaseModel):
    """Measurements used by the space compatibility check."""

    length_cm: int | None = Field(default=None, ge=0)
    width_cm: int | None = Field(default=None, ge=0)
    height_cm: int | None = Field(default=None, ge=0)
    weight_kg: int | None = Field(default=None, ge=0)


class VehicleCreate(VehicleDimensions):
    make: str | None = Field(default=None, max_length=120)
    model: str | None = Field(default=None, max_length=120)
    license_plate: str | None = Field(default=None, max_length=32)
    is_primary: bool = False


class VehicleUpdate(VehicleDimensions):
    make: str | None = Field(default=None, max_length=120)
    model: str | None = Field(default=None, max_length=120)
    license_plate: str | None = Field(default=None, max_length=32)


class VehicleRead(VehicleCreate):
    id: uuid.UUID
    user_id: uuid.UUID

    model_config = ConfigDict(from_attributes=True)
