"""Schemas for booking disputes."""
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from parkshift.models.dispute import DisputeReason, DisputeStatus


class DisputeCreate(BaseModel):
    booking_id: uuid.UUID
    reason: DisputeReason
    description: str = Field(min_length=1, max_length=5000)


class DisputeUpdate(BaseModel):
    status: DisputeStatus | None = None
    resolution: str | None = Field(default=None, max_length=5000)
    refund_amount: Decimal | None = Field(default=None, gt=0, decimal_places=2)


class DisputeRead(BaseModel):
    id: uuid.UUID
    booking_id: uuid.UUID
    complainant_id: uuid.UUID
    respondent_id: uuid.UUID
    reason: str
    description: str
    status: DisputeStatus
    resolution: str | None = None
    refund_amount: Decimal | None = None
    auto_refund_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
