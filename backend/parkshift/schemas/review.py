"""Schemas for space reviews."""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ReviewCreate(BaseModel):
    booking_id: uuid.UUID
    rating: int = Field(ge=1, le=5)
    comment: str | None = Field(default=None, max_length=2000)


class ReviewRead(ReviewCreate):
    id: uuid.UUID
    space_id: uuid.UUID
    reviewer_id: uuid.UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
