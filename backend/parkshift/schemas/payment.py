"""Schemas for booking payments."""
from __future__ import annotations

import uuid
from decimal import Decimal

from pydantic import BaseModel


class PaymentIntentCreate(BaseModel):
    booking_id: uuid.UUID


class PaymentIntentRead(BaseModel):
    booking_id: uuid.UUID
    payment_intent_id: str
    client_secret: str
    amount: Decimal
    amount_minor_units: int
    currency: str
