"""Schemas for direct messages."""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MessageCreate(BaseModel):
    recipient_id: uuid.UUID
    content: str = Field(min_length=1, max_length=5000)
    booking_id: uuid.UUID | None = None
    message_type: str = Field(default="text", max_length=32)


class MessageRead(MessageCreate):
    id: uuid.UUID
    sender_id: uuid.UUID
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConversationRead(BaseModel):
    """Latest message of a thread plus how many of its messages are unread."""

    booking_id: uuid.UUID | None
    other_user_id: uuid.UUID
    last_message: MessageRead
    unread_count: int


class MessageMarkRead(BaseModel):
    message_ids: list[uuid.UUID] = Field(min_length=1)
