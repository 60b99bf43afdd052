"""Direct messaging between renters and space owners."""
from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from parkshift.models.booking import Booking
from parkshift.models.message import Message
from parkshift.models.notification import NotificationType
from parkshift.models.profile import Profile
from parkshift.schemas.message import MessageCreate
from parkshift.services import notification_service

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Conversation:
    booking_id: uuid.UUID | None
    other_user_id: uuid.UUID
    last_message: Message
    unread_count: int


def _involving(user_id: uuid.UUID):
    return or_(Message.sender_id == user_id, Message.recipient_id == user_id)


async def _booking_parties(
    session: AsyncSession, booking_id: uuid.UUID
) -> tuple[uuid.UUID, uuid.UUID]:
    result = await session.execute(
        select(Booking)
        .where(Booking.id == booking_id)
        .options(selectinload(Booking.space))
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise ValueError("Booking not found")
    return booking.renter_id, booking.space.owner_id


async def send_message(
    session: AsyncSession,
    *,
    sender: Profile,
    payload: MessageCreate,
) -> Message:
    """Store a message and notify its recipient.

    Messages about a booking may only pass between that booking's renter
    and the owner of its space.
    """
    if payload.recipient_id == sender.id:
        raise ValueError("Cannot send a message to yourself")
    if await session.get(Profile, payload.recipient_id) is None:
        raise ValueError("Recipient not found")
    if payload.booking_id is not None:
        parties = await _booking_parties(session, payload.booking_id)
        if {sender.id, payload.recipient_id} != set(parties):
            raise PermissionError("Only the parties of a booking can message about it")

    message = Message(
        sender_id=sender.id,
        recipient_id=payload.recipient_id,
        booking_id=payload.booking_id,
        content=payload.content,
        message_type=payload.message_type,
    )
    session.add(message)
    await session.commit()
    await session.refresh(message)
    logger.info("Message %s sent to %s", message.id, message.recipient_id)

    await notification_service.notify(
        session,
        user_id=message.recipient_id,
        kind=NotificationType.MESSAGE,
        title="New Message",
        message=f"You have a new message from {sender.first_name or 'a ParkShift user'}",
        data={"message_id": message.id, "sender_id": sender.id},
    )
    return message


async def list_messages(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    booking_id: uuid.UUID | None = None,
    other_user_id: uuid.UUID | None = None,
) -> Sequence[Message]:
    """Oldest-first thread for a booking, or the direct thread with one user.

    Without either filter every message the user sent or received is
    returned.
    """
    stmt = select(Message).where(_involving(user_id))
    if booking_id is not None:
        stmt = stmt.where(Message.booking_id == booking_id)
    elif other_user_id is not None:
        stmt = stmt.where(
            Message.booking_id.is_(None),
            or_(
                and_(
                    Message.sender_id == user_id,
                    Message.recipient_id == other_user_id,
                ),
                and_(
                    Message.sender_id == other_user_id,
                    Message.recipient_id == user_id,
                ),
            ),
        )
    result = await session.execute(stmt.order_by(Message.created_at.asc()))
    return result.scalars().all()


async def list_conversations(
    session: AsyncSession, *, user_id: uuid.UUID
) -> list[Conversation]:
    """Threads keyed by booking, or by the other user for direct messages."""
    result = await session.execute(
        select(Message)
        .where(_involving(user_id))
        .order_by(Message.created_at.desc())
    )
    conversations: dict[object, Conversation] = {}
    for message in result.scalars():
        other = (
            message.recipient_id if message.sender_id == user_id else message.sender_id
        )
        key = message.booking_id or other
        conversation = conversations.get(key)
        if conversation is None:
            conversation = Conversation(
                booking_id=message.booking_id,
                other_user_id=other,
                last_message=message,
                unread_count=0,
            )
            conversations[key] = conversation
        if message.recipient_id == user_id and not message.is_read:
            conversation.unread_count += 1
    return list(conversations.values())


async def mark_as_read(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    message_ids: Sequence[uuid.UUID],
) -> int:
    """Only the recipient can mark a message read."""
    result = await session.execute(
        update(Message)
        .where(Message.recipient_id == user_id, Message.id.in_(list(message_ids)))
        .values(is_read=True)
    )
    await session.commit()
    return result.rowcount or 0
