"""In-app notification helpers."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parkshift.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)

_STATIC_URLS: dict[NotificationType, str] = {
    NotificationType.MESSAGE: "/messages",
    NotificationType.PAYMENT: "/profile?tab=payments",
    NotificationType.LISTING: "/listings",
}


def notification_url(kind: NotificationType, data: dict[str, Any] | None) -> str | None:
    """Client deep link for a notification."""
    if kind is NotificationType.BOOKING:
        booking_id = (data or {}).get("booking_id")
        return f"/booking/confirmation/{booking_id}" if booking_id else "/bookings"
    return _STATIC_URLS.get(kind)


async def notify(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    kind: NotificationType,
    title: str,
    message: str,
    data: dict[str, Any] | None = None,
) -> Notification | None:
    """Record a notification without failing the caller.

    The row is written in a separate session on the caller's engine, so a
    database error is rolled back there, logged and reported as ``None``
    while the caller's session and its loaded objects stay untouched.
    """
    notification = Notification(
        user_id=user_id,
        type=kind,
        title=title,
        message=message,
        data={key: str(value) for key, value in (data or {}).items()},
    )
    async with AsyncSession(bind=session.bind, expire_on_commit=False) as own_session:
        own_session.add(notification)
        try:
            await own_session.commit()
        except SQLAlchemyError:
            await own_session.rollback()
            logger.exception(
                "Failed to record %s notification for %s", kind.value, user_id
            )
            return None
    return notification


def build_booking_request_message(*, space_title: str) -> tuple[str, str]:
    return "New Booking Request", f"You have a new booking for {space_title}"


def build_booking_confirmed_message(*, space_title: str) -> tuple[str, str]:
    return "Booking Confirmed", f'Your booking for "{space_title}" has been confirmed'


def build_booking_cancelled_message(*, space_title: str) -> tuple[str, str]:
    return "Booking Cancelled", f'A booking for "{space_title}" has been cancelled'


def build_payment_failed_message(*, space_title: str) -> tuple[str, str]:
    return "Payment Failed", f'Payment for your booking of "{space_title}" did not go through'


async def list_notifications(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    unread_only: bool = False,
) -> Sequence[Notification]:
    stmt = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        stmt = stmt.where(Notification.is_read.is_(False))
    result = await session.execute(stmt.order_by(Notification.created_at.desc()))
    return result.scalars().all()


async def mark_as_read(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    notification_ids: Sequence[uuid.UUID],
) -> int:
    """Mark the user's notifications read; ids of other users are ignored."""
    result = await session.execute(
        update(Notification)
        .where(
            Notification.user_id == user_id,
            Notification.id.in_(list(notification_ids)),
        )
        .values(is_read=True)
    )
    await session.commit()
    return result.rowcount or 0
