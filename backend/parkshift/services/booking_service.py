"""Booking lifecycle: quote, create, list, status changes and cancellation."""
from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Literal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from parkshift.integrations import StripeClient
from parkshift.models.availability import AvailabilitySlot
from parkshift.models.booking import Booking, BookingStatus
from parkshift.models.notification import NotificationType
from parkshift.models.parking_space import ParkingSpace
from parkshift.models.vehicle import Vehicle
from parkshift.services import (
    availability_service,
    booking_calculator,
    notification_service,
    vehicle_service,
)
from parkshift.services.booking_calculator import BookingQuote, BookingWindow
from parkshift.services.space_service import get_space

logger = logging.getLogger(__name__)

_HOURS_PER_DAY = Decimal(24)

_ALLOWED_STATUS_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
}

# Transitions only the listing owner may make; either party may cancel.
_OWNER_ONLY_TARGETS = {BookingStatus.CONFIRMED, BookingStatus.COMPLETED}

UNAVAILABLE_MESSAGE = "Space is not available for selected window"

BookingRole = Literal["renter", "owner"]


def required_dates(window: BookingWindow) -> list[date]:
    """Dates whose availability slots a window occupies.

    A daily window ends at midnight of ``end_date``, so that date is not
    needed.
    """
    if window.is_hourly:
        return [window.start_date]
    return [
        window.start_date + timedelta(days=offset)
        for offset in range((window.end_date - window.start_date).days)
    ]


def _slot_covers(slot: AvailabilitySlot, window: BookingWindow) -> bool:
    if not window.is_hourly:
        return True
    assert window.start_time is not None and window.end_time is not None
    start = booking_calculator.parse_clock(window.start_time)
    end = booking_calculator.parse_clock(window.end_time)
    return slot.start_hour <= start and end <= slot.end_hour


async def is_window_available(
    session: AsyncSession,
    *,
    space_id: uuid.UUID,
    window: BookingWindow,
) -> bool:
    """Every required date has a covering slot and no live booking overlaps."""
    needed = required_dates(window)
    if not needed:
        return False
    slots = await availability_service.is_date_range_available(
        session, space_id=space_id, start_date=needed[0], end_date=needed[-1]
    )
    by_date = {slot.date: slot for slot in slots}
    for day in needed:
        slot = by_date.get(day)
        if slot is None or not _slot_covers(slot, window):
            return False
    start_at, end_at = booking_calculator.window_bounds(window)
    return not await has_overlapping_booking(
        session, space_id=space_id, start_at=start_at, end_at=end_at
    )


async def has_overlapping_booking(
    session: AsyncSession,
    *,
    space_id: uuid.UUID,
    start_at: datetime,
    end_at: datetime,
    exclude_booking_id: uuid.UUID | None = None,
) -> bool:
    stmt = select(Booking.id).where(
        Booking.space_id == space_id,
        Booking.status != BookingStatus.CANCELLED,
        Booking.start_at < end_at,
        Booking.end_at > start_at,
    )
    if exclude_booking_id is not None:
        stmt = stmt.where(Booking.id != exclude_booking_id)
    result = await session.execute(stmt.limit(1))
    return result.first() is not None


def _billable_hours(quote: BookingQuote, window: BookingWindow) -> Decimal:
    if window.is_hourly:
        return quote.duration.hours
    return quote.duration.days * _HOURS_PER_DAY


def _validate_duration(
    space: ParkingSpace, quote: BookingQuote, window: BookingWindow
) -> None:
    hours = _billable_hours(quote, window)
    if hours <= 0:
        raise ValueError("Booking must last longer than zero")
    if hours < space.minimum_duration_hours:
        raise ValueError(
            f"Booking must be at least {space.minimum_duration_hours} hour(s)"
        )
    if hours > space.maximum_duration_hours:
        raise ValueError(
            f"Booking must not exceed {space.maximum_duration_hours} hour(s)"
        )


async def quote_booking(
    session: AsyncSession,
    *,
    space_id: uuid.UUID,
    window: BookingWindow,
    vehicle: Vehicle | None = None,
) -> tuple[ParkingSpace, BookingQuote, bool]:
    """Price a window for a space and report whether it can be booked."""
    space = await get_space(session, space_id=space_id)
    quote = booking_calculator.quote(space, window, vehicle)
    available = space.is_active and await is_window_available(
        session, space_id=space_id, window=window
    )
    return space, quote, available


async def create_booking(
    session: AsyncSession,
    *,
    renter_id: uuid.UUID,
    space_id: uuid.UUID,
    vehicle_id: uuid.UUID,
    window: BookingWindow,
    currency: str = "eur",
    special_requests: str | None = None,
) -> Booking:
    """Validate and persist a pending booking, then notify the owner."""
    vehicle = await vehicle_service.get_user_vehicle(
        session, user_id=renter_id, vehicle_id=vehicle_id
    )
    space = await get_space(session, space_id=space_id)
    if not space.is_active:
        raise ValueError("Parking space is not accepting bookings")
    if space.owner_id == renter_id:
        raise ValueError("Owners cannot book their own space")

    quote = booking_calculator.quote(space, window, vehicle)
    _validate_duration(space, quote, window)
    if not quote.vehicle_compatible:
        raise ValueError("Vehicle does not fit this parking space")
    if not await is_window_available(session, space_id=space_id, window=window):
        raise ValueError(UNAVAILABLE_MESSAGE)

    start_at, end_at = booking_calculator.window_bounds(window)
    booking = Booking(
        space_id=space_id,
        renter_id=renter_id,
        vehicle_id=vehicle.id,
        start_at=start_at,
        end_at=end_at,
        is_hourly=window.is_hourly,
        duration_hours=quote.duration.hours,
        duration_days=quote.duration.days,
        total_amount=quote.total,
        currency=currency,
        status=BookingStatus.PENDING,
        special_requests=special_requests,
    )
    session.add(booking)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    await session.refresh(booking)
    logger.info(
        "Booking %s created for space %s (%s %s)",
        booking.id,
        space_id,
        booking.total_amount,
        currency,
    )

    title, message = notification_service.build_booking_request_message(
        space_title=space.title
    )
    await notification_service.notify(
        session,
        user_id=space.owner_id,
        kind=NotificationType.BOOKING,
        title=title,
        message=message,
        data={"booking_id": booking.id},
    )
    return booking


def _booking_query():
    return select(Booking).options(selectinload(Booking.space))


async def list_bookings(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    role: BookingRole = "renter",
) -> Sequence[Booking]:
    """Bookings made by the user, or made on the user's spaces."""
    stmt = _booking_query().order_by(Booking.created_at.desc())
    if role == "owner":
        stmt = stmt.join(ParkingSpace, Booking.space_id == ParkingSpace.id).where(
            ParkingSpace.owner_id == user_id
        )
    else:
        stmt = stmt.where(Booking.renter_id == user_id)
    result = await session.execute(stmt)
    return result.scalars().unique().all()


async def get_booking(
    session: AsyncSession,
    *,
    booking_id: uuid.UUID,
    user_id: uuid.UUID,
) -> Booking:
    """Fetch a booking visible to ``user_id`` as renter or space owner."""
    result = await session.execute(
        _booking_query().where(Booking.id == booking_id)
    )
    booking = result.scalars().unique().one_or_none()
    if booking is None:
        raise ValueError("Booking not found")
    if user_id not in (booking.renter_id, booking.space.owner_id):
        raise PermissionError("Not authorized to view this booking")
    return booking


def _validate_status_transition(current: BookingStatus, target: BookingStatus) -> None:
    if target == current:
        return
    allowed = _ALLOWED_STATUS_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise ValueError(
            f"Invalid status transition from {current.value} to {target.value}"
        )


async def update_status(
    session: AsyncSession,
    *,
    booking: Booking,
    actor_id: uuid.UUID,
    status: BookingStatus,
    stripe: StripeClient | None = None,
) -> Booking:
    """Move a booking along its lifecycle and notify the other party."""
    if status is BookingStatus.CANCELLED:
        return await cancel_booking(
            session, booking=booking, actor_id=actor_id, stripe=stripe
        )
    if status in _OWNER_ONLY_TARGETS and actor_id != booking.space.owner_id:
        raise PermissionError("Only the space owner can change this booking")
    _validate_status_transition(booking.status, status)
    if status == booking.status:
        return booking

    space = booking.space
    booking.status = status
    await session.commit()
    await session.refresh(booking)
    logger.info("Booking %s moved to %s", booking.id, status.value)

    if status is BookingStatus.CONFIRMED:
        await _notify_confirmed(session, booking=booking, space=space)
    return booking


async def _notify_confirmed(
    session: AsyncSession, *, booking: Booking, space: ParkingSpace
) -> None:
    title, message = notification_service.build_booking_confirmed_message(
        space_title=space.title
    )
    await notification_service.notify(
        session,
        user_id=booking.renter_id,
        kind=NotificationType.BOOKING,
        title=title,
        message=message,
        data={"booking_id": booking.id},
    )


async def confirm_paid_booking(
    session: AsyncSession,
    *,
    booking: Booking,
    payment_intent_id: str,
) -> Booking:
    """Confirm a pending booking once its payment succeeded.

    The renter is notified only when this call moves the booking out of
    ``PENDING``; bookings in any other state keep their status.
    """
    space = booking.space
    confirming = booking.status is BookingStatus.PENDING
    booking.stripe_payment_intent_id = payment_intent_id
    if confirming:
        booking.status = BookingStatus.CONFIRMED
    await session.commit()
    await session.refresh(booking)
    logger.info("Booking %s paid with %s", booking.id, payment_intent_id)
    if confirming:
        await _notify_confirmed(session, booking=booking, space=space)
    return booking


async def cancel_booking(
    session: AsyncSession,
    *,
    booking: Booking,
    actor_id: uuid.UUID,
    stripe: StripeClient | None = None,
) -> Booking:
    """Cancel a booking, refunding it when it was paid.

    Refund errors propagate before any local change is made.
    """
    space = booking.space
    owner_id = space.owner_id
    if actor_id not in (booking.renter_id, owner_id):
        raise PermissionError("Not authorized to cancel this booking")
    _validate_status_transition(booking.status, BookingStatus.CANCELLED)
    if booking.status is BookingStatus.CANCELLED:
        return booking

    if (
        booking.status is BookingStatus.CONFIRMED
        and booking.stripe_payment_intent_id
    ):
        if stripe is None:
            raise ValueError("Payments are not configured; cannot refund booking")
        refund = stripe.refund_payment_intent(booking.stripe_payment_intent_id)
        logger.info(
            "Refund %s issued for booking %s (%s)",
            refund.get("id"),
            booking.id,
            refund.get("status"),
        )

    booking.status = BookingStatus.CANCELLED
    await session.commit()
    await session.refresh(booking)
    logger.info("Booking %s cancelled by %s", booking.id, actor_id)

    other_party = owner_id if actor_id == booking.renter_id else booking.renter_id
    title, message = notification_service.build_booking_cancelled_message(
        space_title=space.title
    )
    await notification_service.notify(
        session,
        user_id=other_party,
        kind=NotificationType.BOOKING,
        title=title,
        message=message,
        data={"booking_id": booking.id},
    )
    return booking
