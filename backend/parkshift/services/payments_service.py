"""Service layer for booking payments through Stripe."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from parkshift.core.settings import PaymentSettings
from parkshift.integrations import PaymentIntent, StripeClient
from parkshift.models.booking import Booking, BookingStatus
from parkshift.models.notification import NotificationType
from parkshift.models.parking_space import ParkingSpace
from parkshift.services import booking_service, notification_service
from parkshift.services.booking_calculator import to_minor_units

logger = logging.getLogger(__name__)

PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"


def platform_fee_minor_units(amount_minor_units: int, percent: Decimal) -> int:
    """Platform share of a charge, rounded half-up to a whole cent."""
    return to_minor_units(Decimal(amount_minor_units) * percent / Decimal(100) / 100)


async def _get_booking(session: AsyncSession, *, booking_id: UUID) -> Booking:
    stmt = (
        select(Booking)
        .where(Booking.id == booking_id)
        .options(
            selectinload(Booking.space).selectinload(ParkingSpace.owner),
            selectinload(Booking.renter),
        )
    )
    booking = (await session.execute(stmt)).scalars().unique().one_or_none()
    if booking is None:
        raise ValueError("Booking not found")
    return booking


async def create_payment_intent_for_booking(
    session: AsyncSession,
    *,
    booking_id: UUID,
    renter_id: UUID,
    stripe: StripeClient,
    settings: PaymentSettings,
) -> tuple[Booking, PaymentIntent]:
    """Create a PaymentIntent for a pending booking and remember its id."""

    booking = await _get_booking(session, booking_id=booking_id)
    if booking.renter_id != renter_id:
        raise PermissionError("Only the renter can pay for this booking")
    if booking.status is not BookingStatus.PENDING:
        raise ValueError("Only pending bookings can be paid")
    amount = to_minor_units(booking.total_amount)
    if amount <= 0:
        raise ValueError("Booking total is zero; no payment required")

    space = booking.space
    owner = space.owner
    intent = stripe.create_payment_intent(
        amount_minor_units=amount,
        currency=settings.currency,
        metadata={
            "booking_id": str(booking.id),
            "space_id": str(space.id),
            "renter_id": str(renter_id),
            "owner_id": str(space.owner_id),
        },
        description=f"Parking space booking - {space.title}",
        application_fee_minor_units=platform_fee_minor_units(
            amount, settings.platform_fee_percent
        ),
        destination_account=owner.stripe_account_id if owner else None,
        idempotency_seed=f"booking-{booking.id}-intent",
    )
    if intent.client_secret is None:
        raise ValueError("Stripe did not return a client secret")

    booking.stripe_payment_intent_id = intent.id
    await session.commit()
    logger.info("Payment intent %s created for booking %s", intent.id, booking.id)
    return booking, intent


async def _booking_from_intent(
    session: AsyncSession, intent: Mapping[str, Any]
) -> Booking | None:
    raw_id = (intent.get("metadata") or {}).get("booking_id")
    if not raw_id:
        return None
    try:
        return await _get_booking(session, booking_id=UUID(str(raw_id)))
    except ValueError:
        logger.warning("Webhook references unknown booking %s", raw_id)
        return None


def _refund_cancelled_booking(
    booking: Booking, *, intent_id: str, stripe: StripeClient | None
) -> None:
    logger.warning(
        "Payment %s succeeded for cancelled booking %s; refunding", intent_id, booking.id
    )
    if stripe is None:
        raise ValueError("Payments are not configured; cannot refund booking")
    refund = stripe.refund_payment_intent(
        intent_id, idempotency_seed=f"booking-{booking.id}-late-refund"
    )
    logger.info(
        "Refund %s issued for cancelled booking %s (%s)",
        refund.get("id"),
        booking.id,
        refund.get("status"),
    )


async def handle_payment_succeeded(
    session: AsyncSession,
    intent: Mapping[str, Any],
    *,
    stripe: StripeClient | None = None,
) -> Booking | None:
    """Confirm the booking behind a paid intent, once.

    Stripe delivers events at least once: a booking that is no longer
    pending is left alone, and a cancelled one has the payment refunded.
    """
    booking = await _booking_from_intent(session, intent)
    if booking is None:
        return None
    intent_id = str(intent["id"])
    if booking.status is BookingStatus.CANCELLED:
        _refund_cancelled_booking(booking, intent_id=intent_id, stripe=stripe)
        return booking
    if booking.status is not BookingStatus.PENDING:
        logger.info(
            "Ignoring repeated payment %s for %s booking %s",
            intent_id,
            booking.status.value,
            booking.id,
        )
        return booking

    space = booking.space
    renter_name = booking.renter.first_name if booking.renter else None
    booking = await booking_service.confirm_paid_booking(
        session, booking=booking, payment_intent_id=intent_id
    )
    await notification_service.notify(
        session,
        user_id=space.owner_id,
        kind=NotificationType.BOOKING,
        title="Booking Confirmed",
        message=(
            f'Your space "{space.title}" has been booked'
            + (f" by {renter_name}" if renter_name else "")
        ),
        data={"booking_id": booking.id},
    )
    return booking


async def handle_payment_failed(
    session: AsyncSession, intent: Mapping[str, Any]
) -> Booking | None:
    """Leave the booking pending so the renter can retry, and tell them."""
    booking = await _booking_from_intent(session, intent)
    if booking is None:
        return None
    logger.warning("Payment %s failed for booking %s", intent.get("id"), booking.id)
    title, message = notification_service.build_payment_failed_message(
        space_title=booking.space.title
    )
    await notification_service.notify(
        session,
        user_id=booking.renter_id,
        kind=NotificationType.PAYMENT,
        title=title,
        message=message,
        data={"booking_id": booking.id},
    )
    return booking


async def handle_event(
    session: AsyncSession,
    event: Mapping[str, Any],
    *,
    stripe: StripeClient | None = None,
) -> bool:
    """Dispatch a verified Stripe event; returns whether it was handled."""
    event_type = event.get("type")
    intent = (event.get("data") or {}).get("object") or {}
    if event_type == PAYMENT_SUCCEEDED:
        await handle_payment_succeeded(session, intent, stripe=stripe)
        return True
    if event_type == PAYMENT_FAILED:
        await handle_payment_failed(session, intent)
        return True
    logger.info("Unhandled Stripe event type %s", event_type)
    return False
