"""Booking disputes between renters and space owners."""
from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from parkshift.integrations import StripeClient
from parkshift.models.booking import Booking
from parkshift.models.dispute import Dispute, DisputeStatus
from parkshift.models.notification import NotificationType
from parkshift.schemas.dispute import DisputeCreate, DisputeUpdate
from parkshift.services import notification_service
from parkshift.services.booking_calculator import to_minor_units

logger = logging.getLogger(__name__)

AUTO_REFUND_WINDOW = timedelta(hours=48)

_ALLOWED_TRANSITIONS: dict[DisputeStatus, set[DisputeStatus]] = {
    DisputeStatus.OPEN: {
        DisputeStatus.UNDER_REVIEW,
        DisputeStatus.RESOLVED,
        DisputeStatus.CLOSED,
    },
    DisputeStatus.UNDER_REVIEW: {DisputeStatus.RESOLVED, DisputeStatus.CLOSED},
    DisputeStatus.RESOLVED: set(),
    DisputeStatus.CLOSED: set(),
}


async def open_dispute(
    session: AsyncSession,
    *,
    complainant_id: uuid.UUID,
    payload: DisputeCreate,
) -> Dispute:
    """Raise a dispute against the other party of a booking."""
    result = await session.execute(
        select(Booking)
        .where(Booking.id == payload.booking_id)
        .options(selectinload(Booking.space))
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise ValueError("Booking not found")
    owner_id = booking.space.owner_id
    if complainant_id not in (booking.renter_id, owner_id):
        raise PermissionError("Only the parties of a booking can open a dispute")

    existing = await session.execute(
        select(Dispute.id).where(Dispute.booking_id == booking.id)
    )
    if existing.first() is not None:
        raise ValueError("A dispute already exists for this booking")

    dispute = Dispute(
        booking_id=booking.id,
        complainant_id=complainant_id,
        respondent_id=owner_id if complainant_id == booking.renter_id else booking.renter_id,
        reason=payload.reason.value,
        description=payload.description,
        status=DisputeStatus.OPEN,
        auto_refund_at=datetime.now(UTC) + AUTO_REFUND_WINDOW,
    )
    session.add(dispute)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ValueError("A dispute already exists for this booking") from None
    await session.refresh(dispute)
    logger.info("Dispute %s opened on booking %s", dispute.id, booking.id)

    await notification_service.notify(
        session,
        user_id=dispute.respondent_id,
        kind=NotificationType.DISPUTE,
        title="Dispute Opened",
        message=f"A dispute has been opened for booking #{booking.id}",
        data={
            "dispute_id": dispute.id,
            "booking_id": booking.id,
            "reason": dispute.reason,
        },
    )
    return dispute


async def list_disputes(
    session: AsyncSession, *, user_id: uuid.UUID
) -> Sequence[Dispute]:
    result = await session.execute(
        select(Dispute)
        .where(
            or_(Dispute.complainant_id == user_id, Dispute.respondent_id == user_id)
        )
        .order_by(Dispute.created_at.desc())
    )
    return result.scalars().all()


async def get_dispute(
    session: AsyncSession, *, dispute_id: uuid.UUID, user_id: uuid.UUID
) -> Dispute:
    result = await session.execute(
        select(Dispute)
        .where(Dispute.id == dispute_id)
        .options(selectinload(Dispute.booking).selectinload(Booking.space))
    )
    dispute = result.scalar_one_or_none()
    if dispute is None:
        raise ValueError("Dispute not found")
    if user_id not in (dispute.complainant_id, dispute.respondent_id):
        raise PermissionError("Not authorized to view this dispute")
    return dispute


def _validate_transition(current: DisputeStatus, target: DisputeStatus) -> None:
    if target != current and target not in _ALLOWED_TRANSITIONS[current]:
        raise ValueError(
            f"Invalid status transition from {current.value} to {target.value}"
        )


async def update_dispute(
    session: AsyncSession,
    *,
    dispute: Dispute,
    actor_id: uuid.UUID,
    payload: DisputeUpdate,
    stripe: StripeClient | None = None,
) -> Dispute:
    """Move a dispute along and optionally refund part of the booking.

    Refunds are issued by the space owner while resolving the dispute, and
    Stripe errors propagate before anything is saved.
    """
    booking = dispute.booking
    target = payload.status or dispute.status
    _validate_transition(dispute.status, target)

    refund_amount = payload.refund_amount
    if refund_amount is not None:
        if target is not DisputeStatus.RESOLVED:
            raise ValueError("Refunds can only be issued when resolving a dispute")
        if actor_id != booking.space.owner_id:
            raise PermissionError("Only the space owner can issue a refund")
        if not booking.stripe_payment_intent_id:
            raise ValueError("Booking has no payment to refund")
        if refund_amount > booking.total_amount:
            raise ValueError("Refund cannot exceed the booking total")
        if stripe is None:
            raise ValueError("Payments are not configured; cannot refund booking")
        refund = stripe.refund_payment_intent(
            booking.stripe_payment_intent_id,
            amount_minor_units=to_minor_units(refund_amount),
            idempotency_seed=f"dispute-{dispute.id}-refund",
        )
        logger.info(
            "Refund %s of %s issued for dispute %s (%s)",
            refund.get("id"),
            refund_amount,
            dispute.id,
            refund.get("status"),
        )
        dispute.refund_amount = refund_amount

    dispute.status = target
    if payload.resolution is not None:
        dispute.resolution = payload.resolution
    complainant_id = dispute.complainant_id
    await session.commit()
    await session.refresh(dispute)
    logger.info("Dispute %s is %s", dispute.id, dispute.status.value)

    if refund_amount is not None:
        await notification_service.notify(
            session,
            user_id=complainant_id,
            kind=NotificationType.PAYMENT,
            title="Refund Processed",
            message=f"Your refund of €{refund_amount} has been processed",
            data={"dispute_id": dispute.id, "booking_id": dispute.booking_id},
        )
    return dispute
