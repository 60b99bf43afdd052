"""Renter reviews of parking spaces."""
from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from parkshift.models.booking import Booking, BookingStatus
from parkshift.models.review import Review
from parkshift.schemas.review import ReviewCreate

logger = logging.getLogger(__name__)

_REVIEWABLE_STATUSES = {BookingStatus.CONFIRMED, BookingStatus.COMPLETED}


async def create_review(
    session: AsyncSession,
    *,
    reviewer_id: uuid.UUID,
    payload: ReviewCreate,
) -> Review:
    """Record the renter's rating for the space of one of their bookings."""
    booking = await session.get(Booking, payload.booking_id)
    if booking is None:
        raise ValueError("Booking not found")
    if booking.renter_id != reviewer_id:
        raise PermissionError("Only the renter can review this booking")
    if booking.status not in _REVIEWABLE_STATUSES:
        raise ValueError("Only confirmed or completed bookings can be reviewed")

    existing = await session.execute(
        select(Review.id).where(
            Review.booking_id == booking.id, Review.reviewer_id == reviewer_id
        )
    )
    if existing.first() is not None:
        raise ValueError("Review already exists for this booking")

    review = Review(
        booking_id=booking.id,
        space_id=booking.space_id,
        reviewer_id=reviewer_id,
        rating=payload.rating,
        comment=payload.comment,
    )
    session.add(review)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ValueError("Review already exists for this booking") from None
    await session.refresh(review)
    logger.info("Review %s left for space %s", review.id, review.space_id)
    return review


async def list_space_reviews(
    session: AsyncSession,
    *,
    space_id: uuid.UUID,
) -> Sequence[Review]:
    result = await session.execute(
        select(Review)
        .where(Review.space_id == space_id)
        .order_by(Review.created_at.desc())
    )
    return result.scalars().all()
