"""Booking endpoints: quotes, creation, listing and lifecycle changes."""

from __future__ import annotations

import uuid
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from parkshift.api import deps
from parkshift.core.settings import get_payment_settings
from parkshift.integrations import StripeClient, StripeClientError
from parkshift.models.booking import Booking
from parkshift.models.profile import Profile
from parkshift.schemas.booking import (
    BookingCreate,
    BookingQuoteRead,
    BookingQuoteRequest,
    BookingRead,
    BookingStatusUpdate,
)
from parkshift.services import booking_service, vehicle_service

router = APIRouter(prefix="/bookings", tags=["bookings"])


async def _load_booking(
    session: AsyncSession, *, booking_id: uuid.UUID, user_id: uuid.UUID
) -> Booking:
    try:
        return await booking_service.get_booking(
            session, booking_id=booking_id, user_id=user_id
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from exc
    except PermissionError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)
        ) from exc


@router.post("/quote", response_model=BookingQuoteRead, summary="Price a booking window")
async def quote_booking(
    payload: BookingQuoteRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> BookingQuoteRead:
    try:
        vehicle = None
        if payload.vehicle_id is not None:
            vehicle = await vehicle_service.get_user_vehicle(
                session, user_id=current_user.id, vehicle_id=payload.vehicle_id
            )
        space, quote, available = await booking_service.quote_booking(
            session, space_id=payload.space_id, window=payload, vehicle=vehicle
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from exc
    return BookingQuoteRead(
        space_id=space.id,
        is_hourly=payload.is_hourly,
        hours=quote.duration.hours,
        days=quote.duration.days,
        total_amount=quote.total,
        amount_minor_units=quote.total_minor_units,
        currency=get_payment_settings().currency,
        vehicle_compatible=quote.vehicle_compatible,
        available=available,
    )


@router.post(
    "",
    response_model=BookingRead,
    status_code=status.HTTP_201_CREATED,
    summary="Book a parking space",
    dependencies=[deps.BOOKING_RATE_LIMIT],
)
async def create_booking(
    payload: BookingCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> BookingRead:
    try:
        booking = await booking_service.create_booking(
            session,
            renter_id=current_user.id,
            space_id=payload.space_id,
            vehicle_id=payload.vehicle_id,
            window=payload,
            currency=get_payment_settings().currency,
            special_requests=payload.special_requests,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return BookingRead.model_validate(booking)


@router.get("", response_model=list[BookingRead], summary="List my bookings")
async def list_bookings(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
    role: Annotated[Literal["renter", "owner"], Query()] = "renter",
) -> list[BookingRead]:
    bookings = await booking_service.list_bookings(
        session, user_id=current_user.id, role=role
    )
    return [BookingRead.model_validate(booking) for booking in bookings]


@router.get("/{booking_id}", response_model=BookingRead, summary="Get a booking")
async def get_booking(
    booking_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> BookingRead:
    booking = await _load_booking(
        session, booking_id=booking_id, user_id=current_user.id
    )
    return BookingRead.model_validate(booking)


@router.patch(
    "/{booking_id}/status",
    response_model=BookingRead,
    summary="Change a booking's status",
)
async def update_booking_status(
    booking_id: uuid.UUID,
    payload: BookingStatusUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
    stripe_client: Annotated[
        StripeClient | None, Depends(deps.get_optional_stripe_client)
    ],
) -> BookingRead:
    booking = await _load_booking(
        session, booking_id=booking_id, user_id=current_user.id
    )
    try:
        updated = await booking_service.update_status(
            session,
            booking=booking,
            actor_id=current_user.id,
            status=payload.status,
            stripe=stripe_client,
        )
    except PermissionError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    except StripeClientError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    return BookingRead.model_validate(updated)


@router.delete(
    "/{booking_id}",
    response_model=BookingRead,
    summary="Cancel a booking, refunding it when paid",
)
async def cancel_booking(
    booking_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
    stripe_client: Annotated[
        StripeClient | None, Depends(deps.get_optional_stripe_client)
    ],
) -> BookingRead:
    booking = await _load_booking(
        session, booking_id=booking_id, user_id=current_user.id
    )
    try:
        cancelled = await booking_service.cancel_booking(
            session, booking=booking, actor_id=current_user.id, stripe=stripe_client
        )
    except PermissionError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    except StripeClientError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    return BookingRead.model_validate(cancelled)
