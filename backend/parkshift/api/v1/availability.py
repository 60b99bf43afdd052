"""Space availability endpoints."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parkshift.api import deps
from parkshift.models.profile import Profile
from parkshift.schemas.availability import (
    AvailabilityCalendar,
    AvailabilityCheckRead,
    AvailabilityCopyRequest,
    AvailabilityReplace,
    AvailabilitySlotRead,
)
from parkshift.services import availability_service, space_service

router = APIRouter(prefix="/spaces/{space_id}/availability", tags=["availability"])

_MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


async def _ensure_space(session: AsyncSession, space_id: uuid.UUID) -> None:
    try:
        await space_service.get_space(session, space_id=space_id)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from exc


def _store_unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Availability could not be saved; previous settings kept",
    )


@router.get(
    "", response_model=list[AvailabilitySlotRead], summary="List availability slots"
)
async def list_availability(
    space_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _: Annotated[Profile, Depends(deps.get_current_user)],
) -> list[AvailabilitySlotRead]:
    await _ensure_space(session, space_id)
    slots = await availability_service.get_availability(session, space_id=space_id)
    return [AvailabilitySlotRead.model_validate(slot) for slot in slots]


@router.put(
    "",
    response_model=list[AvailabilitySlotRead],
    summary="Replace the availability of a space",
)
async def replace_availability(
    space_id: uuid.UUID,
    payload: AvailabilityReplace,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> list[AvailabilitySlotRead]:
    await deps.load_owned_space(session, space_id=space_id, owner_id=current_user.id)
    try:
        slots = await availability_service.replace_availability(
            session, space_id=space_id, availability=payload.availability
        )
    except SQLAlchemyError as exc:
        raise _store_unavailable() from exc
    return [AvailabilitySlotRead.model_validate(slot) for slot in slots]


@router.get(
    "/calendar",
    response_model=AvailabilityCalendar,
    summary="Calendar editor settings for one month",
)
async def get_calendar(
    space_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
    month: Annotated[str, Query(pattern=_MONTH_PATTERN)],
) -> AvailabilityCalendar:
    await deps.load_owned_space(session, space_id=space_id, owner_id=current_user.id)
    days = await availability_service.get_month_calendar(
        session, space_id=space_id, month=month
    )
    return AvailabilityCalendar(space_id=space_id, month=month, days=days)


@router.post(
    "/copy",
    response_model=list[AvailabilitySlotRead],
    summary="Copy one date's availability onto other dates",
)
async def copy_availability(
    space_id: uuid.UUID,
    payload: AvailabilityCopyRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> list[AvailabilitySlotRead]:
    await deps.load_owned_space(session, space_id=space_id, owner_id=current_user.id)
    try:
        slots = await availability_service.copy_availability(
            session,
            space_id=space_id,
            source_date=payload.source_date,
            target_dates=payload.target_dates,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    except SQLAlchemyError as exc:
        raise _store_unavailable() from exc
    return [AvailabilitySlotRead.model_validate(slot) for slot in slots]


@router.get(
    "/check",
    response_model=AvailabilityCheckRead,
    summary="Open slots within a date range",
)
async def check_availability(
    space_id: uuid.UUID,
    start_date: date,
    end_date: date,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _: Annotated[Profile, Depends(deps.get_current_user)],
) -> AvailabilityCheckRead:
    if end_date < start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_date must not be before start_date",
        )
    await _ensure_space(session, space_id)
    slots = await availability_service.is_date_range_available(
        session, space_id=space_id, start_date=start_date, end_date=end_date
    )
    expected_days = (end_date - start_date).days + 1
    return AvailabilityCheckRead(
        start_date=start_date,
        end_date=end_date,
        available=len(slots) == expected_days,
        slots=[AvailabilitySlotRead.model_validate(slot) for slot in slots],
    )


@router.get(
    "/{on_date}",
    response_model=AvailabilitySlotRead,
    summary="Availability slot for a single date",
)
async def get_availability_for_date(
    space_id: uuid.UUID,
    on_date: date,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _: Annotated[Profile, Depends(deps.get_current_user)],
) -> AvailabilitySlotRead:
    await _ensure_space(session, space_id)
    slot = await availability_service.get_availability_for_date(
        session, space_id=space_id, on_date=on_date
    )
    if slot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No availability for {on_date.isoformat()}",
        )
    return AvailabilitySlotRead.model_validate(slot)
