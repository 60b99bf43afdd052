"""Renter vehicle endpoints."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from parkshift.api import deps
from parkshift.models.profile import Profile
from parkshift.models.vehicle import Vehicle
from parkshift.schemas.vehicle import VehicleCreate, VehicleRead, VehicleUpdate
from parkshift.services import vehicle_service

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


async def _load_vehicle(
    session: AsyncSession, *, user_id: uuid.UUID, vehicle_id: uuid.UUID
) -> Vehicle:
    try:
        return await vehicle_service.get_user_vehicle(
            session, user_id=user_id, vehicle_id=vehicle_id
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from exc


@router.get("", response_model=list[VehicleRead], summary="List my vehicles")
async def list_vehicles(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> list[VehicleRead]:
    vehicles = await vehicle_service.list_vehicles(session, user_id=current_user.id)
    return [VehicleRead.model_validate(vehicle) for vehicle in vehicles]


@router.post(
    "",
    response_model=VehicleRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add a vehicle",
)
async def add_vehicle(
    payload: VehicleCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> VehicleRead:
    vehicle = await vehicle_service.add_vehicle(
        session, user_id=current_user.id, payload=payload
    )
    return VehicleRead.model_validate(vehicle)


@router.patch("/{vehicle_id}", response_model=VehicleRead, summary="Update a vehicle")
async def update_vehicle(
    vehicle_id: uuid.UUID,
    payload: VehicleUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> VehicleRead:
    vehicle = await _load_vehicle(
        session, user_id=current_user.id, vehicle_id=vehicle_id
    )
    updated = await vehicle_service.update_vehicle(
        session, vehicle=vehicle, payload=payload
    )
    return VehicleRead.model_validate(updated)


@router.post(
    "/{vehicle_id}/primary",
    response_model=VehicleRead,
    summary="Make a vehicle the primary one",
)
async def set_primary_vehicle(
    vehicle_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> VehicleRead:
    vehicle = await _load_vehicle(
        session, user_id=current_user.id, vehicle_id=vehicle_id
    )
    updated = await vehicle_service.set_primary_vehicle(session, vehicle=vehicle)
    return VehicleRead.model_validate(updated)


@router.delete(
    "/{vehicle_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a vehicle",
)
async def delete_vehicle(
    vehicle_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> None:
    vehicle = await _load_vehicle(
        session, user_id=current_user.id, vehicle_id=vehicle_id
    )
    await vehicle_service.delete_vehicle(session, vehicle=vehicle)
    return None
