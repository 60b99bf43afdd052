"""Renter vehicle management."""
from __future__ import annotations

import uuid

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from parkshift.models.vehicle import Vehicle
from parkshift.schemas.vehicle import VehicleCreate, VehicleUpdate


async def list_vehicles(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
) -> list[Vehicle]:
    """Return the user's vehicles, primary first."""
    result = await session.execute(
        select(Vehicle)
        .where(Vehicle.user_id == user_id)
        .order_by(Vehicle.is_primary.desc(), Vehicle.created_at.asc())
    )
    return list(result.scalars().all())


async def get_user_vehicle(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    vehicle_id: uuid.UUID,
) -> Vehicle:
    vehicle = await session.get(Vehicle, vehicle_id)
    if vehicle is None or vehicle.user_id != user_id:
        raise ValueError("Vehicle not found")
    return vehicle


async def _clear_primary(session: AsyncSession, *, user_id: uuid.UUID) -> None:
    await session.execute(
        update(Vehicle).where(Vehicle.user_id == user_id).values(is_primary=False)
    )


async def add_vehicle(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    payload: VehicleCreate,
) -> Vehicle:
    if payload.is_primary:
        await _clear_primary(session, user_id=user_id)
    vehicle = Vehicle(user_id=user_id, **payload.model_dump())
    session.add(vehicle)
    await session.commit()
    await session.refresh(vehicle)
    return vehicle


async def update_vehicle(
    session: AsyncSession,
    *,
    vehicle: Vehicle,
    payload: VehicleUpdate,
) -> Vehicle:
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(vehicle, key, value)
    await session.commit()
    await session.refresh(vehicle)
    return vehicle


async def set_primary_vehicle(
    session: AsyncSession,
    *,
    vehicle: Vehicle,
) -> Vehicle:
    """Make ``vehicle`` the user's only primary vehicle."""
    await _clear_primary(session, user_id=vehicle.user_id)
    vehicle.is_primary = True
    await session.commit()
    await session.refresh(vehicle)
    return vehicle


async def delete_vehicle(session: AsyncSession, *, vehicle: Vehicle) -> None:
    await session.delete(vehicle)
    await session.commit()
