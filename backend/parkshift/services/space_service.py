"""Parking space listing services."""
from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from parkshift.models.parking_space import ParkingSpace
from parkshift.schemas.space import SpaceCreate, SpaceUpdate

logger = logging.getLogger(__name__)

_NULLABLE_FIELDS = frozenset({"description", "address", "height_cm", "max_weight_kg"})


async def get_space(
    session: AsyncSession,
    *,
    space_id: uuid.UUID,
) -> ParkingSpace:
    space = await session.get(ParkingSpace, space_id)
    if space is None:
        raise ValueError("Parking space not found")
    return space


async def get_owned_space(
    session: AsyncSession,
    *,
    space_id: uuid.UUID,
    owner_id: uuid.UUID,
) -> ParkingSpace:
    """Fetch a space, ensuring ``owner_id`` owns it."""
    space = await get_space(session, space_id=space_id)
    if space.owner_id != owner_id:
        raise PermissionError("Only the listing owner can modify this space")
    return space


async def list_owner_spaces(
    session: AsyncSession,
    *,
    owner_id: uuid.UUID,
) -> list[ParkingSpace]:
    result = await session.execute(
        select(ParkingSpace)
        .where(ParkingSpace.owner_id == owner_id)
        .order_by(ParkingSpace.created_at.desc())
    )
    return list(result.scalars().all())


async def create_space(
    session: AsyncSession,
    *,
    owner_id: uuid.UUID,
    payload: SpaceCreate,
) -> ParkingSpace:
    space = ParkingSpace(owner_id=owner_id, is_active=True, **payload.model_dump())
    session.add(space)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    await session.refresh(space)
    logger.info("Space %s listed by %s", space.id, owner_id)
    return space


async def update_space(
    session: AsyncSession,
    *,
    space: ParkingSpace,
    payload: SpaceUpdate,
) -> ParkingSpace:
    """Apply a partial update, keeping the duration bounds ordered."""
    changes = payload.model_dump(exclude_unset=True)
    minimum = changes.get("minimum_duration_hours", space.minimum_duration_hours)
    maximum = changes.get("maximum_duration_hours", space.maximum_duration_hours)
    if minimum is not None and maximum is not None and minimum > maximum:
        raise ValueError(
            "minimum_duration_hours must not exceed maximum_duration_hours"
        )
    for key, value in changes.items():
        if value is None and key not in _NULLABLE_FIELDS:
            continue
        setattr(space, key, value)
    await session.commit()
    await session.refresh(space)
    return space


async def delete_space(session: AsyncSession, *, space: ParkingSpace) -> None:
    """Delete a listing; its availability slots go with it."""
    await session.delete(space)
    await session.commit()
    logger.info("Space %s deleted", space.id)
