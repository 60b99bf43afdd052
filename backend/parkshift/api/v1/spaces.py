"""Parking space listing endpoints."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from parkshift.api import deps
from parkshift.models.profile import Profile
from parkshift.schemas.space import SpaceCreate, SpaceRead, SpaceUpdate
from parkshift.services import space_service

router = APIRouter(prefix="/spaces", tags=["spaces"])


@router.post(
    "",
    response_model=SpaceRead,
    status_code=status.HTTP_201_CREATED,
    summary="List a new parking space",
)
async def create_space(
    payload: SpaceCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> SpaceRead:
    space = await space_service.create_space(
        session, owner_id=current_user.id, payload=payload
    )
    return SpaceRead.model_validate(space)


@router.get("", response_model=list[SpaceRead], summary="List my parking spaces")
async def list_my_spaces(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> list[SpaceRead]:
    spaces = await space_service.list_owner_spaces(session, owner_id=current_user.id)
    return [SpaceRead.model_validate(space) for space in spaces]


@router.get("/{space_id}", response_model=SpaceRead, summary="Get a parking space")
async def get_space(
    space_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _: Annotated[Profile, Depends(deps.get_current_user)],
) -> SpaceRead:
    try:
        space = await space_service.get_space(session, space_id=space_id)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from exc
    return SpaceRead.model_validate(space)


@router.patch("/{space_id}", response_model=SpaceRead, summary="Update a parking space")
async def update_space(
    space_id: uuid.UUID,
    payload: SpaceUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> SpaceRead:
    space = await deps.load_owned_space(
        session, space_id=space_id, owner_id=current_user.id
    )
    try:
        updated = await space_service.update_space(
            session, space=space, payload=payload
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return SpaceRead.model_validate(updated)


@router.delete(
    "/{space_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a parking space",
)
async def delete_space(
    space_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> None:
    space = await deps.load_owned_space(
        session, space_id=space_id, owner_id=current_user.id
    )
    await space_service.delete_space(session, space=space)
    return None
