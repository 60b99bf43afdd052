"""Space review endpoints."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from parkshift.api import deps
from parkshift.models.profile import Profile
from parkshift.schemas.review import ReviewCreate, ReviewRead
from parkshift.services import review_service

router = APIRouter(tags=["reviews"])


@router.post(
    "/reviews",
    response_model=ReviewRead,
    status_code=status.HTTP_201_CREATED,
    summary="Review the space of a booking",
)
async def create_review(
    payload: ReviewCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> ReviewRead:
    try:
        review = await review_service.create_review(
            session, reviewer_id=current_user.id, payload=payload
        )
    except PermissionError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return ReviewRead.model_validate(review)


@router.get(
    "/spaces/{space_id}/reviews",
    response_model=list[ReviewRead],
    summary="List reviews of a space",
)
async def list_space_reviews(
    space_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _: Annotated[Profile, Depends(deps.get_current_user)],
) -> list[ReviewRead]:
    reviews = await review_service.list_space_reviews(session, space_id=space_id)
    return [ReviewRead.model_validate(review) for review in reviews]
