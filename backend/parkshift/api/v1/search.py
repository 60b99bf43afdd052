"""Space search endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from parkshift.api import deps
from parkshift.core.config import get_settings
from parkshift.models.profile import Profile
from parkshift.schemas.search import SearchRequest, SearchResult
from parkshift.schemas.space import SpaceRead
from parkshift.services import search_service

router = APIRouter(tags=["search"])


@router.post(
    "/search",
    response_model=list[SearchResult],
    summary="Find nearby spaces for a window and vehicle",
    dependencies=[deps.DEFAULT_RATE_LIMIT],
)
async def search_spaces(
    payload: SearchRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> list[SearchResult]:
    try:
        matches = await search_service.search_spaces(
            session,
            user_id=current_user.id,
            request=payload,
            default_radius_km=get_settings().search_default_radius_km,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from exc
    return [
        SearchResult(
            **SpaceRead.model_validate(match.space).model_dump(),
            distance_km=match.distance_km,
            average_rating=match.average_rating,
            review_count=match.review_count,
            quoted_total=match.quoted_total,
        )
        for match in matches
    ]
