"""Booking dispute endpoints."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from parkshift.api import deps
from parkshift.integrations import StripeClient, StripeClientError
from parkshift.models.profile import Profile
from parkshift.schemas.dispute import DisputeCreate, DisputeRead, DisputeUpdate
from parkshift.services import dispute_service

router = APIRouter(prefix="/disputes", tags=["disputes"])


@router.post(
    "",
    response_model=DisputeRead,
    status_code=status.HTTP_201_CREATED,
    summary="Open a dispute on a booking",
)
async def open_dispute(
    payload: DisputeCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> DisputeRead:
    try:
        dispute = await dispute_service.open_dispute(
            session, complainant_id=current_user.id, payload=payload
        )
    except PermissionError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return DisputeRead.model_validate(dispute)


@router.get("", response_model=list[DisputeRead], summary="List my disputes")
async def list_disputes(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> list[DisputeRead]:
    disputes = await dispute_service.list_disputes(session, user_id=current_user.id)
    return [DisputeRead.model_validate(dispute) for dispute in disputes]


@router.patch(
    "/{dispute_id}",
    response_model=DisputeRead,
    summary="Update or resolve a dispute",
)
async def update_dispute(
    dispute_id: uuid.UUID,
    payload: DisputeUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
    stripe_client: Annotated[
        StripeClient | None, Depends(deps.get_optional_stripe_client)
    ],
) -> DisputeRead:
    try:
        dispute = await dispute_service.get_dispute(
            session, dispute_id=dispute_id, user_id=current_user.id
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from exc
    except PermissionError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)
        ) from exc

    try:
        updated = await dispute_service.update_dispute(
            session,
            dispute=dispute,
            actor_id=current_user.id,
            payload=payload,
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
    return DisputeRead.model_validate(updated)
