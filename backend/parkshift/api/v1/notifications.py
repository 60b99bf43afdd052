"""In-app notification endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from parkshift.api import deps
from parkshift.models.profile import Profile
from parkshift.schemas.notification import NotificationMarkRead, NotificationRead
from parkshift.services import notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationRead], summary="List my notifications")
async def list_notifications(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
    unread_only: Annotated[bool, Query()] = False,
) -> list[NotificationRead]:
    notifications = await notification_service.list_notifications(
        session, user_id=current_user.id, unread_only=unread_only
    )
    return [
        NotificationRead.model_validate(item).model_copy(
            update={"url": notification_service.notification_url(item.type, item.data)}
        )
        for item in notifications
    ]


@router.post("/read", summary="Mark notifications as read")
async def mark_notifications_read(
    payload: NotificationMarkRead,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> dict[str, int]:
    updated = await notification_service.mark_as_read(
        session,
        user_id=current_user.id,
        notification_ids=payload.notification_ids,
    )
    return {"updated": updated}
