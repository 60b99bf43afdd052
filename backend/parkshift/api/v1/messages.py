"""Direct messaging endpoints."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from parkshift.api import deps
from parkshift.models.profile import Profile
from parkshift.schemas.message import (
    ConversationRead,
    MessageCreate,
    MessageMarkRead,
    MessageRead,
)
from parkshift.services import message_service

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("", response_model=list[MessageRead], summary="List messages")
async def list_messages(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
    booking_id: Annotated[uuid.UUID | None, Query()] = None,
    other_user_id: Annotated[uuid.UUID | None, Query()] = None,
) -> list[MessageRead]:
    messages = await message_service.list_messages(
        session,
        user_id=current_user.id,
        booking_id=booking_id,
        other_user_id=other_user_id,
    )
    return [MessageRead.model_validate(message) for message in messages]


@router.post(
    "",
    response_model=MessageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Send a message",
    dependencies=[deps.DEFAULT_RATE_LIMIT],
)
async def send_message(
    payload: MessageCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> MessageRead:
    try:
        message = await message_service.send_message(
            session, sender=current_user, payload=payload
        )
    except PermissionError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return MessageRead.model_validate(message)


@router.get(
    "/conversations",
    response_model=list[ConversationRead],
    summary="List my conversations, latest first",
)
async def list_conversations(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> list[ConversationRead]:
    conversations = await message_service.list_conversations(
        session, user_id=current_user.id
    )
    return [
        ConversationRead(
            booking_id=item.booking_id,
            other_user_id=item.other_user_id,
            last_message=MessageRead.model_validate(item.last_message),
            unread_count=item.unread_count,
        )
        for item in conversations
    ]


@router.post("/read", summary="Mark received messages as read")
async def mark_messages_read(
    payload: MessageMarkRead,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> dict[str, int]:
    updated = await message_service.mark_as_read(
        session, user_id=current_user.id, message_ids=payload.message_ids
    )
    return {"updated": updated}
