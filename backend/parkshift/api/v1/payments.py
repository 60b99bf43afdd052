"""Booking payments through Stripe PaymentIntents, plus the Stripe webhook."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from parkshift.api import deps
from parkshift.core.settings import get_payment_settings
from parkshift.integrations import StripeClient, StripeClientError
from parkshift.models.profile import Profile
from parkshift.schemas.payment import PaymentIntentCreate, PaymentIntentRead
from parkshift.services import payments_service

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post(
    "/intents",
    response_model=PaymentIntentRead,
    summary="Create a payment intent for a pending booking",
)
async def create_payment_intent(
    payload: PaymentIntentCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    stripe_client: Annotated[StripeClient, Depends(deps.get_stripe_client)],
    current_user: Annotated[Profile, Depends(deps.get_current_user)],
) -> PaymentIntentRead:
    try:
        booking, intent = await payments_service.create_payment_intent_for_booking(
            session,
            booking_id=payload.booking_id,
            renter_id=current_user.id,
            stripe=stripe_client,
            settings=get_payment_settings(),
        )
    except StripeClientError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    except PermissionError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc

    return PaymentIntentRead(
        booking_id=booking.id,
        payment_intent_id=intent.id,
        client_secret=intent.client_secret or "",
        amount=booking.total_amount,
        amount_minor_units=intent.amount,
        currency=booking.currency,
    )


@router.post("/webhook", status_code=status.HTTP_200_OK)
async def handle_webhook(
    request: Request,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> dict[str, Any]:
    settings = get_payment_settings()
    payload_bytes = await request.body()
    event: Mapping[str, Any]

    if settings.payments_webhook_verify:
        signature = request.headers.get("Stripe-Signature")
        if not signature:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Missing signature header",
            )
        stripe_client = deps.get_stripe_client()
        try:
            event = stripe_client.construct_event(payload_bytes, signature)
        except StripeClientError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
    else:
        try:
            event = json.loads(payload_bytes)
        except json.JSONDecodeError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payload"
            ) from exc

    try:
        handled = await payments_service.handle_event(
            session, event, stripe=deps.get_optional_stripe_client()
        )
    except StripeClientError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    return {"received": True, "status": "processed" if handled else "ignored"}
