"""Thin wrapper around the Stripe SDK."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any

import stripe


@dataclass(slots=True)
class PaymentIntent:
    """The parts of a Stripe payment intent the API hands back to clients."""

    id: str
    client_secret: str | None
    status: str
    amount: int
    metadata: dict[str, Any]


class StripeClientError(RuntimeError):
    """Raised when Stripe interaction fails."""


def _to_intent(intent: Any) -> PaymentIntent:
    return PaymentIntent(
        id=str(intent["id"]),
        client_secret=intent.get("client_secret"),
        status=str(intent.get("status", "unknown")),
        amount=int(intent.get("amount") or 0),
        metadata=dict(intent.get("metadata") or {}),
    )


class StripeClient:
    """Payment intents, refunds and webhook verification for bookings."""

    def __init__(
        self,
        secret_key: str,
        *,
        webhook_secret: str | None = None,
        idempotency_prefix: str = "parkshift",
    ) -> None:
        self._webhook_secret = webhook_secret
        self._idempotency_prefix = idempotency_prefix
        stripe.api_key = secret_key
        stripe.max_network_retries = 2

    @property
    def webhook_secret(self) -> str | None:
        return self._webhook_secret

    def _idempotency_key(self, seed: str | uuid.UUID | None) -> str | None:
        if seed is None:
            return None
        return f"{self._idempotency_prefix}_{seed}"

    def create_payment_intent(
        self,
        *,
        amount_minor_units: int,
        currency: str,
        metadata: dict[str, Any],
        description: str | None = None,
        application_fee_minor_units: int | None = None,
        destination_account: str | None = None,
        idempotency_seed: str | uuid.UUID | None = None,
    ) -> PaymentIntent:
        """Create an automatic-payment-methods intent.

        When ``destination_account`` is set the charge is routed to the
        owner's connected account, less ``application_fee_minor_units``.
        """
        kwargs: dict[str, Any] = {
            "amount": amount_minor_units,
            "currency": currency,
            "metadata": metadata,
            "automatic_payment_methods": {"enabled": True},
        }
        if description:
            kwargs["description"] = description
        if destination_account:
            kwargs["transfer_data"] = {"destination": destination_account}
            if application_fee_minor_units is not None:
                kwargs["application_fee_amount"] = application_fee_minor_units
        try:
            intent = stripe.PaymentIntent.create(
                **kwargs,
                idempotency_key=self._idempotency_key(idempotency_seed),
            )
        except stripe.StripeError as exc:
            raise StripeClientError("Failed to create payment intent") from exc
        return _to_intent(intent)

    def refund_payment_intent(
        self,
        payment_intent_id: str,
        *,
        amount_minor_units: int | None = None,
        idempotency_seed: str | uuid.UUID | None = None,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"payment_intent": payment_intent_id}
        if amount_minor_units is not None:
            kwargs["amount"] = amount_minor_units
        if idempotency_seed is not None:
            kwargs["idempotency_key"] = self._idempotency_key(idempotency_seed)
        try:
            refund = stripe.Refund.create(**kwargs)
        except stripe.StripeError as exc:
            raise StripeClientError("Failed to refund payment intent") from exc
        return {
            "id": refund.get("id"),
            "status": refund.get("status", "unknown"),
            "amount": refund.get("amount"),
        }

    def construct_event(self, payload: bytes, signature: str) -> Any:
        if not self._webhook_secret:
            raise StripeClientError("Webhook secret is not configured")
        try:
            event = stripe.Webhook.construct_event(
                payload=payload,
                sig_header=signature,
                secret=self._webhook_secret,
            )
        except (ValueError, stripe.SignatureVerificationError) as exc:
            raise StripeClientError("Invalid webhook signature") from exc
        return event
