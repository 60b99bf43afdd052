"""Payment intent, webhook and refund workflows with the Stripe SDK stubbed."""

from __future__ import annotations

import json
import uuid
from collections.abc import Iterator
from typing import Any

import pytest
import stripe
from httpx import AsyncClient

from parkshift.core.config import get_settings
from parkshift.db.session import get_sessionmaker
from parkshift.models import Booking, BookingStatus, Profile

pytestmark = pytest.mark.asyncio

DAY = "2030-06-01"
INTENT_ID = "pi_test_123"


class FakeStripe:
    """Records SDK calls made through the Stripe client."""

    def __init__(self) -> None:
        self.intents: list[dict[str, Any]] = []
        self.refunds: list[dict[str, Any]] = []

    def create_intent(self, **kwargs: Any) -> dict[str, Any]:
        self.intents.append(kwargs)
        return {
            "id": INTENT_ID,
            "client_secret": f"{INTENT_ID}_secret_abc",
            "status": "requires_payment_method",
            "amount": kwargs["amount"],
            "metadata": kwargs["metadata"],
        }

    def create_refund(self, **kwargs: Any) -> dict[str, Any]:
        self.refunds.append(kwargs)
        return {"id": "re_test_1", "status": "succeeded", "amount": 2000}


@pytest.fixture()
def fake_stripe(monkeypatch: pytest.MonkeyPatch) -> Iterator[FakeStripe]:
    fake = FakeStripe()
    monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_dummy")
    monkeypatch.setenv("PAYMENTS_WEBHOOK_VERIFY", "false")
    get_settings.cache_clear()
    monkeypatch.setattr(stripe.PaymentIntent, "create", fake.create_intent)
    monkeypatch.setattr(stripe.Refund, "create", fake.create_refund)
    yield fake
    get_settings.cache_clear()


async def _pending_booking(client: AsyncClient, ctx: dict[str, Any]) -> str:
    published = await client.put(
        f"/api/v1/spaces/{ctx['space_id']}/availability",
        json={"availability": {DAY: {"available": True, "allDay": True}}},
        headers=ctx["owner_headers"],
    )
    assert published.status_code == 200
    created = await client.post(
        "/api/v1/bookings",
        json={
            "space_id": str(ctx["space_id"]),
            "vehicle_id": str(ctx["vehicle_id"]),
            "is_hourly": True,
            "start_date": DAY,
            "start_time": "09:00",
            "end_time": "17:00",
        },
        headers=ctx["renter_headers"],
    )
    assert created.status_code == 201, created.text
    return created.json()["id"]


async def _link_owner_account(db_url: str, owner_id: Any) -> None:
    async with get_sessionmaker(db_url)() as session:
        owner = await session.get(Profile, owner_id)
        assert owner is not None
        owner.stripe_account_id = "acct_owner_1"
        await session.commit()


def _event(event_type: str, booking_id: str) -> bytes:
    return json.dumps(
        {
            "type": event_type,
            "data": {"object": {"id": INTENT_ID, "metadata": {"booking_id": booking_id}}},
        }
    ).encode()


async def _titles(client: AsyncClient, headers: dict[str, str]) -> list[str]:
    response = await client.get("/api/v1/notifications", headers=headers)
    assert response.status_code == 200
    return [item["title"] for item in response.json()]


async def test_intent_routes_charge_to_owner_with_platform_fee(
    app_context: dict[str, Any], db_url: str, fake_stripe: FakeStripe
) -> None:
    client: AsyncClient = app_context["client"]
    booking_id = await _pending_booking(client, app_context)
    await _link_owner_account(db_url, app_context["owner_id"])

    response = await client.post(
        "/api/v1/payments/intents",
        json={"booking_id": booking_id},
        headers=app_context["renter_headers"],
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["payment_intent_id"] == INTENT_ID
    assert body["client_secret"] == f"{INTENT_ID}_secret_abc"
    assert body["amount_minor_units"] == 2000
    assert body["currency"] == "eur"

    (call,) = fake_stripe.intents
    assert call["amount"] == 2000
    assert call["application_fee_amount"] == 200
    assert call["transfer_data"] == {"destination": "acct_owner_1"}
    assert call["idempotency_key"] == f"parkshift_booking-{booking_id}-intent"
    assert call["metadata"] == {
        "booking_id": booking_id,
        "space_id": str(app_context["space_id"]),
        "renter_id": str(app_context["renter_id"]),
        "owner_id": str(app_context["owner_id"]),
    }

    async with get_sessionmaker(db_url)() as session:
        booking = await session.get(Booking, uuid.UUID(booking_id))
        assert booking is not None
        assert booking.stripe_payment_intent_id == INTENT_ID
        assert booking.status is BookingStatus.PENDING


async def test_intent_without_connected_account_skips_transfer(
    app_context: dict[str, Any], fake_stripe: FakeStripe
) -> None:
    client: AsyncClient = app_context["client"]
    booking_id = await _pending_booking(client, app_context)

    response = await client.post(
        "/api/v1/payments/intents",
        json={"booking_id": booking_id},
        headers=app_context["renter_headers"],
    )
    assert response.status_code == 200
    (call,) = fake_stripe.intents
    assert "transfer_data" not in call
    assert "application_fee_amount" not in call


async def test_only_renter_can_pay(
    app_context: dict[str, Any], fake_stripe: FakeStripe
) -> None:
    client: AsyncClient = app_context["client"]
    booking_id = await _pending_booking(client, app_context)
    response = await client.post(
        "/api/v1/payments/intents",
        json={"booking_id": booking_id},
        headers=app_context["owner_headers"],
    )
    assert response.status_code == 403
    assert fake_stripe.intents == []


async def test_payments_unconfigured_returns_503(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    booking_id = await _pending_booking(client, app_context)
    response = await client.post(
        "/api/v1/payments/intents",
        json={"booking_id": booking_id},
        headers=app_context["renter_headers"],
    )
    assert response.status_code == 503


async def test_succeeded_webhook_confirms_and_notifies(
    app_context: dict[str, Any], fake_stripe: FakeStripe
) -> None:
    client: AsyncClient = app_context["client"]
    booking_id = await _pending_booking(client, app_context)

    response = await client.post(
        "/api/v1/payments/webhook",
        content=_event("payment_intent.succeeded", booking_id),
    )
    assert response.status_code == 200
    assert response.json() == {"received": True, "status": "processed"}

    booking = await client.get(
        f"/api/v1/bookings/{booking_id}", headers=app_context["renter_headers"]
    )
    assert booking.json()["status"] == "confirmed"
    assert booking.json()["stripe_payment_intent_id"] == INTENT_ID

    assert "Booking Confirmed" in await _titles(client, app_context["renter_headers"])
    assert set(await _titles(client, app_context["owner_headers"])) == {
        "New Booking Request",
        "Booking Confirmed",
    }


async def test_failed_webhook_keeps_booking_pending(
    app_context: dict[str, Any], fake_stripe: FakeStripe
) -> None:
    client: AsyncClient = app_context["client"]
    booking_id = await _pending_booking(client, app_context)

    response = await client.post(
        "/api/v1/payments/webhook",
        content=_event("payment_intent.payment_failed", booking_id),
    )
    assert response.json()["status"] == "processed"

    booking = await client.get(
        f"/api/v1/bookings/{booking_id}", headers=app_context["renter_headers"]
    )
    assert booking.json()["status"] == "pending"

    notes = (
        await client.get("/api/v1/notifications", headers=app_context["renter_headers"])
    ).json()
    assert [(n["type"], n["title"], n["url"]) for n in notes] == [
        ("payment", "Payment Failed", "/profile?tab=payments")
    ]


async def test_unknown_events_are_acknowledged(
    app_context: dict[str, Any], fake_stripe: FakeStripe
) -> None:
    client: AsyncClient = app_context["client"]
    response = await client.post(
        "/api/v1/payments/webhook",
        content=json.dumps({"type": "charge.refunded", "data": {"object": {}}}).encode(),
    )
    assert response.json() == {"received": True, "status": "ignored"}


async def test_signed_webhook_is_verified(
    app_context: dict[str, Any], monkeypatch: pytest.MonkeyPatch
) -> None:
    client: AsyncClient = app_context["client"]
    booking_id = await _pending_booking(client, app_context)
    monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_dummy")
    monkeypatch.setenv("STRIPE_WEBHOOK_SECRET", "whsec_test")
    get_settings.cache_clear()

    def construct_event(*, payload: bytes, sig_header: str, secret: str) -> Any:
        if sig_header != "t=1,v1=good" or secret != "whsec_test":
            raise stripe.SignatureVerificationError("bad signature", sig_header)
        return json.loads(payload)

    monkeypatch.setattr(stripe.Webhook, "construct_event", construct_event)
    payload = _event("payment_intent.succeeded", booking_id)

    unsigned = await client.post("/api/v1/payments/webhook", content=payload)
    assert unsigned.status_code == 400

    forged = await client.post(
        "/api/v1/payments/webhook",
        content=payload,
        headers={"Stripe-Signature": "t=1,v1=bad"},
    )
    assert forged.status_code == 400

    signed = await client.post(
        "/api/v1/payments/webhook",
        content=payload,
        headers={"Stripe-Signature": "t=1,v1=good"},
    )
    assert signed.status_code == 200
    assert signed.json()["status"] == "processed"
    get_settings.cache_clear()


async def test_cancelling_paid_booking_refunds_it(
    app_context: dict[str, Any], fake_stripe: FakeStripe
) -> None:
    client: AsyncClient = app_context["client"]
    booking_id = await _pending_booking(client, app_context)
    await client.post(
        "/api/v1/payments/intents",
        json={"booking_id": booking_id},
        headers=app_context["renter_headers"],
    )
    await client.post(
        "/api/v1/payments/webhook",
        content=_event("payment_intent.succeeded", booking_id),
    )

    cancelled = await client.delete(
        f"/api/v1/bookings/{booking_id}", headers=app_context["renter_headers"]
    )
    assert cancelled.status_code == 200, cancelled.text
    assert cancelled.json()["status"] == "cancelled"
    assert fake_stripe.refunds == [{"payment_intent": INTENT_ID}]
    assert "Booking Cancelled" in await _titles(client, app_context["owner_headers"])


async def test_pending_cancellation_does_not_refund(
    app_context: dict[str, Any], fake_stripe: FakeStripe
) -> None:
    client: AsyncClient = app_context["client"]
    booking_id = await _pending_booking(client, app_context)
    cancelled = await client.delete(
        f"/api/v1/bookings/{booking_id}", headers=app_context["owner_headers"]
    )
    assert cancelled.json()["status"] == "cancelled"
    assert fake_stripe.refunds == []
    assert "Booking Cancelled" in await _titles(client, app_context["renter_headers"])


async def test_repeated_succeeded_events_confirm_once(
    app_context: dict[str, Any], fake_stripe: FakeStripe
) -> None:
    client: AsyncClient = app_context["client"]
    booking_id = await _pending_booking(client, app_context)

    for _ in range(3):
        response = await client.post(
            "/api/v1/payments/webhook",
            content=_event("payment_intent.succeeded", booking_id),
        )
        assert response.status_code == 200
        assert response.json()["status"] == "processed"

    renter_titles = await _titles(client, app_context["renter_headers"])
    owner_titles = await _titles(client, app_context["owner_headers"])
    assert renter_titles == ["Booking Confirmed"]
    assert sorted(owner_titles) == ["Booking Confirmed", "New Booking Request"]
    assert fake_stripe.refunds == []


async def test_payment_for_cancelled_booking_is_refunded(
    app_context: dict[str, Any], fake_stripe: FakeStripe
) -> None:
    client: AsyncClient = app_context["client"]
    booking_id = await _pending_booking(client, app_context)
    cancelled = await client.delete(
        f"/api/v1/bookings/{booking_id}", headers=app_context["renter_headers"]
    )
    assert cancelled.json()["status"] == "cancelled"
    assert fake_stripe.refunds == []

    response = await client.post(
        "/api/v1/payments/webhook",
        content=_event("payment_intent.succeeded", booking_id),
    )
    assert response.status_code == 200
    assert fake_stripe.refunds == [
        {
            "payment_intent": INTENT_ID,
            "idempotency_key": f"parkshift_booking-{booking_id}-late-refund",
        }
    ]

    booking = await client.get(
        f"/api/v1/bookings/{booking_id}", headers=app_context["renter_headers"]
    )
    assert booking.json()["status"] == "cancelled"
    assert "Booking Confirmed" not in await _titles(
        client, app_context["renter_headers"]
    )


async def test_late_payment_without_stripe_is_retried(
    app_context: dict[str, Any], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("PAYMENTS_WEBHOOK_VERIFY", "false")
    monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
    get_settings.cache_clear()
    client: AsyncClient = app_context["client"]
    booking_id = await _pending_booking(client, app_context)
    await client.delete(
        f"/api/v1/bookings/{booking_id}", headers=app_context["renter_headers"]
    )

    response = await client.post(
        "/api/v1/payments/webhook",
        content=_event("payment_intent.succeeded", booking_id),
    )
    assert response.status_code == 503
    assert "Payments are not configured" in response.json()["detail"]
    get_settings.cache_clear()
