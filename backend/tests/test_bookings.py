"""Booking API integration tests."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import pytest
from httpx import AsyncClient
from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from parkshift.core.security import create_access_token
from parkshift.db.session import get_sessionmaker
from parkshift.models import Notification, Profile

pytestmark = pytest.mark.asyncio

DAY = "2030-06-01"


async def _publish_availability(
    client: AsyncClient, ctx: dict[str, Any], availability: dict[str, Any]
) -> None:
    response = await client.put(
        f"/api/v1/spaces/{ctx['space_id']}/availability",
        json={"availability": availability},
        headers=ctx["owner_headers"],
    )
    assert response.status_code == 200, response.text


def _hourly_payload(ctx: dict[str, Any], start: str = "09:00", end: str = "17:00"):
    return {
        "space_id": str(ctx["space_id"]),
        "vehicle_id": str(ctx["vehicle_id"]),
        "is_hourly": True,
        "start_date": DAY,
        "start_time": start,
        "end_time": end,
    }


async def _book(client: AsyncClient, ctx: dict[str, Any], payload: dict[str, Any]):
    return await client.post(
        "/api/v1/bookings", json=payload, headers=ctx["renter_headers"]
    )


async def test_quote_prices_and_checks_window(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    await _publish_availability(
        client, app_context, {DAY: {"available": True, "allDay": True}}
    )

    response = await client.post(
        "/api/v1/bookings/quote",
        json=_hourly_payload(app_context),
        headers=app_context["renter_headers"],
    )
    assert response.status_code == 200, response.text
    quote = response.json()
    assert Decimal(quote["total_amount"]) == Decimal("20.00")
    assert quote["amount_minor_units"] == 2000
    assert Decimal(quote["hours"]) == Decimal("8")
    assert quote["days"] == 0
    assert quote["currency"] == "eur"
    assert quote["vehicle_compatible"] is True
    assert quote["available"] is True


async def test_quote_reports_unavailable_window(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    response = await client.post(
        "/api/v1/bookings/quote",
        json=_hourly_payload(app_context),
        headers=app_context["renter_headers"],
    )
    assert response.status_code == 200
    assert response.json()["available"] is False


async def test_booking_lifecycle(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    owner_headers = app_context["owner_headers"]
    renter_headers = app_context["renter_headers"]
    await _publish_availability(
        client, app_context, {DAY: {"available": True, "allDay": True}}
    )

    created = await _book(client, app_context, _hourly_payload(app_context))
    assert created.status_code == 201, created.text
    booking = created.json()
    assert booking["status"] == "pending"
    assert Decimal(booking["total_amount"]) == Decimal("20.00")
    assert booking["start_at"].startswith(f"{DAY}T09:00")
    assert booking["end_at"].startswith(f"{DAY}T17:00")
    booking_id = booking["id"]

    owner_notes = await client.get("/api/v1/notifications", headers=owner_headers)
    assert owner_notes.status_code == 200
    [note] = owner_notes.json()
    assert note["title"] == "New Booking Request"
    assert note["url"] == f"/booking/confirmation/{booking_id}"

    as_owner = await client.get("/api/v1/bookings?role=owner", headers=owner_headers)
    assert [item["id"] for item in as_owner.json()] == [booking_id]
    as_renter = await client.get("/api/v1/bookings", headers=renter_headers)
    assert [item["id"] for item in as_renter.json()] == [booking_id]
    assert (await client.get("/api/v1/bookings", headers=owner_headers)).json() == []

    renter_confirm = await client.patch(
        f"/api/v1/bookings/{booking_id}/status",
        json={"status": "confirmed"},
        headers=renter_headers,
    )
    assert renter_confirm.status_code == 403

    confirmed = await client.patch(
        f"/api/v1/bookings/{booking_id}/status",
        json={"status": "confirmed"},
        headers=owner_headers,
    )
    assert confirmed.status_code == 200, confirmed.text
    assert confirmed.json()["status"] == "confirmed"

    renter_notes = await client.get("/api/v1/notifications", headers=renter_headers)
    assert [n["title"] for n in renter_notes.json()] == ["Booking Confirmed"]

    completed = await client.patch(
        f"/api/v1/bookings/{booking_id}/status",
        json={"status": "completed"},
        headers=owner_headers,
    )
    assert completed.json()["status"] == "completed"

    reopened = await client.patch(
        f"/api/v1/bookings/{booking_id}/status",
        json={"status": "pending"},
        headers=owner_headers,
    )
    assert reopened.status_code == 400


async def test_booking_rejected_without_availability(
    app_context: dict[str, Any],
) -> None:
    client: AsyncClient = app_context["client"]
    response = await _book(client, app_context, _hourly_payload(app_context))
    assert response.status_code == 400
    assert response.json()["detail"] == "Space is not available for selected window"


async def test_booking_rejected_outside_slot_hours(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    await _publish_availability(
        client,
        app_context,
        {DAY: {"available": True, "startTime": "08:00", "endTime": "12:00"}},
    )
    inside = _hourly_payload(app_context, "08:30", "11:30")
    quote = await client.post(
        "/api/v1/bookings/quote", json=inside, headers=app_context["renter_headers"]
    )
    assert quote.json()["available"] is True

    response = await _book(
        client, app_context, _hourly_payload(app_context, "11:00", "13:00")
    )
    assert response.status_code == 400


async def test_daily_booking_needs_every_night(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    await _publish_availability(
        client,
        app_context,
        {
            "2030-06-01": {"available": True, "allDay": True},
            "2030-06-02": {"available": True, "allDay": True},
        },
    )
    payload = {
        "space_id": str(app_context["space_id"]),
        "vehicle_id": str(app_context["vehicle_id"]),
        "is_hourly": False,
        "start_date": "2030-06-01",
        "end_date": "2030-06-04",
    }
    missing_night = await _book(client, app_context, payload)
    assert missing_night.status_code == 400

    payload["end_date"] = "2030-06-03"
    created = await _book(client, app_context, payload)
    assert created.status_code == 201, created.text
    booking = created.json()
    assert booking["duration_days"] == 2
    assert Decimal(booking["total_amount"]) == Decimal("16.00")


async def test_same_day_daily_booking_is_rejected(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    await _publish_availability(
        client, app_context, {DAY: {"available": True, "allDay": True}}
    )
    payload = {
        "space_id": str(app_context["space_id"]),
        "vehicle_id": str(app_context["vehicle_id"]),
        "is_hourly": False,
        "start_date": DAY,
        "end_date": DAY,
    }
    response = await _book(client, app_context, payload)
    assert response.status_code == 400
    assert response.json()["detail"] == "Booking must last longer than zero"


async def test_overlapping_booking_is_rejected(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    await _publish_availability(
        client, app_context, {DAY: {"available": True, "allDay": True}}
    )
    first = await _book(client, app_context, _hourly_payload(app_context))
    assert first.status_code == 201

    overlapping = await _book(
        client, app_context, _hourly_payload(app_context, "16:00", "18:00")
    )
    assert overlapping.status_code == 400

    adjacent = await _book(
        client, app_context, _hourly_payload(app_context, "17:00", "18:00")
    )
    assert adjacent.status_code == 201, adjacent.text


async def test_minimum_duration_enforced(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    await _publish_availability(
        client, app_context, {DAY: {"available": True, "allDay": True}}
    )
    update = await client.patch(
        f"/api/v1/spaces/{app_context['space_id']}",
        json={"minimum_duration_hours": 4},
        headers=app_context["owner_headers"],
    )
    assert update.status_code == 200

    response = await _book(
        client, app_context, _hourly_payload(app_context, "09:00", "11:00")
    )
    assert response.status_code == 400
    assert "at least 4" in response.json()["detail"]


async def test_incompatible_vehicle_is_rejected(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    await _publish_availability(
        client, app_context, {DAY: {"available": True, "allDay": True}}
    )
    van = await client.post(
        "/api/v1/vehicles",
        json={"make": "Ford", "model": "Transit", "length_cm": 600, "height_cm": 270},
        headers=app_context["renter_headers"],
    )
    assert van.status_code == 201
    payload = _hourly_payload(app_context)
    payload["vehicle_id"] = van.json()["id"]

    response = await _book(client, app_context, payload)
    assert response.status_code == 400
    assert response.json()["detail"] == "Vehicle does not fit this parking space"


async def test_renter_cancels_pending_booking(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    await _publish_availability(
        client, app_context, {DAY: {"available": True, "allDay": True}}
    )
    created = await _book(client, app_context, _hourly_payload(app_context))
    booking_id = created.json()["id"]

    cancelled = await client.delete(
        f"/api/v1/bookings/{booking_id}", headers=app_context["renter_headers"]
    )
    assert cancelled.status_code == 200, cancelled.text
    assert cancelled.json()["status"] == "cancelled"

    owner_notes = await client.get(
        "/api/v1/notifications", headers=app_context["owner_headers"]
    )
    assert "Booking Cancelled" in [n["title"] for n in owner_notes.json()]

    rebooked = await _book(client, app_context, _hourly_payload(app_context))
    assert rebooked.status_code == 201


async def test_strangers_cannot_see_bookings(
    app_context: dict[str, Any], db_url: str
) -> None:
    client: AsyncClient = app_context["client"]
    await _publish_availability(
        client, app_context, {DAY: {"available": True, "allDay": True}}
    )
    created = await _book(client, app_context, _hourly_payload(app_context))
    booking_id = created.json()["id"]
    async with get_sessionmaker(db_url)() as session:
        stranger = Profile(email="sam.stranger@example.com")
        session.add(stranger)
        await session.commit()
        stranger_id = stranger.id

    token = create_access_token(str(stranger_id))
    response = await client.get(
        f"/api/v1/bookings/{booking_id}",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 403


async def test_requests_without_token_are_unauthorized(
    app_context: dict[str, Any],
) -> None:
    client: AsyncClient = app_context["client"]
    response = await client.get("/api/v1/bookings")
    assert response.status_code == 401


@pytest.mark.parametrize(("start", "end"), [("17:00", "09:00"), ("09:00", "09:00")])
async def test_hourly_window_must_end_after_it_starts(
    app_context: dict[str, Any], start: str, end: str
) -> None:
    client: AsyncClient = app_context["client"]
    await _publish_availability(
        client, app_context, {DAY: {"available": True, "allDay": True}}
    )
    payload = _hourly_payload(app_context, start, end)

    quote = await client.post(
        "/api/v1/bookings/quote", json=payload, headers=app_context["renter_headers"]
    )
    assert quote.status_code == 422

    created = await _book(client, app_context, payload)
    assert created.status_code == 422

    listed = await client.get("/api/v1/bookings", headers=app_context["renter_headers"])
    assert listed.json() == []


async def test_booking_survives_notification_failure(
    app_context: dict[str, Any],
) -> None:
    client: AsyncClient = app_context["client"]
    await _publish_availability(
        client, app_context, {DAY: {"available": True, "allDay": True}}
    )

    def _reject_notifications(session, flush_context, instances) -> None:
        if any(isinstance(obj, Notification) for obj in session.new):
            raise SQLAlchemyError("notification table unavailable")

    event.listen(Session, "before_flush", _reject_notifications)
    try:
        created = await _book(client, app_context, _hourly_payload(app_context))
    finally:
        event.remove(Session, "before_flush", _reject_notifications)

    assert created.status_code == 201, created.text
    booking_id = created.json()["id"]
    assert created.json()["status"] == "pending"

    fetched = await client.get(
        f"/api/v1/bookings/{booking_id}", headers=app_context["renter_headers"]
    )
    assert fetched.status_code == 200
    assert fetched.json()["space_id"] == str(app_context["space_id"])

    owner_notes = await client.get(
        "/api/v1/notifications", headers=app_context["owner_headers"]
    )
    assert owner_notes.json() == []
