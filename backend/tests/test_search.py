"""Search API integration tests."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

ORIGIN = {"latitude": 52.3791, "longitude": 4.9003}
DAY = "2030-06-01"


async def _list_space(client: AsyncClient, ctx: dict[str, Any], **overrides: Any) -> str:
    payload = {
        "title": "Street spot",
        "latitude": 52.3700,
        "longitude": 4.8900,
        "length_cm": 500,
        "width_cm": 250,
        "hourly_price": "1.50",
        "daily_price": "9.00",
        **overrides,
    }
    response = await client.post(
        "/api/v1/spaces", json=payload, headers=ctx["owner_headers"]
    )
    assert response.status_code == 201, response.text
    return response.json()["id"]


async def _search(
    client: AsyncClient, ctx: dict[str, Any], **payload: Any
) -> list[dict[str, Any]]:
    response = await client.post(
        "/api/v1/search",
        json={"location": ORIGIN, **payload},
        headers=ctx["renter_headers"],
    )
    assert response.status_code == 200, response.text
    return response.json()


async def test_results_within_radius_sorted_by_distance(
    app_context: dict[str, Any],
) -> None:
    client: AsyncClient = app_context["client"]
    nearby = await _list_space(client, app_context)
    await _list_space(client, app_context, title="Rotterdam", latitude=51.9225, longitude=4.4792)

    results = await _search(client, app_context)
    assert [item["id"] for item in results] == [str(app_context["space_id"]), nearby]
    assert results[0]["distance_km"] == 0.0
    assert 0.5 < results[1]["distance_km"] < 2.0
    assert results[0]["quoted_total"] is None
    assert results[0]["review_count"] == 0
    assert results[0]["average_rating"] is None

    wide = await _search(client, app_context, radius_km=100)
    assert len(wide) == 3


async def test_vehicle_must_fit(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    narrow = await _list_space(client, app_context, title="Narrow alley", width_cm=150)

    without_vehicle = await _search(client, app_context)
    assert narrow in [item["id"] for item in without_vehicle]

    with_saved = await _search(
        client, app_context, vehicle_id=str(app_context["vehicle_id"])
    )
    assert [item["id"] for item in with_saved] == [str(app_context["space_id"])]

    tall = await _search(client, app_context, vehicle={"height_cm": 260})
    assert narrow in [item["id"] for item in tall]
    assert str(app_context["space_id"]) not in [item["id"] for item in tall]


async def test_unknown_vehicle_is_not_found(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    response = await client.post(
        "/api/v1/search",
        json={"location": ORIGIN, "vehicle_id": "00000000-0000-0000-0000-000000000000"},
        headers=app_context["renter_headers"],
    )
    assert response.status_code == 404


async def test_price_and_amenity_filters(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    charger = await _list_space(
        client, app_context, title="Charger bay", amenities={"ev_charging": True}
    )

    ev_only = await _search(client, app_context, filters={"ev_charging": True})
    assert [item["id"] for item in ev_only] == [charger]

    covered = await _search(client, app_context, filters={"covered": True})
    assert [item["id"] for item in covered] == [str(app_context["space_id"])]

    cheap_hourly = await _search(client, app_context, filters={"price_max": "2.00"})
    assert [item["id"] for item in cheap_hourly] == [charger]

    cheap_daily = await _search(
        client,
        app_context,
        window={"is_hourly": False, "start_date": DAY, "end_date": "2030-06-02"},
        filters={"price_max": "8.50"},
    )
    assert [item["id"] for item in cheap_daily] == [str(app_context["space_id"])]


async def test_booked_spaces_drop_out_and_totals_are_quoted(
    app_context: dict[str, Any],
) -> None:
    client: AsyncClient = app_context["client"]
    published = await client.put(
        f"/api/v1/spaces/{app_context['space_id']}/availability",
        json={"availability": {DAY: {"available": True, "allDay": True}}},
        headers=app_context["owner_headers"],
    )
    assert published.status_code == 200
    booked = await client.post(
        "/api/v1/bookings",
        json={
            "space_id": str(app_context["space_id"]),
            "vehicle_id": str(app_context["vehicle_id"]),
            "is_hourly": True,
            "start_date": DAY,
            "start_time": "09:00",
            "end_time": "17:00",
        },
        headers=app_context["renter_headers"],
    )
    assert booked.status_code == 201, booked.text

    clash = await _search(
        client,
        app_context,
        window={"is_hourly": True, "start_date": DAY, "start_time": "10:00", "end_time": "12:00"},
    )
    assert clash == []

    evening = await _search(
        client,
        app_context,
        window={"is_hourly": True, "start_date": DAY, "start_time": "17:00", "end_time": "19:00"},
    )
    assert [item["id"] for item in evening] == [str(app_context["space_id"])]
    assert Decimal(evening[0]["quoted_total"]) == Decimal("5.00")


async def test_inverted_search_window_is_rejected(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    response = await client.post(
        "/api/v1/search",
        json={
            "location": ORIGIN,
            "window": {
                "is_hourly": True,
                "start_date": DAY,
                "start_time": "17:00",
                "end_time": "09:00",
            },
        },
        headers=app_context["renter_headers"],
    )
    assert response.status_code == 422
