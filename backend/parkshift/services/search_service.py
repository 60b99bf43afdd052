"""Nearby space search for renters."""
from __future__ import annotations

import math
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from parkshift.models.booking import Booking, BookingStatus
from parkshift.models.parking_space import ParkingSpace
from parkshift.models.review import Review
from parkshift.schemas.search import SearchRequest
from parkshift.services import booking_calculator, vehicle_service
from parkshift.services.booking_calculator import VehicleDimensions

EARTH_RADIUS_KM = 6371.0


@dataclass(slots=True)
class SpaceMatch:
    space: ParkingSpace
    distance_km: float
    average_rating: float | None
    review_count: int
    quoted_total: Decimal | None


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two coordinates in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def _matches_amenities(space: ParkingSpace, required: Iterable[str]) -> bool:
    amenities = space.amenities or {}
    return all(amenities.get(name) for name in required)


def _matches_price(
    space: ParkingSpace,
    *,
    hourly: bool,
    price_min: Decimal | None,
    price_max: Decimal | None,
) -> bool:
    price = space.hourly_price if hourly else space.daily_price
    if price_min is not None and price < price_min:
        return False
    if price_max is not None and price > price_max:
        return False
    return True


async def _booked_space_ids(
    session: AsyncSession,
    *,
    space_ids: Sequence[uuid.UUID],
    request: SearchRequest,
) -> set[uuid.UUID]:
    if request.window is None or not space_ids:
        return set()
    start_at, end_at = booking_calculator.window_bounds(request.window)
    result = await session.execute(
        select(Booking.space_id).where(
            Booking.space_id.in_(space_ids),
            Booking.status != BookingStatus.CANCELLED,
            Booking.start_at < end_at,
            Booking.end_at > start_at,
        )
    )
    return set(result.scalars().all())


async def _rating_stats(
    session: AsyncSession, space_ids: Sequence[uuid.UUID]
) -> dict[uuid.UUID, tuple[float, int]]:
    if not space_ids:
        return {}
    result = await session.execute(
        select(Review.space_id, func.avg(Review.rating), func.count(Review.id))
        .where(Review.space_id.in_(space_ids))
        .group_by(Review.space_id)
    )
    return {
        space_id: (float(average), int(count))
        for space_id, average, count in result.all()
    }


async def search_spaces(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    request: SearchRequest,
    default_radius_km: float,
) -> list[SpaceMatch]:
    """Active spaces within the radius that fit the vehicle and filters.

    Spaces with a live booking overlapping the requested window are dropped.
    Results are sorted by distance, nearest first.
    """
    vehicle: VehicleDimensions | None = request.vehicle
    if request.vehicle_id is not None:
        vehicle = await vehicle_service.get_user_vehicle(
            session, user_id=user_id, vehicle_id=request.vehicle_id
        )
    radius = request.radius_km or default_radius_km
    hourly = request.window.is_hourly if request.window is not None else True
    required = request.filters.required_amenities()

    result = await session.execute(
        select(ParkingSpace).where(ParkingSpace.is_active.is_(True))
    )
    candidates: list[tuple[ParkingSpace, float]] = []
    for space in result.scalars().all():
        distance = haversine_km(
            request.location.latitude,
            request.location.longitude,
            space.latitude,
            space.longitude,
        )
        if distance > radius:
            continue
        if not booking_calculator.is_vehicle_compatible(vehicle, space):
            continue
        if not _matches_price(
            space,
            hourly=hourly,
            price_min=request.filters.price_min,
            price_max=request.filters.price_max,
        ):
            continue
        if not _matches_amenities(space, required):
            continue
        candidates.append((space, distance))

    space_ids = [space.id for space, _ in candidates]
    booked = await _booked_space_ids(session, space_ids=space_ids, request=request)
    stats = await _rating_stats(session, space_ids)

    matches = []
    for space, distance in candidates:
        if space.id in booked:
            continue
        average, count = stats.get(space.id, (None, 0))
        quoted = (
            booking_calculator.compute_total_price(space, request.window)
            if request.window is not None
            else None
        )
        matches.append(
            SpaceMatch(
                space=space,
                distance_km=round(distance, 3),
                average_rating=average,
                review_count=count,
                quoted_total=quoted,
            )
        )
    matches.sort(key=lambda match: match.distance_km)
    return matches
