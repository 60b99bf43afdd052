"""Duration, price and vehicle-fit calculations for booking requests.

Everything here is a pure function of its inputs: no I/O, no validation
beyond the arithmetic. Callers reject non-positive durations and check
availability before charging anything.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

MONEY_PLACES = Decimal("0.01")
_MINUTES_PER_HOUR = Decimal(60)
_ONE_DAY = timedelta(days=1)


class BookingWindow(Protocol):
    is_hourly: bool
    start_date: date
    end_date: date
    start_time: str | None
    end_time: str | None


class PricedSpace(Protocol):
    hourly_price: Decimal
    daily_price: Decimal


class SpaceLimits(Protocol):
    length_cm: int | None
    width_cm: int | None
    height_cm: int | None
    max_weight_kg: int | None


class VehicleDimensions(Protocol):
    length_cm: int | None
    width_cm: int | None
    height_cm: int | None
    weight_kg: int | None


@dataclass(slots=True, frozen=True)
class Duration:
    """Billable duration: exactly one of ``hours``/``days`` is used."""

    hours: Decimal
    days: int


@dataclass(slots=True, frozen=True)
class BookingQuote:
    """Priced and checked booking candidate."""

    duration: Duration
    total: Decimal
    vehicle_compatible: bool

    @property
    def total_minor_units(self) -> int:
        return to_minor_units(self.total)


def to_money(value: Decimal | int | str) -> Decimal:
    return Decimal(value).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def to_minor_units(amount: Decimal) -> int:
    """Convert a euro amount to cents, the unit Stripe charges in."""
    return int((to_money(amount) * 100).to_integral_value())


def parse_clock(value: str) -> Decimal:
    """Return ``HH:MM`` as fractional hours (``hour + minute / 60``).

    Raises ``ValueError`` for anything that is not two integers separated by
    a colon.
    """
    hour_part, minute_part = value.split(":")
    return Decimal(int(hour_part)) + Decimal(int(minute_part)) / _MINUTES_PER_HOUR


def clock_hour(value: str) -> int:
    """Hour portion of an ``HH:MM`` string."""
    return int(value.split(":")[0])


def compute_duration(request: BookingWindow) -> Duration:
    """Compute the billable duration of a booking window.

    Hourly windows use the clock times on the start date and are not clamped,
    so ``end_time <= start_time`` yields zero or negative hours. Daily windows
    count ``ceil((end_date - start_date) / 1 day)`` days, which is ``0`` when
    both dates are equal.
    """
    if request.is_hourly:
        if request.start_time is None or request.end_time is None:
            raise ValueError("Hourly bookings require start and end times")
        hours = parse_clock(request.end_time) - parse_clock(request.start_time)
        return Duration(hours=hours, days=0)
    days = math.ceil((request.end_date - request.start_date) / _ONE_DAY)
    return Duration(hours=Decimal("0"), days=days)


def compute_total_price(space: PricedSpace, request: BookingWindow) -> Decimal:
    """Price a window: hours x hourly price, or days x daily price."""
    duration = compute_duration(request)
    if request.is_hourly:
        return to_money(duration.hours * Decimal(space.hourly_price))
    return to_money(duration.days * Decimal(space.daily_price))


def _fits(vehicle_value: int | None, space_value: int | None) -> bool:
    # A missing measurement on either side places no constraint.
    if vehicle_value is None or space_value is None:
        return True
    return vehicle_value <= space_value


def is_vehicle_compatible(
    vehicle: VehicleDimensions | None, space: SpaceLimits
) -> bool:
    """Check length, width, height and weight independently; all must fit."""
    if vehicle is None:
        return True
    return (
        _fits(vehicle.length_cm, space.length_cm)
        and _fits(vehicle.width_cm, space.width_cm)
        and _fits(vehicle.height_cm, space.height_cm)
        and _fits(vehicle.weight_kg, space.max_weight_kg)
    )


def quote(
    space: PricedSpace | SpaceLimits,
    request: BookingWindow,
    vehicle: VehicleDimensions | None = None,
) -> BookingQuote:
    """Duration, total and compatibility in one pass."""
    return BookingQuote(
        duration=compute_duration(request),
        total=compute_total_price(space, request),  # type: ignore[arg-type]
        vehicle_compatible=is_vehicle_compatible(vehicle, space),  # type: ignore[arg-type]
    )


def window_bounds(request: BookingWindow) -> tuple[datetime, datetime]:
    """Wall-clock start/end datetimes for a window.

    Hourly windows sit on ``start_date``; ``24:00`` is midnight after it.
    Daily windows run from midnight of ``start_date`` to midnight of
    ``end_date``.
    """
    if request.is_hourly:
        if request.start_time is None or request.end_time is None:
            raise ValueError("Hourly bookings require start and end times")
        return (
            _at_clock(request.start_date, request.start_time),
            _at_clock(request.start_date, request.end_time),
        )
    return (
        datetime.combine(request.start_date, time.min),
        datetime.combine(request.end_date, time.min),
    )


def _at_clock(day: date, clock: str) -> datetime:
    hour_part, minute_part = clock.split(":")
    return datetime.combine(day, time.min) + timedelta(
        hours=int(hour_part), minutes=int(minute_part)
    )
