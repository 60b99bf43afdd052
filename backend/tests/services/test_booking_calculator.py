"""Tests for duration, price and vehicle-fit calculations."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from parkshift.schemas.booking import BookingWindowIn
from parkshift.schemas.vehicle import VehicleDimensions
from parkshift.services import booking_calculator


def _space(**overrides: object) -> SimpleNamespace:
    values: dict[str, object] = {
        "hourly_price": Decimal("2.50"),
        "daily_price": Decimal("8.00"),
        "length_cm": None,
        "width_cm": None,
        "height_cm": None,
        "max_weight_kg": None,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def _hourly(start: str = "09:00", end: str = "17:00") -> BookingWindowIn:
    return BookingWindowIn(
        is_hourly=True, start_date=date(2024, 3, 1), start_time=start, end_time=end
    )


def _daily(
    start: date = date(2024, 3, 1), end: date = date(2024, 3, 4)
) -> BookingWindowIn:
    return BookingWindowIn(is_hourly=False, start_date=start, end_date=end)


def test_hourly_duration_counts_clock_hours() -> None:
    duration = booking_calculator.compute_duration(_hourly())
    assert duration.hours == Decimal("8")
    assert duration.days == 0


def test_hourly_duration_includes_minutes() -> None:
    duration = booking_calculator.compute_duration(_hourly("09:15", "10:45"))
    assert duration.hours == Decimal("1.5")


def test_hourly_duration_is_not_clamped() -> None:
    inverted = SimpleNamespace(
        is_hourly=True,
        start_date=date(2024, 3, 1),
        end_date=date(2024, 3, 1),
        start_time="17:00",
        end_time="09:00",
    )
    duration = booking_calculator.compute_duration(inverted)
    assert duration.hours == Decimal("-8")


def test_daily_duration_counts_days() -> None:
    duration = booking_calculator.compute_duration(_daily())
    assert duration.days == 3
    assert duration.hours == Decimal("0")


def test_same_day_daily_window_is_zero_days() -> None:
    window = _daily(date(2024, 3, 1), date(2024, 3, 1))
    assert booking_calculator.compute_duration(window).days == 0
    assert booking_calculator.compute_total_price(_space(), window) == Decimal("0.00")


def test_hourly_price() -> None:
    total = booking_calculator.compute_total_price(_space(), _hourly())
    assert total == Decimal("20.00")


def test_daily_price() -> None:
    total = booking_calculator.compute_total_price(_space(), _daily())
    assert total == Decimal("24.00")


def test_price_rounds_half_up_to_cents() -> None:
    space = _space(hourly_price=Decimal("2.35"))
    total = booking_calculator.compute_total_price(space, _hourly("09:00", "09:30"))
    # 0.5 h x 2.35 = 1.175
    assert total == Decimal("1.18")


def test_minor_units_are_cents() -> None:
    assert booking_calculator.to_minor_units(Decimal("20.00")) == 2000
    assert booking_calculator.to_minor_units(Decimal("1.175")) == 118


def test_malformed_clock_raises() -> None:
    with pytest.raises(ValueError):
        booking_calculator.parse_clock("nine")


def test_vehicle_fits_when_space_dimension_missing() -> None:
    vehicle = VehicleDimensions(length_cm=450)
    space = _space(length_cm=480, width_cm=None)
    assert booking_calculator.is_vehicle_compatible(vehicle, space) is True


def test_vehicle_too_long() -> None:
    vehicle = VehicleDimensions(length_cm=500)
    space = _space(length_cm=480)
    assert booking_calculator.is_vehicle_compatible(vehicle, space) is False


def test_vehicle_too_heavy() -> None:
    vehicle = VehicleDimensions(weight_kg=3000)
    space = _space(max_weight_kg=2500)
    assert booking_calculator.is_vehicle_compatible(vehicle, space) is False


def test_no_vehicle_is_always_compatible() -> None:
    space = _space(length_cm=1, width_cm=1, height_cm=1, max_weight_kg=1)
    assert booking_calculator.is_vehicle_compatible(None, space) is True


def test_quote_combines_results() -> None:
    quote = booking_calculator.quote(
        _space(length_cm=480), _hourly(), VehicleDimensions(length_cm=500)
    )
    assert quote.total == Decimal("20.00")
    assert quote.total_minor_units == 2000
    assert quote.vehicle_compatible is False


def test_window_bounds() -> None:
    assert booking_calculator.window_bounds(_hourly("09:00", "24:00")) == (
        datetime(2024, 3, 1, 9),
        datetime(2024, 3, 2, 0),
    )
    assert booking_calculator.window_bounds(_daily()) == (
        datetime(2024, 3, 1),
        datetime(2024, 3, 4),
    )


@pytest.mark.parametrize(("start", "end"), [("17:00", "09:00"), ("09:00", "09:00")])
def test_hourly_window_must_end_after_it_starts(start: str, end: str) -> None:
    with pytest.raises(ValidationError, match="end_time must be later than start_time"):
        _hourly(start, end)


@pytest.mark.parametrize("clock", ["24:30", "25:00", "9:00", "12:60"])
def test_window_rejects_impossible_clock_times(clock: str) -> None:
    with pytest.raises(ValidationError):
        _hourly("08:00", clock)
