"""Availability store for parking spaces.

Availability is kept as one row per ``(space, date)``. The owner's calendar
edits arrive as a mapping of date to :class:`DayAvailability` settings and are
written with a delete-then-insert of the space's whole set, inside a single
transaction. Dates without a row are unavailable.
"""
from __future__ import annotations

import calendar
import logging
import uuid
from collections.abc import Iterable, Mapping
from datetime import date

from sqlalchemy import Select, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parkshift.models.availability import (
    ALL_DAY_END_HOUR,
    ALL_DAY_START_HOUR,
    AvailabilitySlot,
)
from parkshift.schemas.availability import DayAvailability
from parkshift.services.booking_calculator import clock_hour

logger = logging.getLogger(__name__)

# What the calendar editor shows for an all-day slot.
_ALL_DAY_START_CLOCK = "00:00"
_ALL_DAY_END_CLOCK = "23:00"


def settings_to_hours(settings: DayAvailability) -> tuple[int, int]:
    """Map editor settings to the stored ``(start_hour, end_hour)`` pair."""
    if settings.all_day:
        return ALL_DAY_START_HOUR, ALL_DAY_END_HOUR
    return clock_hour(settings.start_time), clock_hour(settings.end_time)


def slot_to_settings(slot: AvailabilitySlot) -> DayAvailability:
    """Inverse of :func:`settings_to_hours` for a stored slot."""
    all_day = slot.is_available and slot.is_all_day
    if all_day:
        start_time, end_time = _ALL_DAY_START_CLOCK, _ALL_DAY_END_CLOCK
    else:
        start_time = f"{slot.start_hour:02d}:00"
        end_time = f"{slot.end_hour:02d}:00"
    return DayAvailability(
        available=slot.is_available,
        all_day=all_day,
        start_time=start_time,
        end_time=end_time,
    )


def copy_day_settings(
    availability: Mapping[date, DayAvailability],
    *,
    source_date: date,
    target_dates: Iterable[date],
) -> dict[date, DayAvailability]:
    """Return a copy of ``availability`` with the source date's settings
    duplicated onto every target date. The source date itself is skipped."""
    source = availability.get(source_date)
    if source is None:
        raise ValueError(f"No availability settings for {source_date.isoformat()}")
    updated = dict(availability)
    for target in target_dates:
        if target == source_date:
            continue
        updated[target] = source.model_copy()
    return updated


def _coerce_date(value: date | str) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def _space_slots_query(space_id: uuid.UUID) -> Select[tuple[AvailabilitySlot]]:
    return (
        select(AvailabilitySlot)
        .where(AvailabilitySlot.space_id == space_id)
        .order_by(AvailabilitySlot.date.asc())
    )


async def get_availability(
    session: AsyncSession,
    *,
    space_id: uuid.UUID,
) -> list[AvailabilitySlot]:
    """Return all slots of a space ordered by date ascending."""
    result = await session.execute(_space_slots_query(space_id))
    return list(result.scalars().all())


async def get_availability_for_date(
    session: AsyncSession,
    *,
    space_id: uuid.UUID,
    on_date: date,
) -> AvailabilitySlot | None:
    result = await session.execute(
        _space_slots_query(space_id).where(AvailabilitySlot.date == on_date)
    )
    return result.scalar_one_or_none()


async def replace_availability(
    session: AsyncSession,
    *,
    space_id: uuid.UUID,
    availability: Mapping[date | str, DayAvailability],
) -> list[AvailabilitySlot]:
    """Overwrite a space's availability with the available entries of ``availability``.

    Entries marked unavailable are dropped rather than stored. The delete and
    the inserts are committed together; on a database error the session is
    rolled back and the error re-raised, leaving the previous set intact.
    """
    slots: list[AvailabilitySlot] = []
    for raw_date, settings in sorted(
        ((_coerce_date(key), value) for key, value in availability.items()),
        key=lambda item: item[0],
    ):
        if not settings.available:
            continue
        start_hour, end_hour = settings_to_hours(settings)
        slots.append(
            AvailabilitySlot(
                space_id=space_id,
                date=raw_date,
                is_available=True,
                start_hour=start_hour,
                end_hour=end_hour,
            )
        )

    try:
        await session.execute(
            delete(AvailabilitySlot).where(AvailabilitySlot.space_id == space_id)
        )
        session.add_all(slots)
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        logger.warning("Availability replace rolled back for space %s", space_id)
        raise

    logger.info(
        "Replaced availability for space %s with %d slot(s)", space_id, len(slots)
    )
    return slots


async def is_date_range_available(
    session: AsyncSession,
    *,
    space_id: uuid.UUID,
    start_date: date,
    end_date: date,
) -> list[AvailabilitySlot]:
    """Return the available slots between ``start_date`` and ``end_date`` inclusive.

    An empty or partial result means the range is not fully bookable; callers
    compare it against the dates they need.
    """
    stmt = _space_slots_query(space_id).where(
        AvailabilitySlot.date >= start_date,
        AvailabilitySlot.date <= end_date,
        AvailabilitySlot.is_available.is_(True),
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


def parse_month(month: str) -> tuple[date, date]:
    """First and last day of a ``YYYY-MM`` month."""
    year_part, _, month_part = month.partition("-")
    first = date(int(year_part), int(month_part), 1)
    last_day = calendar.monthrange(first.year, first.month)[1]
    return first, first.replace(day=last_day)


async def get_month_calendar(
    session: AsyncSession,
    *,
    space_id: uuid.UUID,
    month: str,
) -> dict[date, DayAvailability]:
    """Editor settings for every day of ``month``; days without a slot are unavailable."""
    first, last = parse_month(month)
    result = await session.execute(
        _space_slots_query(space_id).where(
            AvailabilitySlot.date >= first, AvailabilitySlot.date <= last
        )
    )
    by_date = {slot.date: slot for slot in result.scalars().all()}
    days: dict[date, DayAvailability] = {}
    for day_number in range(1, last.day + 1):
        current = first.replace(day=day_number)
        slot = by_date.get(current)
        days[current] = (
            slot_to_settings(slot) if slot is not None else DayAvailability()
        )
    return days


async def copy_availability(
    session: AsyncSession,
    *,
    space_id: uuid.UUID,
    source_date: date,
    target_dates: Iterable[date],
) -> list[AvailabilitySlot]:
    """Apply one stored date's settings to other dates and save the result."""
    current = {
        slot.date: slot_to_settings(slot)
        for slot in await get_availability(session, space_id=space_id)
    }
    updated = copy_day_settings(
        current, source_date=source_date, target_dates=target_dates
    )
    return await replace_availability(
        session, space_id=space_id, availability=updated
    )
