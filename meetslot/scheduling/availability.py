"""
Availability resolution.

Combines the slot generator with the occupancy calculator to answer "which
start times can a requester pick on this day, and for how long".

Algorithm (per day):
    1. blocked = blocked_marks(day, bookings, rule.blocks, buffer)
    2. expand every range into its marks, dropping blocked ones
    3. keep a mark only if mark + interval + buffer still fits inside its range
    4. when several ranges offer the same mark, keep the largest interval
    5. sort by time
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable, Mapping

from meetslot.schemas.availability_schema import AvailabilityRule, Slot
from meetslot.schemas.booking_schema import Booking
from meetslot.scheduling.occupancy import blocked_marks
from meetslot.scheduling.slots import generate_slots
from meetslot.timegrid import add_minutes, combine, is_before

logger = logging.getLogger(__name__)


def available_slots(
    day: date,
    rule: AvailabilityRule,
    bookings: Iterable[Booking],
    buffer_minutes: int,
) -> list[Slot]:
    """
    Bookable ``(time, max_duration)`` pairs for ``day``, ordered by time.

    No returned mark is in ``blocked_marks`` for the same inputs, and every
    ``max_duration`` fits inside its range with the buffer applied. Callers
    asking for a specific duration still need ``slots_for_duration``.

    Raises:
        InvalidRange: If any range has a non-positive interval.
    """
    blocked = blocked_marks(day, list(bookings), rule.blocks, buffer_minutes)

    best: dict[time, int] = {}
    for time_range in rule.ranges:
        range_end = combine(day, time_range.end)
        for mark in generate_slots(time_range):
            if mark in blocked:
                continue
            finish = add_minutes(combine(day, mark), time_range.interval + buffer_minutes)
            if is_before(range_end, finish):
                continue
            if time_range.interval > best.get(mark, 0):
                best[mark] = time_range.interval

    slots = [Slot(time=mark, max_duration=best[mark]) for mark in sorted(best)]
    logger.debug("%s: %d slots (%d marks blocked)", day.isoformat(), len(slots), len(blocked))
    return slots


def slots_for_duration(slots: Iterable[Slot], duration: int) -> list[Slot]:
    """Slots long enough for a meeting of ``duration`` minutes."""
    return [slot for slot in slots if slot.max_duration >= duration]


def is_open_today(
    rule: AvailabilityRule,
    bookings: Iterable[Booking],
    buffer_minutes: int,
    now: datetime,
) -> bool:
    """UI signal: does the owner still have a slot later today?

    Not an admission rule; ``create`` re-checks the chosen slot itself.
    """
    today = now.date()
    return any(
        is_before(now, combine(today, slot.time))
        for slot in available_slots(today, rule, bookings, buffer_minutes)
    )


def availability_window(
    start_day: date,
    days: int,
    availability: Mapping[date, AvailabilityRule],
    bookings: Iterable[Booking],
    buffer_minutes: int,
) -> dict[date, list[Slot]]:
    """Resolve every day in ``[start_day, start_day + days)`` that has a rule.

    Days without a declared rule are left out; days whose slots are all
    taken map to an empty list.
    """
    bookings = list(bookings)
    window: dict[date, list[Slot]] = {}
    for offset in range(days):
        day = start_day + timedelta(days=offset)
        rule = availability.get(day)
        if rule is None:
            continue
        day_bookings = [b for b in bookings if b.date == day]
        window[day] = available_slots(day, rule, day_bookings, buffer_minutes)
    return window
