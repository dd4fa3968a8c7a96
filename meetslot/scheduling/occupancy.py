"""
Occupancy calculation.

Two views of the same question, "what is already taken on this day":

- ``blocked_marks`` walks accepted bookings (extended by buffer time) and
  blackout blocks in fixed 15-minute steps and returns the visited marks.
  Start times produced by a finer slot interval are only checked at this
  granularity.
- ``find_conflicts`` is the exact interval test used at admission time, where
  two bookings conflict when their buffer-extended windows intersect.
"""

from datetime import date, datetime, time
from typing import Iterable, Optional

from meetslot.config import settings
from meetslot.schemas.availability_schema import TimeBlock
from meetslot.schemas.booking_schema import Booking
from meetslot.timegrid import add_minutes, combine, is_before


def _walk(start: datetime, end: datetime, step: int, into: set[time]) -> None:
    current = start
    while is_before(current, end):
        into.add(current.time())
        current = add_minutes(current, step)


def blocked_marks(
    day: date,
    bookings: Iterable[Booking],
    blocks: Iterable[TimeBlock],
    buffer_minutes: int,
    step: Optional[int] = None,
) -> set[time]:
    """Marks on ``day`` that cannot start a new booking."""
    step = step or settings.scheduling.occupancy_step_minutes
    blocked: set[time] = set()

    for booking in bookings:
        if booking.date != day or not booking.is_active():
            continue
        start = booking.start_at
        end = add_minutes(start, booking.duration + buffer_minutes)
        # Stop at midnight; the next day's marks are not this day's business.
        end = min(end, combine(day, time.max))
        _walk(start, end, step, blocked)

    for block in blocks:
        _walk(combine(day, block.start), combine(day, block.end), step, blocked)

    return blocked


def occupancy_window(
    day: date, start: time, duration: int, buffer_minutes: int
) -> tuple[datetime, datetime]:
    """``[start, start + duration + buffer)`` as concrete datetimes."""
    begin = combine(day, start)
    return begin, add_minutes(begin, duration + buffer_minutes)


def find_conflicts(
    day: date,
    start: time,
    duration: int,
    bookings: Iterable[Booking],
    buffer_minutes: int,
    exclude_id: Optional[str] = None,
) -> list[Booking]:
    """
    Accepted/arranged bookings whose buffer-extended window overlaps the candidate.

    Args:
        day, start, duration: the candidate slot.
        bookings: current bookings for the owner (any day, any status).
        buffer_minutes: the owner's post-meeting buffer.
        exclude_id: a booking to ignore, typically the one being moved.
    """
    cand_start, cand_end = occupancy_window(day, start, duration, buffer_minutes)

    conflicts = []
    for other in bookings:
        if other.id == exclude_id or other.date != day or not other.is_active():
            continue
        other_start, other_end = occupancy_window(
            other.date, other.time, other.duration, buffer_minutes
        )
        if is_before(cand_start, other_end) and is_before(other_start, cand_end):
            conflicts.append(other)
    return conflicts
