"""
Slot generation.

Expands an owner-declared ``TimeRange`` into its ordered candidate start
times. The walk is anchored to a fixed reference day so stepping past
midnight simply ends the walk instead of wrapping around.
"""

import logging
from datetime import time

from meetslot.schemas.availability_schema import AvailabilityRule, TimeRange
from meetslot.scheduling.errors import InvalidRange
from meetslot.timegrid import REFERENCE_DAY, add_minutes, combine, is_before

logger = logging.getLogger(__name__)


def generate_slots(time_range: TimeRange) -> list[time]:
    """
    Candidate start times for a range.

    Emits ``start``, ``start + interval``, ... while strictly before ``end``.
    A range with ``start >= end`` yields nothing.

    Raises:
        InvalidRange: If ``interval`` is not a positive number of minutes.
    """
    if time_range.interval <= 0:
        raise InvalidRange(
            f"Range {time_range.start:%H:%M}-{time_range.end:%H:%M} has "
            f"non-positive interval {time_range.interval}"
        )

    current = combine(REFERENCE_DAY, time_range.start)
    end = combine(REFERENCE_DAY, time_range.end)

    marks: list[time] = []
    while is_before(current, end):
        marks.append(current.time())
        current = add_minutes(current, time_range.interval)
    return marks


def validate_rule(rule: AvailabilityRule) -> None:
    """Reject a rule at configuration time if any of its ranges is malformed."""
    for index, time_range in enumerate(rule.ranges):
        if time_range.interval <= 0:
            raise InvalidRange(
                f"Range #{index} ({time_range.start:%H:%M}-{time_range.end:%H:%M}) "
                f"must have a positive interval, got {time_range.interval}"
            )
        if time_range.start >= time_range.end:
            logger.debug("Range #%d is empty and offers no slots", index)
