"""Fill empty upcoming days from the same weekday of a prior week."""

import logging
from datetime import date, timedelta
from typing import Mapping, Optional

from meetslot.config import settings
from meetslot.schemas.availability_schema import AvailabilityRule

logger = logging.getLogger(__name__)


def copy_forward(
    availability: Mapping[date, AvailabilityRule],
    today: date,
    offset_days: Optional[int] = None,
    window_days: Optional[int] = None,
) -> dict[date, AvailabilityRule]:
    """
    Build a patch that copies ranges into days that have none.

    For each day in ``[today, today + window_days)`` whose rule is missing or
    has no ranges, the ranges of ``day - offset_days`` are copied verbatim
    (that reference may itself have been filled earlier in the same pass).
    Blocks already declared on the target day are kept; the reference day's
    blocks are not copied. Days with at least one range are never touched.

    Returns:
        Only the days that change. The caller persists the patch.
    """
    if offset_days is None:
        offset_days = settings.scheduling.copy_forward_offset_days
    if window_days is None:
        window_days = settings.scheduling.copy_forward_window_days

    patch: dict[date, AvailabilityRule] = {}
    for offset in range(window_days):
        day = today + timedelta(days=offset)
        current = availability.get(day)
        if current is not None and current.has_ranges():
            continue

        # A day filled earlier in this pass can be the reference for a later one.
        reference_day = day - timedelta(days=offset_days)
        reference = patch.get(reference_day) or availability.get(reference_day)
        if reference is None or not reference.has_ranges():
            continue

        patch[day] = AvailabilityRule(
            ranges=[r.model_copy() for r in reference.ranges],
            blocks=[b.model_copy() for b in current.blocks] if current else [],
        )

    logger.info("Copy-forward filled %d of %d days", len(patch), window_days)
    return patch


def apply_patch(
    availability: Mapping[date, AvailabilityRule],
    patch: Mapping[date, AvailabilityRule],
) -> dict[date, AvailabilityRule]:
    """Merged copy of ``availability`` with ``patch`` laid over it."""
    merged = dict(availability)
    merged.update(patch)
    return merged
