"""
In-process profile and booking stores.

In production these ports are backed by a document database; the in-memory
versions here keep the same contract (including the revision-checked write
used for admission) for development, demos and tests.
"""

import logging
import threading
from datetime import date
from typing import Any, Iterable, Optional, Union

from meetslot.ports import BookingStore, ProfileStore
from meetslot.schemas.availability_schema import AvailabilityRule, OwnerProfile, TimeRange
from meetslot.schemas.booking_schema import Booking
from meetslot.scheduling.slots import validate_rule

logger = logging.getLogger(__name__)


def normalize_availability_record(raw: Union[None, list, dict, AvailabilityRule]) -> AvailabilityRule:
    """
    Adapt a stored availability record to ``AvailabilityRule``.

    Older records are a bare list of ranges; current ones are a mapping with
    ``ranges`` and ``blocks``. Missing records become an empty rule.
    """
    if raw is None:
        return AvailabilityRule()
    if isinstance(raw, AvailabilityRule):
        return raw.model_copy(deep=True)
    if isinstance(raw, list):
        return AvailabilityRule(ranges=[TimeRange.model_validate(r) for r in raw])
    if isinstance(raw, dict):
        return AvailabilityRule.model_validate(
            {"ranges": raw.get("ranges") or [], "blocks": raw.get("blocks") or []}
        )
    raise TypeError(f"Unsupported availability record: {type(raw).__name__}")


class InMemoryProfileStore(ProfileStore):
    def __init__(self, profiles: Optional[Iterable[OwnerProfile]] = None) -> None:
        self._profiles: dict[str, OwnerProfile] = {}
        for profile in profiles or []:
            self.put(profile)

    def get_profile(self, owner_id: str) -> Optional[OwnerProfile]:
        profile = self._profiles.get(owner_id)
        return profile.model_copy(deep=True) if profile else None

    def put(self, profile: OwnerProfile) -> None:
        """Store a profile; every declared rule must pass ``validate_rule``."""
        for rule in profile.availability.values():
            validate_rule(rule)
        self._profiles[profile.owner_id] = profile.model_copy(deep=True)

    def set_availability(self, owner_id: str, day: date, record: Any) -> None:
        """Store one day's availability, accepting any historical record shape.

        Raises:
            InvalidRange: If a range in ``record`` has a non-positive interval.
        """
        profile = self._profiles[owner_id]
        rule = normalize_availability_record(record)
        validate_rule(rule)
        profile.availability[day] = rule
        logger.debug("Availability for %s on %s updated", owner_id, day.isoformat())

    def reset(self) -> None:
        self._profiles.clear()


class InMemoryBookingStore(BookingStore):
    """Bookings per owner, with a revision counter bumped on every write.

    Reads and writes hand out copies so callers never alias stored records.
    """

    def __init__(self) -> None:
        self._bookings: dict[str, dict[str, Booking]] = {}
        self._revisions: dict[str, int] = {}
        self._lock = threading.Lock()

    def get(self, owner_id: str, booking_id: str) -> Optional[Booking]:
        with self._lock:
            booking = self._bookings.get(owner_id, {}).get(booking_id)
            return booking.model_copy(deep=True) if booking else None

    def list_for_day(self, owner_id: str, day: date) -> list[Booking]:
        with self._lock:
            return [
                b.model_copy(deep=True)
                for b in self._bookings.get(owner_id, {}).values()
                if b.date == day
            ]

    def add(self, owner_id: str, booking: Booking) -> None:
        with self._lock:
            owner_bookings = self._bookings.setdefault(owner_id, {})
            if booking.id in owner_bookings:
                raise ValueError(f"Booking {booking.id} already exists for {owner_id}")
            self._write(owner_id, booking)

    def save(self, owner_id: str, booking: Booking) -> None:
        with self._lock:
            if booking.id not in self._bookings.get(owner_id, {}):
                raise KeyError(f"Booking {booking.id} does not exist for {owner_id}")
            self._write(owner_id, booking)

    def revision(self, owner_id: str) -> int:
        with self._lock:
            return self._revisions.get(owner_id, 0)

    def save_if_revision(self, owner_id: str, booking: Booking, expected_revision: int) -> bool:
        with self._lock:
            if self._revisions.get(owner_id, 0) != expected_revision:
                return False
            if booking.id not in self._bookings.get(owner_id, {}):
                raise KeyError(f"Booking {booking.id} does not exist for {owner_id}")
            self._write(owner_id, booking)
            return True

    def _write(self, owner_id: str, booking: Booking) -> None:
        # Caller holds the lock.
        self._bookings.setdefault(owner_id, {})[booking.id] = booking.model_copy(deep=True)
        self._revisions[owner_id] = self._revisions.get(owner_id, 0) + 1

    def reset(self) -> None:
        """Clear all bookings. Used by test fixtures for isolation."""
        with self._lock:
            self._bookings.clear()
            self._revisions.clear()
