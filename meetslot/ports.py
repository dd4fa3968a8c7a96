"""
Collaborator interfaces consumed by the scheduling core.

Storage, notification delivery and the clock live outside the core. Each is
described here as an abstract port; ``meetslot.stores.memory`` provides
in-process implementations for development and tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from meetslot.schemas.availability_schema import OwnerProfile
    from meetslot.schemas.booking_schema import Booking
    from meetslot.schemas.event_schema import BookingEvent


class ProfileStore(ABC):
    @abstractmethod
    def get_profile(self, owner_id: str) -> Optional[OwnerProfile]:
        """Resolve an owner to its current availability and buffer, or None."""
        raise NotImplementedError


class BookingStore(ABC):
    """Booking persistence with a per-owner revision for conditional writes.

    ``revision`` must change whenever any booking of the owner is written, so
    ``save_if_revision`` can refuse a commit based on a stale read.
    """

    @abstractmethod
    def get(self, owner_id: str, booking_id: str) -> Optional[Booking]:
        raise NotImplementedError

    @abstractmethod
    def list_for_day(self, owner_id: str, day: date) -> list[Booking]:
        raise NotImplementedError

    @abstractmethod
    def add(self, owner_id: str, booking: Booking) -> None:
        raise NotImplementedError

    @abstractmethod
    def save(self, owner_id: str, booking: Booking) -> None:
        """Unconditional update of an existing booking."""
        raise NotImplementedError

    @abstractmethod
    def revision(self, owner_id: str) -> int:
        raise NotImplementedError

    @abstractmethod
    def save_if_revision(self, owner_id: str, booking: Booking, expected_revision: int) -> bool:
        """Update only if the owner's revision still equals ``expected_revision``.

        Returns False (and writes nothing) when another write got there first.
        """
        raise NotImplementedError


class NotificationDispatcher(ABC):
    @abstractmethod
    def dispatch(self, event: BookingEvent) -> None:
        """Compose and send messages for a lifecycle event. May raise."""
        raise NotImplementedError


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        """Current owner-local wall-clock time (naive)."""
        raise NotImplementedError


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now()


class FixedClock(Clock):
    """Clock frozen at a given instant until ``set`` is called."""

    def __init__(self, current: datetime) -> None:
        self._current = current

    def now(self) -> datetime:
        return self._current

    def set(self, current: datetime) -> None:
        self._current = current
