"""Availability data models: ranges, blackout blocks, rules and resolved slots."""

from datetime import date, time

from pydantic import BaseModel, EmailStr, Field

from meetslot.config import settings


class TimeRange(BaseModel):
    """Owner-declared window of a day, expanded into slots every ``interval`` minutes.

    A range with ``start >= end`` is accepted and simply offers nothing.
    """
    start: time
    end: time
    interval: int


class TimeBlock(BaseModel):
    """Explicit blackout window (e.g. "Lunch"), independent of bookings."""
    id: str
    title: str = ""
    start: time
    end: time


class AvailabilityRule(BaseModel):
    """Everything the owner declared for one calendar day."""
    ranges: list[TimeRange] = Field(default_factory=list)
    blocks: list[TimeBlock] = Field(default_factory=list)

    def has_ranges(self) -> bool:
        return bool(self.ranges)


class Slot(BaseModel):
    """A bookable start time and the longest duration offered there."""
    time: time
    max_duration: int


class OwnerProfile(BaseModel):
    """Calendar owner as resolved from the profile store."""
    owner_id: str
    name: str
    email: EmailStr
    username: str
    buffer_minutes: int = Field(
        default_factory=lambda: settings.scheduling.default_buffer_minutes, ge=0
    )
    availability: dict[date, AvailabilityRule] = Field(default_factory=dict)

    def rule_for(self, day: date) -> AvailabilityRule:
        """Rule for ``day``, or an empty rule when the owner declared nothing."""
        return self.availability.get(day) or AvailabilityRule()
