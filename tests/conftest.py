"""Shared test fixtures and helpers."""

from datetime import date, datetime, time
from typing import Optional

import pytest

from meetslot.notifications import RecordingDispatcher
from meetslot.ports import FixedClock
from meetslot.schemas.availability_schema import (
    AvailabilityRule,
    OwnerProfile,
    TimeBlock,
    TimeRange,
)
from meetslot.schemas.booking_schema import Booking, BookingRequest, BookingStatus, Invitee
from meetslot.scheduling.lifecycle import BookingLifecycleManager
from meetslot.stores.memory import InMemoryBookingStore, InMemoryProfileStore

OWNER_ID = "owner-1"
NOW = datetime(2025, 3, 10, 8, 0)  # Monday morning
TODAY = NOW.date()
DAY = date(2025, 3, 11)  # Tuesday, the day most tests book against


def make_range(start: str, end: str, interval: int = 30) -> TimeRange:
    return TimeRange(start=start, end=end, interval=interval)


def make_block(start: str, end: str, title: str = "Lunch", block_id: str = "blk-1") -> TimeBlock:
    return TimeBlock(id=block_id, title=title, start=start, end=end)


def make_booking(
    booking_id: str = "BK-TEST",
    day: date = DAY,
    start: str = "09:00",
    duration: int = 30,
    status: BookingStatus = BookingStatus.ACCEPTED,
    invitees: Optional[list[Invitee]] = None,
) -> Booking:
    """Helper to create a Booking with sensible defaults."""
    return Booking(
        id=booking_id,
        date=day,
        time=time.fromisoformat(start),
        duration=duration,
        status=status,
        requester_name="Jane Doe",
        requester_email="jane@example.com",
        subject="Intro call",
        location="Video call",
        additional_invitees=invitees or [],
        created_at=NOW,
    )


def make_request(
    day: str = "2025-03-11",
    start: str = "09:00",
    duration: int = 30,
    **overrides,
) -> BookingRequest:
    """Helper to create a valid BookingRequest; keyword overrides replace fields."""
    fields = {
        "date": day,
        "time": start,
        "duration": duration,
        "requester_name": "Jane Doe",
        "requester_email": "jane@example.com",
        "subject": "Intro call",
        "location": "Video call",
    }
    fields.update(overrides)
    return BookingRequest(**fields)


def make_profile(
    buffer_minutes: int = 0,
    availability: Optional[dict[date, AvailabilityRule]] = None,
) -> OwnerProfile:
    if availability is None:
        availability = {DAY: AvailabilityRule(ranges=[make_range("09:00", "12:00", 30)])}
    return OwnerProfile(
        owner_id=OWNER_ID,
        name="Olivia Owner",
        email="olivia@example.com",
        username="olivia",
        buffer_minutes=buffer_minutes,
        availability=availability,
    )


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def profile_store():
    return InMemoryProfileStore([make_profile()])


@pytest.fixture
def booking_store():
    return InMemoryBookingStore()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def manager(profile_store, booking_store, dispatcher, clock):
    return BookingLifecycleManager(profile_store, booking_store, dispatcher, clock=clock)
