"""Booking data models."""

from datetime import date, datetime, time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from meetslot.timegrid import add_minutes, combine


class BookingStatus(str, Enum):
    """Lifecycle status of a booking."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    CANCELED = "canceled"
    ARRANGED = "arranged"


# Statuses that hold their slot on the owner's calendar.
ACTIVE_STATUSES = frozenset({BookingStatus.ACCEPTED, BookingStatus.ARRANGED})


class Invitee(BaseModel):
    """Additional attendee named by the requester."""
    name: str
    email: str


class BookingRequest(BaseModel):
    """Raw booking request as submitted by a requester.

    Date and time stay as strings here; the lifecycle manager validates them
    and reports every bad field at once.
    """
    date: str
    time: str
    duration: int
    requester_name: str
    requester_email: str
    subject: str
    location: str = ""
    requester_phone: Optional[str] = None
    additional_invitees: list[Invitee] = Field(default_factory=list)


class Booking(BaseModel):
    """A meeting request against one owner's calendar."""
    id: str
    date: date
    time: time
    duration: int
    status: BookingStatus = BookingStatus.PENDING
    requester_name: str
    requester_email: EmailStr
    requester_phone: Optional[str] = None
    subject: str
    location: str = ""
    additional_invitees: list[Invitee] = Field(default_factory=list)
    created_at: datetime = Field(frozen=True)
    cancellation_note: Optional[str] = None
    rescheduled_at: Optional[datetime] = None

    @property
    def start_at(self) -> datetime:
        return combine(self.date, self.time)

    @property
    def end_at(self) -> datetime:
        return add_minutes(self.start_at, self.duration)

    def is_active(self) -> bool:
        """True while the booking occupies its slot."""
        return self.status in ACTIVE_STATUSES
