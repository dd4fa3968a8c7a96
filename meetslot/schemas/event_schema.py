"""Lifecycle events emitted for the external notification dispatcher."""

from datetime import date, datetime, time
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from meetslot.schemas.booking_schema import Booking


class LifecycleEventType(str, Enum):
    CREATED = "booking_created"
    ACCEPTED = "booking_accepted"
    DECLINED = "booking_declined"
    CANCELED = "booking_canceled"
    RESCHEDULED = "booking_rescheduled"


class Attendee(BaseModel):
    name: str
    email: str
    role: str = "REQ-PARTICIPANT"


class CalendarInvite(BaseModel):
    """Attachment payload; rendering it to a calendar file is the dispatcher's job."""
    title: str
    description: str = ""
    location: str = ""
    start: datetime
    end: datetime
    organizer_name: str
    organizer_email: str
    attendees: list[Attendee] = Field(default_factory=list)


class Recipient(BaseModel):
    name: str
    email: str
    kind: Literal["requester", "invitee", "owner"] = "requester"


class LifecycleEvent(BaseModel):
    """Fields shared by every lifecycle event."""
    event_type: LifecycleEventType
    owner_id: str
    booking: Booking
    occurred_at: datetime
    request_id: Optional[str] = None


class BookingCreated(LifecycleEvent):
    event_type: Literal[LifecycleEventType.CREATED] = LifecycleEventType.CREATED
    owner_email: str


class BookingAccepted(LifecycleEvent):
    event_type: Literal[LifecycleEventType.ACCEPTED] = LifecycleEventType.ACCEPTED
    invite: CalendarInvite
    recipients: list[Recipient] = Field(default_factory=list)


class BookingDeclined(LifecycleEvent):
    event_type: Literal[LifecycleEventType.DECLINED] = LifecycleEventType.DECLINED
    rebook_url: str


class BookingCanceled(LifecycleEvent):
    event_type: Literal[LifecycleEventType.CANCELED] = LifecycleEventType.CANCELED
    cancellation_note: Optional[str] = None
    rebook_url: str
    recipients: list[Recipient] = Field(default_factory=list)


class BookingRescheduled(LifecycleEvent):
    event_type: Literal[LifecycleEventType.RESCHEDULED] = LifecycleEventType.RESCHEDULED
    previous_date: date
    previous_time: time
    invite: CalendarInvite
    recipients: list[Recipient] = Field(default_factory=list)


BookingEvent = Union[
    BookingCreated, BookingAccepted, BookingDeclined, BookingCanceled, BookingRescheduled
]
