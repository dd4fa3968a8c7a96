from meetslot.schemas.availability_schema import (
    AvailabilityRule,
    OwnerProfile,
    Slot,
    TimeBlock,
    TimeRange,
)
from meetslot.schemas.booking_schema import Booking, BookingRequest, BookingStatus, Invitee
from meetslot.schemas.event_schema import BookingEvent, CalendarInvite, LifecycleEventType

__all__ = [
    "AvailabilityRule",
    "OwnerProfile",
    "Slot",
    "TimeBlock",
    "TimeRange",
    "Booking",
    "BookingRequest",
    "BookingStatus",
    "Invitee",
    "BookingEvent",
    "CalendarInvite",
    "LifecycleEventType",
]
