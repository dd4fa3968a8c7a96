"""
Best-effort delivery of lifecycle events.

A lifecycle transition is committed before its event is handed to the
dispatcher. Dispatch failures are logged and reported as a degraded-delivery
warning; they never undo the transition.
"""

import logging
from typing import Optional

from meetslot.ports import NotificationDispatcher
from meetslot.schemas.availability_schema import OwnerProfile
from meetslot.schemas.booking_schema import Booking
from meetslot.schemas.event_schema import Attendee, BookingEvent, CalendarInvite, Recipient
from meetslot.timegrid import format_display

logger = logging.getLogger(__name__)


def deliver(dispatcher: NotificationDispatcher, event: BookingEvent) -> tuple[bool, Optional[str]]:
    """Hand ``event`` to the dispatcher exactly once.

    Returns:
        (delivered, warning) - warning is None when delivery succeeded.
    """
    try:
        dispatcher.dispatch(event)
    except Exception as exc:
        warning = (
            f"Notification for {event.event_type.value} on booking "
            f"{event.booking.id} was not delivered: {exc}"
        )
        logger.warning(warning)
        return False, warning
    logger.debug("Dispatched %s for booking %s", event.event_type.value, event.booking.id)
    return True, None


def recipients_for(booking: Booking) -> list[Recipient]:
    """Requester first, then every additional invitee."""
    recipients = [Recipient(name=booking.requester_name, email=booking.requester_email)]
    recipients.extend(
        Recipient(name=invitee.name, email=invitee.email, kind="invitee")
        for invitee in booking.additional_invitees
    )
    return recipients


def build_calendar_invite(booking: Booking, owner: OwnerProfile) -> CalendarInvite:
    """Calendar attachment payload for an accepted or rescheduled booking."""
    attendees = [
        Attendee(name=booking.requester_name, email=booking.requester_email),
        *(Attendee(name=inv.name, email=inv.email) for inv in booking.additional_invitees),
        Attendee(name=owner.name, email=owner.email, role="CHAIR"),
    ]
    return CalendarInvite(
        title=booking.subject or f"Meeting with {booking.requester_name}",
        description=(
            f"Meeting with {owner.name} on {format_display(booking.date, booking.time)}"
            f" ({booking.duration} minutes). For details, contact {owner.email}."
        ),
        location=booking.location or "To be confirmed",
        start=booking.start_at,
        end=booking.end_at,
        organizer_name=owner.name,
        organizer_email=owner.email,
        attendees=attendees,
    )


class RecordingDispatcher(NotificationDispatcher):
    """Collects events in memory instead of sending them."""

    def __init__(self) -> None:
        self.events: list[BookingEvent] = []

    def dispatch(self, event: BookingEvent) -> None:
        self.events.append(event)

    def of_type(self, event_cls: type) -> list[BookingEvent]:
        return [e for e in self.events if isinstance(e, event_cls)]

    def reset(self) -> None:
        self.events.clear()
