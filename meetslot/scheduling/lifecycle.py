"""
Booking lifecycle state machine.

Statuses: pending (initial), accepted, arranged, declined and canceled
(terminal). Every owner operation is an explicit entry in ``TRANSITIONS``;
anything else is rejected with the list of operations that are valid from
the booking's current status.

Admission (accept, reschedule) never trusts the snapshot the requester saw
when listing slots. Immediately before committing it re-reads the owner's
bookings, re-runs the overlap test and writes only if the owner's store
revision has not moved since that read. A lost race is retried a few times
and then reported as ``SlotNoLongerAvailable``.

Decline and cancel use the same revision-checked write without the overlap
test, so a status change made concurrently is never overwritten; the losing
operation sees the new status and fails with ``InvalidTransitionError``.

Usage:
    manager = BookingLifecycleManager(profiles, bookings, dispatcher)
    result = manager.create("owner-1", request)
    manager.accept("owner-1", result.booking.id)
"""

import uuid
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Callable, Optional

from meetslot.config import AppConfig, settings
from meetslot.logging_context import current_request_id, get_request_logger
from meetslot.notifications import build_calendar_invite, deliver, recipients_for
from meetslot.ports import BookingStore, Clock, NotificationDispatcher, ProfileStore, SystemClock
from meetslot.schemas.availability_schema import AvailabilityRule, OwnerProfile, TimeRange
from meetslot.schemas.booking_schema import Booking, BookingRequest, BookingStatus, Invitee
from meetslot.schemas.event_schema import (
    BookingAccepted,
    BookingCanceled,
    BookingCreated,
    BookingDeclined,
    BookingEvent,
    BookingRescheduled,
)
from meetslot.scheduling.availability import available_slots, slots_for_duration
from meetslot.scheduling.errors import (
    InvalidTransitionError,
    NotFound,
    SlotNoLongerAvailable,
    ValidationError,
)
from meetslot.scheduling.occupancy import find_conflicts
from meetslot.timegrid import (
    combine,
    format_date,
    format_time_of_day,
    is_before,
    is_valid_date,
    is_valid_time_of_day,
    parse_date,
    parse_time_of_day,
)
from meetslot.utils import is_valid_email, normalize_email, normalize_phone, sanitize_text

logger = get_request_logger(__name__)

MIN_PHONE_DIGITS = 7
MAX_PHONE_DIGITS = 15


class LifecycleOperation(str, Enum):
    """Owner-initiated operations on an existing booking."""
    ACCEPT = "accept"
    DECLINE = "decline"
    CANCEL = "cancel"
    RESCHEDULE = "reschedule"


@dataclass(frozen=True)
class Transition:
    """A single legal status change."""
    operation: LifecycleOperation
    from_status: BookingStatus
    to_status: BookingStatus


@dataclass
class TransitionResult:
    """Outcome of a committed operation.

    ``delivered`` is False when the notification dispatcher failed; the
    booking change itself stands regardless.
    """
    booking: Booking
    event: BookingEvent
    delivered: bool = True
    warning: Optional[str] = None


class BookingLifecycleManager:
    """
    Validates, admits and transitions bookings for calendar owners.

    The manager holds no booking state of its own: every call resolves the
    owner's profile and bookings from the injected stores, and every change
    is written back before its event is dispatched.
    """

    TRANSITIONS: list[Transition] = [
        Transition(LifecycleOperation.ACCEPT, BookingStatus.PENDING, BookingStatus.ACCEPTED),
        Transition(LifecycleOperation.DECLINE, BookingStatus.PENDING, BookingStatus.DECLINED),
        Transition(LifecycleOperation.CANCEL, BookingStatus.ACCEPTED, BookingStatus.CANCELED),
        Transition(LifecycleOperation.CANCEL, BookingStatus.ARRANGED, BookingStatus.CANCELED),
        # Rescheduling moves the slot, never the status.
        Transition(LifecycleOperation.RESCHEDULE, BookingStatus.ACCEPTED, BookingStatus.ACCEPTED),
    ]

    def __init__(
        self,
        profiles: ProfileStore,
        bookings: BookingStore,
        dispatcher: NotificationDispatcher,
        clock: Optional[Clock] = None,
        config: Optional[AppConfig] = None,
    ) -> None:
        self._profiles = profiles
        self._bookings = bookings
        self._dispatcher = dispatcher
        self._clock = clock or SystemClock()
        self._config = config or settings

    # --- Lookups ---

    def get(self, owner_id: str, booking_id: str) -> Booking:
        self._profile(owner_id)
        return self._booking(owner_id, booking_id)

    def _profile(self, owner_id: str) -> OwnerProfile:
        profile = self._profiles.get_profile(owner_id)
        if profile is None:
            raise NotFound(f"Calendar owner '{owner_id}' not found.")
        return profile

    def _booking(self, owner_id: str, booking_id: str) -> Booking:
        booking = self._bookings.get(owner_id, booking_id)
        if booking is None:
            raise NotFound(f"Booking '{booking_id}' not found for owner '{owner_id}'.")
        return booking

    def get_valid_operations(self, status: BookingStatus) -> list[LifecycleOperation]:
        """Return all operations valid from ``status``."""
        return [t.operation for t in self.TRANSITIONS if t.from_status == status]

    def _resolve(self, operation: LifecycleOperation, booking: Booking) -> Transition:
        for t in self.TRANSITIONS:
            if t.operation == operation and t.from_status == booking.status:
                return t
        valid = [op.value for op in self.get_valid_operations(booking.status)]
        raise InvalidTransitionError(
            f"Cannot {operation.value} booking {booking.id} in status "
            f"'{booking.status.value}'. Valid operations: {valid}"
        )

    def rebook_url(self, profile: OwnerProfile) -> str:
        return f"{self._config.app_base_url.rstrip('/')}/u/{profile.username}"

    # --- Requester operation ---

    def create(self, owner_id: str, request: BookingRequest) -> TransitionResult:
        """
        Admit a new booking request as ``pending``.

        Raises:
            NotFound: Unknown owner.
            ValidationError: Any malformed field, a past date/time, or a time
                that is not currently offered for the requested duration.
        """
        profile = self._profile(owner_id)
        now = self._clock.now()
        cleaned = self._validate_request(request, now)

        day = cleaned["date"]
        day_bookings = self._bookings.list_for_day(owner_id, day)
        offered = slots_for_duration(
            available_slots(day, profile.rule_for(day), day_bookings, profile.buffer_minutes),
            request.duration,
        )
        if cleaned["time"] not in {slot.time for slot in offered}:
            logger.info(
                "Rejected request for %s %s (%d min): slot not offered",
                request.date, request.time, request.duration,
            )
            raise ValidationError(
                {"time": f"{request.time} is not an available {request.duration}-minute slot"}
            )

        booking = Booking(
            id=f"BK-{uuid.uuid4().hex[:10].upper()}",
            date=day,
            time=cleaned["time"],
            duration=request.duration,
            status=BookingStatus.PENDING,
            requester_name=cleaned["requester_name"],
            requester_email=cleaned["requester_email"],
            requester_phone=cleaned["requester_phone"],
            subject=cleaned["subject"],
            location=cleaned["location"],
            additional_invitees=cleaned["additional_invitees"],
            created_at=now,
        )
        self._bookings.add(owner_id, booking)
        logger.info(
            "Booking created: %s for %s on %s at %s",
            booking.id, booking.requester_name, request.date, request.time,
        )

        event = BookingCreated(
            owner_id=owner_id,
            booking=booking,
            occurred_at=now,
            request_id=current_request_id(),
            owner_email=profile.email,
        )
        return self._emit(event)

    def _validate_request(self, request: BookingRequest, now: datetime) -> dict:
        """Check every field, collecting all problems before raising."""
        limits = self._config.limits
        errors: dict[str, str] = {}

        name = sanitize_text(request.requester_name)
        if not name:
            errors["requester_name"] = "required"
        elif len(name) > limits.max_name_length:
            errors["requester_name"] = f"longer than {limits.max_name_length} characters"

        email = request.requester_email.strip()
        if not is_valid_email(email):
            errors["requester_email"] = "not a valid email address"

        subject = sanitize_text(request.subject)
        if not subject:
            errors["subject"] = "required"
        elif len(subject) > limits.max_subject_length:
            errors["subject"] = f"longer than {limits.max_subject_length} characters"

        location = sanitize_text(request.location)
        if len(location) > limits.max_location_length:
            errors["location"] = f"longer than {limits.max_location_length} characters"

        options = self._config.scheduling.duration_options
        if request.duration not in options:
            errors["duration"] = f"must be one of {list(options)}"

        phone = None
        if request.requester_phone and request.requester_phone.strip():
            phone = normalize_phone(request.requester_phone)
            digits = len(phone.lstrip("+"))
            if not MIN_PHONE_DIGITS <= digits <= MAX_PHONE_DIGITS:
                errors["requester_phone"] = "not a valid phone number"

        day: Optional[date] = None
        if not is_valid_date(request.date):
            errors["date"] = "expected YYYY-MM-DD"
        else:
            day = parse_date(request.date)
            if day < now.date():
                errors["date"] = "is in the past"

        start: Optional[time] = None
        if not is_valid_time_of_day(request.time):
            errors["time"] = "expected HH:MM"
        else:
            start = parse_time_of_day(request.time)
            if day == now.date() and not is_before(now, combine(day, start)):
                errors["time"] = "has already passed"

        invitees = self._validate_invitees(request.additional_invitees, email, errors)

        if errors:
            logger.info("Booking request rejected: %s", sorted(errors))
            raise ValidationError(errors)

        return {
            "requester_name": name,
            "requester_email": email,
            "requester_phone": phone,
            "subject": subject,
            "location": location,
            "date": day,
            "time": start,
            "additional_invitees": invitees,
        }

    def _validate_invitees(
        self, invitees: list[Invitee], requester_email: str, errors: dict[str, str]
    ) -> list[Invitee]:
        max_invitees = self._config.limits.max_invitees
        if len(invitees) > max_invitees:
            errors["additional_invitees"] = f"at most {max_invitees} invitees allowed"

        seen = {normalize_email(requester_email)}
        cleaned = []
        for index, invitee in enumerate(invitees):
            key = f"additional_invitees[{index}]"
            name = sanitize_text(invitee.name)
            email = invitee.email.strip()
            if not name:
                errors[f"{key}.name"] = "required"
            if not is_valid_email(email):
                errors[f"{key}.email"] = "not a valid email address"
            elif normalize_email(email) in seen:
                errors[f"{key}.email"] = "duplicate email in this booking"
            seen.add(normalize_email(email))
            cleaned.append(Invitee(name=name, email=email))
        return cleaned

    # --- Owner operations ---

    def accept(self, owner_id: str, booking_id: str) -> TransitionResult:
        """
        Move a pending booking to accepted after a fresh overlap check.

        Raises:
            NotFound: Unknown owner or booking.
            InvalidTransitionError: Booking is not pending.
            SlotNoLongerAvailable: Another accepted booking overlaps; the
                booking stays pending.
        """
        profile = self._profile(owner_id)
        booking = self._booking(owner_id, booking_id)
        transition = self._resolve(LifecycleOperation.ACCEPT, booking)

        _, updated = self._commit(
            owner_id,
            booking,
            lambda current: current.model_copy(update={"status": transition.to_status}),
            admission=self._admission_check(profile),
        )
        logger.info("Booking accepted: %s on %s at %s", updated.id,
                    format_date(updated.date), format_time_of_day(updated.time))

        event = BookingAccepted(
            owner_id=owner_id,
            booking=updated,
            occurred_at=self._clock.now(),
            request_id=current_request_id(),
            invite=build_calendar_invite(updated, profile),
            recipients=recipients_for(updated),
        )
        return self._emit(event)

    def decline(self, owner_id: str, booking_id: str) -> TransitionResult:
        profile = self._profile(owner_id)
        booking = self._booking(owner_id, booking_id)
        transition = self._resolve(LifecycleOperation.DECLINE, booking)

        _, updated = self._commit(
            owner_id,
            booking,
            lambda current: current.model_copy(update={"status": transition.to_status}),
        )
        logger.info("Booking declined: %s", booking.id)

        event = BookingDeclined(
            owner_id=owner_id,
            booking=updated,
            occurred_at=self._clock.now(),
            request_id=current_request_id(),
            rebook_url=self.rebook_url(profile),
        )
        return self._emit(event)

    def cancel(self, owner_id: str, booking_id: str, note: Optional[str] = None) -> TransitionResult:
        """Cancel an accepted or arranged booking, freeing its slot."""
        profile = self._profile(owner_id)
        booking = self._booking(owner_id, booking_id)
        transition = self._resolve(LifecycleOperation.CANCEL, booking)

        cleaned_note = sanitize_text(note) if note else None
        _, updated = self._commit(
            owner_id,
            booking,
            lambda current: current.model_copy(update={
                "status": transition.to_status,
                "cancellation_note": cleaned_note or None,
            }),
        )
        logger.info("Booking canceled: %s", booking.id)

        event = BookingCanceled(
            owner_id=owner_id,
            booking=updated,
            occurred_at=self._clock.now(),
            request_id=current_request_id(),
            cancellation_note=updated.cancellation_note,
            rebook_url=self.rebook_url(profile),
            recipients=recipients_for(updated),
        )
        return self._emit(event)

    def reschedule(
        self,
        owner_id: str,
        booking_id: str,
        new_date: str,
        new_time: str,
        extra_range: Optional[TimeRange] = None,
    ) -> TransitionResult:
        """
        Move an accepted booking to a new slot; status stays accepted.

        ``extra_range`` lets the caller offer a one-off range for this move
        when the owner's declared availability has nothing suitable. It is
        used for this check only and never persisted.

        Raises:
            NotFound: Unknown owner or booking.
            InvalidTransitionError: Booking is not accepted.
            ValidationError: Malformed or past date/time, or a time outside
                the owner's availability.
            SlotNoLongerAvailable: The new slot is taken by another booking.
        """
        profile = self._profile(owner_id)
        booking = self._booking(owner_id, booking_id)
        self._resolve(LifecycleOperation.RESCHEDULE, booking)
        now = self._clock.now()

        errors: dict[str, str] = {}
        if not is_valid_date(new_date):
            errors["new_date"] = "expected YYYY-MM-DD"
        if not is_valid_time_of_day(new_time):
            errors["new_time"] = "expected HH:MM"
        if errors:
            raise ValidationError(errors)

        day = parse_date(new_date)
        start = parse_time_of_day(new_time)
        if not is_before(now, combine(day, start)):
            raise ValidationError({"new_time": "cannot reschedule to a time in the past"})

        rule = profile.rule_for(day)
        if extra_range is not None:
            rule = AvailabilityRule(ranges=[*rule.ranges, extra_range], blocks=rule.blocks)

        def check_offered(day_bookings: list[Booking]) -> None:
            others = [b for b in day_bookings if b.id != booking.id]
            free = slots_for_duration(
                available_slots(day, rule, others, profile.buffer_minutes), booking.duration
            )
            if start in {slot.time for slot in free}:
                return
            declared = slots_for_duration(
                available_slots(day, rule, [], profile.buffer_minutes), booking.duration
            )
            if start in {slot.time for slot in declared}:
                raise SlotNoLongerAvailable(
                    f"{new_date} {new_time} is already taken.",
                    conflicting_ids=[b.id for b in others if b.is_active()],
                )
            raise ValidationError(
                {"new_time": f"{new_time} is not within the owner's availability on {new_date}"}
            )

        conflict_check = self._admission_check(profile)

        def admit(candidate: Booking, day_bookings: list[Booking]) -> None:
            check_offered(day_bookings)
            conflict_check(candidate, day_bookings)

        previous, updated = self._commit(
            owner_id,
            booking,
            lambda current: current.model_copy(
                update={"date": day, "time": start, "rescheduled_at": now}
            ),
            admission=admit,
        )
        logger.info(
            "Booking rescheduled: %s from %s %s to %s %s", booking.id,
            format_date(previous.date), format_time_of_day(previous.time), new_date, new_time,
        )

        event = BookingRescheduled(
            owner_id=owner_id,
            booking=updated,
            occurred_at=now,
            request_id=current_request_id(),
            previous_date=previous.date,
            previous_time=previous.time,
            invite=build_calendar_invite(updated, profile),
            recipients=recipients_for(updated),
        )
        return self._emit(event)

    # --- Internals ---

    def _admission_check(self, profile: OwnerProfile) -> Callable[[Booking, list[Booking]], None]:
        """Overlap test run against a fresh read of the candidate's day."""

        def check(candidate: Booking, day_bookings: list[Booking]) -> None:
            conflicts = find_conflicts(
                candidate.date,
                candidate.time,
                candidate.duration,
                day_bookings,
                profile.buffer_minutes,
                exclude_id=candidate.id,
            )
            if conflicts:
                ids = [b.id for b in conflicts]
                logger.info("Admission of %s refused, overlaps %s", candidate.id, ids)
                raise SlotNoLongerAvailable(
                    f"Slot {format_date(candidate.date)} {format_time_of_day(candidate.time)} "
                    "is no longer available.",
                    conflicting_ids=ids,
                )

        return check

    def _commit(
        self,
        owner_id: str,
        booking: Booking,
        build: Callable[[Booking], Booking],
        admission: Optional[Callable[[Booking, list[Booking]], None]] = None,
    ) -> tuple[Booking, Booking]:
        """
        Re-read ``booking``, rebuild the change on top of it and write it only
        if the owner's revision has not moved since that read.

        ``admission`` runs against the candidate's day before each write
        attempt. Returns the stored booking the change was built from and the
        written candidate.

        Raises:
            InvalidTransitionError: The booking left its expected status
                meanwhile, or (without ``admission``) retries ran out.
            SlotNoLongerAvailable: ``admission`` refused the slot, or retries
                ran out while admitting.
        """
        attempts = self._config.scheduling.admission_attempts
        for attempt in range(1, attempts + 1):
            revision = self._bookings.revision(owner_id)

            current = self._booking(owner_id, booking.id)
            if current.status != booking.status:
                raise InvalidTransitionError(
                    f"Booking {booking.id} changed to '{current.status.value}' "
                    "while it was being updated."
                )

            candidate = build(current)
            if admission is not None:
                admission(candidate, self._bookings.list_for_day(owner_id, candidate.date))

            if self._bookings.save_if_revision(owner_id, candidate, revision):
                return current, candidate
            logger.debug(
                "Revision moved while updating %s (attempt %d/%d)", booking.id, attempt, attempts
            )

        message = (
            f"Could not confirm booking {booking.id} after {attempts} attempts; "
            "the calendar kept changing."
        )
        if admission is not None:
            raise SlotNoLongerAvailable(message)
        raise InvalidTransitionError(message)

    def _emit(self, event: BookingEvent) -> TransitionResult:
        delivered, warning = deliver(self._dispatcher, event)
        return TransitionResult(
            booking=event.booking, event=event, delivered=delivered, warning=warning
        )
