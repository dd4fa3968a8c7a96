"""Errors raised by the scheduling core.

Every error is raised before anything is written, so catching one never
leaves a half-updated booking behind.
"""

from typing import Iterable, Optional


class SchedulingError(Exception):
    """Base class for all scheduling core errors."""


class InvalidRange(SchedulingError):
    """Raised when a time range cannot be expanded (non-positive interval)."""


class ValidationError(SchedulingError):
    """Raised when a booking request is malformed or incomplete.

    ``fields`` maps each offending field name to the reason it was rejected.
    """

    def __init__(self, fields: dict[str, str]) -> None:
        self.fields = dict(fields)
        names = ", ".join(sorted(self.fields))
        super().__init__(f"Invalid booking request - check fields: {names}.")


class SlotNoLongerAvailable(SchedulingError):
    """Raised when the admission re-check finds the slot already taken."""

    def __init__(self, message: str, conflicting_ids: Optional[Iterable[str]] = None) -> None:
        self.conflicting_ids = list(conflicting_ids or [])
        super().__init__(message)


class NotFound(SchedulingError):
    """Raised when an owner or booking does not exist."""


class InvalidTransitionError(SchedulingError):
    """Raised when an operation is not legal from the booking's current status."""
