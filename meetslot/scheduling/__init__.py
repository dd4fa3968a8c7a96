from meetslot.scheduling.availability import (
    availability_window,
    available_slots,
    is_open_today,
    slots_for_duration,
)
from meetslot.scheduling.copy_forward import apply_patch, copy_forward
from meetslot.scheduling.errors import (
    InvalidRange,
    InvalidTransitionError,
    NotFound,
    SchedulingError,
    SlotNoLongerAvailable,
    ValidationError,
)
from meetslot.scheduling.lifecycle import (
    BookingLifecycleManager,
    LifecycleOperation,
    TransitionResult,
)
from meetslot.scheduling.occupancy import blocked_marks, find_conflicts
from meetslot.scheduling.slots import generate_slots, validate_rule

__all__ = [
    "availability_window",
    "available_slots",
    "is_open_today",
    "slots_for_duration",
    "apply_patch",
    "copy_forward",
    "InvalidRange",
    "InvalidTransitionError",
    "NotFound",
    "SchedulingError",
    "SlotNoLongerAvailable",
    "ValidationError",
    "BookingLifecycleManager",
    "LifecycleOperation",
    "TransitionResult",
    "blocked_marks",
    "find_conflicts",
    "generate_slots",
    "validate_rule",
]
