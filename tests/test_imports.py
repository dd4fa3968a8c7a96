"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""


class TestSchemaImports:
    def test_import_booking_schema(self):
        from meetslot.schemas.booking_schema import ACTIVE_STATUSES, BookingStatus
        assert BookingStatus.ACCEPTED in ACTIVE_STATUSES
        assert BookingStatus.PENDING not in ACTIVE_STATUSES

    def test_import_event_schema(self):
        from meetslot.schemas.event_schema import LifecycleEventType
        assert LifecycleEventType.RESCHEDULED == "booking_rescheduled"

    def test_schema_package_reexports(self):
        from meetslot.schemas import AvailabilityRule, Booking, BookingEvent, TimeRange
        assert AvailabilityRule().ranges == []
        assert Booking is not None and BookingEvent is not None and TimeRange is not None


class TestSchedulingImports:
    def test_scheduling_package_reexports(self):
        from meetslot.scheduling import (
            BookingLifecycleManager,
            SchedulingError,
            SlotNoLongerAvailable,
            available_slots,
            copy_forward,
        )
        assert issubclass(SlotNoLongerAvailable, SchedulingError)
        assert callable(available_slots)
        assert callable(copy_forward)
        assert BookingLifecycleManager.TRANSITIONS

    def test_all_errors_share_base(self):
        from meetslot.scheduling.errors import (
            InvalidRange,
            InvalidTransitionError,
            NotFound,
            SchedulingError,
            ValidationError,
        )
        for error in (InvalidRange, InvalidTransitionError, NotFound, ValidationError):
            assert issubclass(error, SchedulingError)


class TestStoreImports:
    def test_stores_implement_ports(self):
        from meetslot.ports import BookingStore, ProfileStore
        from meetslot.stores import InMemoryBookingStore, InMemoryProfileStore
        assert isinstance(InMemoryBookingStore(), BookingStore)
        assert isinstance(InMemoryProfileStore(), ProfileStore)


class TestConfigImport:
    def test_import_config(self):
        from meetslot.config import settings
        assert settings.scheduling.occupancy_step_minutes >= 1
        assert settings.scheduling.admission_attempts >= 1
        assert settings.limits.max_invitees >= 1
        assert settings.app_base_url.startswith("http")
