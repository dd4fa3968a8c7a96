"""Tests for the in-memory stores and the availability record adapter."""

from datetime import time

import pytest

from meetslot.schemas.availability_schema import AvailabilityRule
from meetslot.schemas.booking_schema import BookingStatus
from meetslot.scheduling.errors import InvalidRange
from meetslot.stores.memory import (
    InMemoryBookingStore,
    InMemoryProfileStore,
    normalize_availability_record,
)
from tests.conftest import DAY, OWNER_ID, make_booking, make_profile, make_range


class TestNormalizeAvailabilityRecord:
    def test_bare_range_list(self):
        rule = normalize_availability_record([
            {"start": "09:00", "end": "12:00", "interval": 30},
        ])
        assert rule.ranges[0].start == time(9, 0)
        assert rule.blocks == []

    def test_ranges_and_blocks_mapping(self):
        rule = normalize_availability_record({
            "ranges": [{"start": "09:00", "end": "12:00", "interval": 30}],
            "blocks": [{"id": "b1", "title": "Lunch", "start": "12:00", "end": "13:00"}],
        })
        assert rule.blocks[0].title == "Lunch"

    def test_mapping_with_missing_keys(self):
        assert normalize_availability_record({"ranges": None}) == AvailabilityRule()

    def test_none_is_empty_rule(self):
        assert normalize_availability_record(None) == AvailabilityRule()

    def test_unsupported_shape(self):
        with pytest.raises(TypeError):
            normalize_availability_record("09:00-12:00")


class TestInMemoryProfileStore:
    def test_unknown_owner_is_none(self):
        assert InMemoryProfileStore().get_profile("nobody") is None

    def test_returns_copies(self):
        store = InMemoryProfileStore([make_profile()])
        profile = store.get_profile(OWNER_ID)
        profile.buffer_minutes = 99
        assert store.get_profile(OWNER_ID).buffer_minutes == 0

    def test_set_availability_accepts_legacy_shape(self):
        store = InMemoryProfileStore([make_profile()])
        store.set_availability(OWNER_ID, DAY, [{"start": "14:00", "end": "15:00", "interval": 15}])
        assert store.get_profile(OWNER_ID).rule_for(DAY).ranges[0].start == time(14, 0)

    def test_set_availability_rejects_zero_interval(self):
        store = InMemoryProfileStore([make_profile()])
        with pytest.raises(InvalidRange, match="positive interval"):
            store.set_availability(OWNER_ID, DAY, [{"start": "09:00", "end": "10:00", "interval": 0}])
        assert store.get_profile(OWNER_ID).rule_for(DAY).ranges[0].interval == 30

    def test_put_rejects_negative_interval(self):
        profile = make_profile(availability={
            DAY: AvailabilityRule(ranges=[make_range("09:00", "10:00", -15)]),
        })
        store = InMemoryProfileStore()
        with pytest.raises(InvalidRange):
            store.put(profile)
        assert store.get_profile(OWNER_ID) is None


class TestInMemoryBookingStore:
    def test_add_and_get(self):
        store = InMemoryBookingStore()
        store.add(OWNER_ID, make_booking("BK-1"))
        assert store.get(OWNER_ID, "BK-1").id == "BK-1"
        assert store.get("other-owner", "BK-1") is None

    def test_duplicate_add_rejected(self):
        store = InMemoryBookingStore()
        store.add(OWNER_ID, make_booking("BK-1"))
        with pytest.raises(ValueError):
            store.add(OWNER_ID, make_booking("BK-1"))

    def test_save_unknown_rejected(self):
        with pytest.raises(KeyError):
            InMemoryBookingStore().save(OWNER_ID, make_booking("BK-1"))

    def test_revision_bumps_on_every_write(self):
        store = InMemoryBookingStore()
        assert store.revision(OWNER_ID) == 0
        store.add(OWNER_ID, make_booking("BK-1"))
        store.save(OWNER_ID, make_booking("BK-1", status=BookingStatus.CANCELED))
        assert store.revision(OWNER_ID) == 2

    def test_conditional_write(self):
        store = InMemoryBookingStore()
        store.add(OWNER_ID, make_booking("BK-1", status=BookingStatus.PENDING))
        stale = store.revision(OWNER_ID)
        store.add(OWNER_ID, make_booking("BK-2", start="10:00"))

        assert not store.save_if_revision(OWNER_ID, make_booking("BK-1"), stale)
        assert store.get(OWNER_ID, "BK-1").status == BookingStatus.PENDING
        assert store.save_if_revision(OWNER_ID, make_booking("BK-1"), store.revision(OWNER_ID))
        assert store.get(OWNER_ID, "BK-1").status == BookingStatus.ACCEPTED

    def test_reads_do_not_alias_storage(self):
        store = InMemoryBookingStore()
        store.add(OWNER_ID, make_booking("BK-1"))
        store.get(OWNER_ID, "BK-1").subject = "changed"
        assert store.get(OWNER_ID, "BK-1").subject == "Intro call"

    def test_list_for_day(self):
        store = InMemoryBookingStore()
        store.add(OWNER_ID, make_booking("BK-1"))
        store.add(OWNER_ID, make_booking("BK-2", day=DAY.replace(day=DAY.day + 1)))
        assert [b.id for b in store.list_for_day(OWNER_ID, DAY)] == ["BK-1"]

    def test_reset(self):
        store = InMemoryBookingStore()
        store.add(OWNER_ID, make_booking("BK-1"))
        store.reset()
        assert store.list_for_day(OWNER_ID, DAY) == []
        assert store.revision(OWNER_ID) == 0
