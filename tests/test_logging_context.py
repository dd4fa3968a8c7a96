"""Tests for request-id propagation into log records and events."""

import contextvars
import logging

from meetslot.logging_context import (
    RequestIdFilter,
    current_request_id,
    get_request_id,
    get_request_logger,
    request_scope,
    set_request_id,
)
from tests.conftest import OWNER_ID, make_request


def in_fresh_context(fn, *args):
    return contextvars.copy_context().run(fn, *args)


class TestRequestId:
    def test_default_is_placeholder(self):
        def check():
            assert get_request_id() == "NO_REQUEST_ID"
            assert current_request_id() is None

        in_fresh_context(check)

    def test_set_and_read(self):
        def check():
            set_request_id("REQ-1")
            assert get_request_id() == "REQ-1"
            assert current_request_id() == "REQ-1"

        in_fresh_context(check)

    def test_scope_restores_previous_id(self):
        def check():
            set_request_id("REQ-OUTER")
            with request_scope("REQ-INNER") as bound:
                assert bound == "REQ-INNER"
                assert current_request_id() == "REQ-INNER"
            assert current_request_id() == "REQ-OUTER"

        in_fresh_context(check)

    def test_filter_stamps_records(self):
        with request_scope("REQ-2"):
            record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
            assert RequestIdFilter().filter(record)
        assert record.request_id == "REQ-2"

    def test_filter_attached_once(self):
        logger = get_request_logger("meetslot.tests.request_logger")
        get_request_logger("meetslot.tests.request_logger")
        assert sum(isinstance(f, RequestIdFilter) for f in logger.filters) == 1


class TestEventsCarryRequestId:
    def test_each_operation_stamps_its_own_id(self, manager, dispatcher):
        with request_scope("REQ-CREATE"):
            booking_id = manager.create(OWNER_ID, make_request()).booking.id
        with request_scope("REQ-ACCEPT"):
            manager.accept(OWNER_ID, booking_id)
        with request_scope("REQ-CANCEL"):
            manager.cancel(OWNER_ID, booking_id)

        assert [e.request_id for e in dispatcher.events] == [
            "REQ-CREATE", "REQ-ACCEPT", "REQ-CANCEL",
        ]

    def test_unbound_request_id_is_none(self, manager, dispatcher):
        in_fresh_context(manager.create, OWNER_ID, make_request())
        assert dispatcher.events[0].request_id is None

    def test_lifecycle_log_records_carry_id(self, manager, caplog):
        with caplog.at_level(logging.INFO, logger="meetslot.scheduling.lifecycle"):
            with request_scope("REQ-LOG"):
                manager.create(OWNER_ID, make_request())
        created = [r for r in caplog.records if r.getMessage().startswith("Booking created")]
        assert created and created[0].request_id == "REQ-LOG"
