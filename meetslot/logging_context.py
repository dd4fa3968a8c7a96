"""Request ID context shared by lifecycle log lines and emitted events.

The caller (an HTTP handler, a job runner) binds the id of the incoming
request once. From then on every ``create``, ``accept``, ``decline``,
``cancel`` and ``reschedule`` log record carries it as ``request_id``, and
the manager copies it onto the ``BookingEvent`` it dispatches, so the
notifier's delivery logs can be joined back to the booking request that
caused them.

Usage:
    from meetslot.logging_context import request_scope

    with request_scope("REQ-abc123"):
        manager.accept("owner-1", booking_id)  # BookingAccepted.request_id == "REQ-abc123"
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

UNSET = "NO_REQUEST_ID"

_request_id: ContextVar[str] = ContextVar("request_id", default=UNSET)


def set_request_id(request_id: str) -> None:
    """Bind ``request_id`` for the rest of the current context."""
    _request_id.set(request_id)


def get_request_id() -> str:
    return _request_id.get()


def current_request_id() -> Optional[str]:
    """The bound request ID, or None when no caller bound one.

    Events store None rather than the log placeholder.
    """
    value = _request_id.get()
    return None if value == UNSET else value


@contextmanager
def request_scope(request_id: str) -> Iterator[str]:
    """Bind ``request_id`` for the duration of the block, then restore the previous one."""
    token = _request_id.set(request_id)
    try:
        yield request_id
    finally:
        _request_id.reset(token)


class RequestIdFilter(logging.Filter):
    """Stamps ``record.request_id`` so formatters can use ``%(request_id)s``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def get_request_logger(name: str) -> logging.Logger:
    """``logging.getLogger(name)`` with a single ``RequestIdFilter`` attached."""
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger
