from meetslot.stores.memory import (
    InMemoryBookingStore,
    InMemoryProfileStore,
    normalize_availability_record,
)

__all__ = [
    "InMemoryBookingStore",
    "InMemoryProfileStore",
    "normalize_availability_record",
]
