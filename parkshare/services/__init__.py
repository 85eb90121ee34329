from parkshare.services import (
    booking,
    booking_store,
    compatibility,
    locks,
    parking,
    pricing,
    vehicle,
)

__all__ = [
    "pricing",
    "compatibility",
    "locks",
    "booking_store",
    "booking",
    "parking",
    "vehicle",
]
