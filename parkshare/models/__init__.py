from parkshare.models.booking import Booking
from parkshare.models.parking import EventPricing, ParkingSpace
from parkshare.models.vehicle import Vehicle

__all__ = [
    "Booking",
    "ParkingSpace",
    "EventPricing",
    "Vehicle",
]
