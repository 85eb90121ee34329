from enum import Enum


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ISSUE_REPORTED = "issue_reported"


class IssueType(str, Enum):
    BLOCKED = "blocked"
    NO_ACCESS = "no_access"
    DAMAGED = "damaged"
    OTHER = "other"


class SpaceType(str, Enum):
    DRIVEWAY = "driveway"
    GARAGE = "garage"
    LOT = "lot"
    STREET_PERMIT = "street_permit"
    COVERED = "covered"
    VALET = "valet"


class VehicleType(str, Enum):
    SEDAN = "sedan"
    SUV = "suv"
    TRUCK = "truck"
    MOTORCYCLE = "motorcycle"
    EV = "ev"
    VAN = "van"


class EventType(str, Enum):
    CONCERT = "concert"
    SPORTS = "sports"
    CONFERENCE = "conference"
    FESTIVAL = "festival"


class SortBy(str, Enum):
    DISTANCE = "distance"
    PRICE = "price"


TERMINAL_BOOKING_STATUSES = frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED})
