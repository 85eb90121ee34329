import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from parkshare.utils.constants import SortBy, VehicleType

EARTH_RADIUS_MILES = 3958.8


@dataclass(frozen=True)
class VehicleProfile:
    vehicle_type: str
    length: Decimal | float | str | None = None
    width: Decimal | float | str | None = None
    height: Decimal | float | str | None = None
    is_electric: bool = False


@dataclass(frozen=True)
class SpaceConstraints:
    max_length: Decimal | None = None
    max_width: Decimal | None = None
    max_height: Decimal | None = None
    allows_trucks: bool = False
    has_ev_charging: bool = False


@dataclass
class CompatibilityResult:
    is_compatible: bool
    issues: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SpaceCandidate:
    space_id: str
    price: Decimal
    distance: float | None = None
    ev_charging: bool = False
    covered: bool = False
    height_limit: float | None = None
    security: bool = False


@dataclass(frozen=True)
class SpaceFilters:
    max_price: Decimal | None = None
    max_distance: float | None = None
    ev_charging: bool = False
    covered: bool = False
    height_limit: float | None = None
    security: bool = False


def _dimension(value: Decimal | float | str | None) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    number = Decimal(str(value).strip())
    if not number.is_finite():
        raise InvalidOperation(value)
    return number


def _fmt(value: Decimal | float | str | None) -> str:
    return f"{value}'"


def check_vehicle_compatibility(
    vehicle: VehicleProfile, constraints: SpaceConstraints
) -> CompatibilityResult:
    """
    Check whether a vehicle fits a space.

    Dimension limits are inclusive and an unset limit allows any size. Bad
    dimension values make the vehicle incompatible instead of raising, and a
    missing EV charger is only a warning.
    """
    issues: list[str] = []
    warnings: list[str] = []

    try:
        length = _dimension(vehicle.length)
        width = _dimension(vehicle.width)
        height = _dimension(vehicle.height)
    except (InvalidOperation, ValueError):
        issues.append("Vehicle dimensions are invalid. Please update your vehicle information.")
        return CompatibilityResult(is_compatible=False, issues=issues, warnings=warnings)

    if constraints.max_length is not None and length > Decimal(str(constraints.max_length)):
        issues.append(
            f"Vehicle too long: {_fmt(vehicle.length)} (max: {_fmt(constraints.max_length)})"
        )
    if constraints.max_width is not None and width > Decimal(str(constraints.max_width)):
        issues.append(
            f"Vehicle too wide: {_fmt(vehicle.width)} (max: {_fmt(constraints.max_width)})"
        )
    if constraints.max_height is not None and height > Decimal(str(constraints.max_height)):
        issues.append(
            f"Vehicle too tall: {_fmt(vehicle.height)} (max: {_fmt(constraints.max_height)})"
        )

    if vehicle.vehicle_type == VehicleType.TRUCK.value and not constraints.allows_trucks:
        issues.append("Trucks not permitted in this space")

    if vehicle.is_electric and not constraints.has_ev_charging:
        warnings.append("No EV charging available at this location")

    return CompatibilityResult(is_compatible=not issues, issues=issues, warnings=warnings)


def space_matches(candidate: SpaceCandidate, filters: SpaceFilters) -> bool:
    if filters.max_price is not None and candidate.price > filters.max_price:
        return False
    if filters.max_distance is not None and (
        candidate.distance is None or candidate.distance > filters.max_distance
    ):
        return False
    if filters.ev_charging and not candidate.ev_charging:
        return False
    if filters.covered and not candidate.covered:
        return False
    # A space without a height limit takes any vehicle
    if (
        filters.height_limit is not None
        and candidate.height_limit is not None
        and candidate.height_limit < filters.height_limit
    ):
        return False
    if filters.security and not candidate.security:
        return False
    return True


def filter_spaces(
    candidates: Iterable[SpaceCandidate], filters: SpaceFilters
) -> list[SpaceCandidate]:
    return [c for c in candidates if space_matches(c, filters)]


def sort_spaces(
    candidates: Iterable[SpaceCandidate], sort_by: SortBy = SortBy.DISTANCE
) -> list[SpaceCandidate]:
    def distance(c: SpaceCandidate) -> float:
        return c.distance if c.distance is not None else 0.0

    if SortBy(sort_by) == SortBy.PRICE:
        return sorted(candidates, key=lambda c: (c.price, distance(c)))
    return sorted(candidates, key=lambda c: (distance(c), c.price))


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    lat1, lon1, lat2, lon2 = map(math.radians, (lat1, lon1, lat2, lon2))
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_MILES * math.asin(math.sqrt(a))
