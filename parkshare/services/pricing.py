import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from parkshare.config import settings
from parkshare.core.exceptions import InvalidInputError, InvalidWindowError
from parkshare.utils.dates import ensure_utc

CENT = Decimal("0.01")
ONE = Decimal("1")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class EventRule:
    multiplier: Decimal
    start_date: datetime
    end_date: datetime
    is_active: bool = True


@dataclass(frozen=True)
class PriceQuote:
    hours: int
    price_per_hour: Decimal
    base_price: Decimal
    first_hour_discount: Decimal
    event_multiplier: Decimal
    total_price: Decimal


def to_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def billable_hours(start_time: datetime, end_time: datetime, minimum_hours: int = 1) -> int:
    """Whole hours charged for a window: partial hours round up, never below the minimum."""
    start_time = ensure_utc(start_time)
    end_time = ensure_utc(end_time)
    if end_time <= start_time:
        raise InvalidWindowError("End time must be after start time")

    hours = math.ceil((end_time - start_time) / timedelta(hours=1))
    return max(hours, minimum_hours, 1)


def compute_base_price(
    price_per_hour: Decimal,
    start_time: datetime,
    end_time: datetime,
    minimum_hours: int = 1,
) -> Decimal:
    hours = billable_hours(start_time, end_time, minimum_hours)
    return to_money(Decimal(hours) * Decimal(price_per_hour))


def _validate_discount(discount_percent: Decimal) -> Decimal:
    discount_percent = Decimal(discount_percent)
    if not 0 <= discount_percent <= settings.max_first_hour_discount_percent:
        raise InvalidInputError(
            f"First hour discount must be between 0 and "
            f"{settings.max_first_hour_discount_percent} percent"
        )
    return discount_percent


def _first_hour_reduction(price_per_hour: Decimal, discount_percent: Decimal) -> Decimal:
    return Decimal(price_per_hour) * _validate_discount(discount_percent) / HUNDRED


def apply_first_hour_discount(
    base: Decimal, price_per_hour: Decimal, discount_percent: Decimal
) -> Decimal:
    """
    Charge the first hour at a reduced rate and every later hour at the full rate.

    ``base`` is the undiscounted price (billable hours times the hourly rate), so
    the result equals ``rate * (1 - pct/100) + rate * (hours - 1)``.
    """
    return to_money(Decimal(base) - _first_hour_reduction(price_per_hour, discount_percent))


def _validate_multiplier(multiplier: Decimal) -> Decimal:
    multiplier = Decimal(multiplier)
    if multiplier <= 0:
        raise InvalidInputError("Event multiplier must be positive")
    return multiplier


def apply_event_multiplier(base: Decimal, multiplier: Decimal) -> Decimal:
    return to_money(Decimal(base) * _validate_multiplier(multiplier))


def resolve_event_multiplier(
    rules: Iterable[EventRule], start_time: datetime, end_time: datetime
) -> Decimal:
    """
    Pick the multiplier for a booking window.

    When several active rules intersect the window the highest multiplier wins.
    Windows touching no rule are priced at the normal rate.
    """
    start_time = ensure_utc(start_time)
    end_time = ensure_utc(end_time)
    multiplier = ONE
    for rule in rules:
        if not rule.is_active:
            continue
        if ensure_utc(rule.start_date) < end_time and ensure_utc(rule.end_date) > start_time:
            multiplier = max(multiplier, Decimal(rule.multiplier))
    return multiplier


def compute_extension_cost(price_per_hour: Decimal, additional_hours: int) -> Decimal:
    if additional_hours <= 0:
        raise InvalidInputError("Additional hours must be greater than zero")
    return to_money(Decimal(additional_hours) * Decimal(price_per_hour))


def quote_booking(
    price_per_hour: Decimal,
    start_time: datetime,
    end_time: datetime,
    minimum_hours: int = 1,
    discount_percent: Decimal | None = None,
    event_rules: Iterable[EventRule] = (),
) -> PriceQuote:
    """Price a booking window, rounding to cents once at the end."""
    price_per_hour = Decimal(price_per_hour)
    hours = billable_hours(start_time, end_time, minimum_hours)
    base = Decimal(hours) * price_per_hour

    reduction = Decimal("0")
    if discount_percent:
        reduction = _first_hour_reduction(price_per_hour, discount_percent)

    multiplier = _validate_multiplier(resolve_event_multiplier(event_rules, start_time, end_time))
    total = (base - reduction) * multiplier

    return PriceQuote(
        hours=hours,
        price_per_hour=to_money(price_per_hour),
        base_price=to_money(base),
        first_hour_discount=to_money(reduction),
        event_multiplier=multiplier,
        total_price=to_money(total),
    )


def compute_cancellation_refund(
    total_price: Decimal, start_time: datetime, now: datetime
) -> Decimal | None:
    """
    Refund owed when a booking is cancelled at ``now``.

    Full refund up to the free cancellation cutoff before start, the late fee
    inside it, and ``None`` once the booking has started.
    """
    start_time = ensure_utc(start_time)
    now = ensure_utc(now)
    if now >= start_time:
        return None

    total_price = Decimal(total_price)
    cutoff = start_time - timedelta(hours=settings.free_cancellation_hours)
    if now < cutoff:
        return to_money(total_price)

    fee = total_price * Decimal(settings.late_cancellation_fee_percent) / HUNDRED
    return to_money(total_price - fee)
