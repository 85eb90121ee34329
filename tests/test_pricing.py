from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from parkshare.core.exceptions import InvalidInputError, InvalidWindowError
from parkshare.services.pricing import (
    EventRule,
    apply_event_multiplier,
    apply_first_hour_discount,
    billable_hours,
    compute_base_price,
    compute_cancellation_refund,
    compute_extension_cost,
    quote_booking,
    resolve_event_multiplier,
)

T = datetime(2030, 6, 1, 9, 0, tzinfo=UTC)
RATE = Decimal("10.00")


def test_two_hour_window_costs_two_hours():
    assert compute_base_price(RATE, T, T + timedelta(hours=2)) == Decimal("20.00")


def test_partial_hours_round_up():
    assert billable_hours(T, T + timedelta(hours=2, minutes=1)) == 3
    assert compute_base_price(RATE, T, T + timedelta(minutes=61)) == Decimal("20.00")


def test_short_window_charges_at_least_one_hour():
    assert compute_base_price(RATE, T, T + timedelta(minutes=5)) == RATE


def test_minimum_duration_is_charged():
    assert compute_base_price(Decimal("15.00"), T, T + timedelta(hours=1), minimum_hours=2) == (
        Decimal("30.00")
    )


def test_base_price_is_monotonic_in_duration():
    prices = [
        compute_base_price(Decimal("7.25"), T, T + timedelta(minutes=minutes))
        for minutes in range(1, 60 * 8, 17)
    ]
    assert all(p >= Decimal("7.25") for p in prices)
    assert prices == sorted(prices)


def test_base_price_rejects_inverted_window():
    with pytest.raises(InvalidWindowError):
        compute_base_price(RATE, T, T)


def test_zero_discount_leaves_price_unchanged():
    base = compute_base_price(RATE, T, T + timedelta(hours=3))
    assert apply_first_hour_discount(base, RATE, Decimal("0")) == base


def test_first_hour_discount_only_touches_first_hour():
    base = compute_base_price(Decimal("15.00"), T, T + timedelta(hours=2))
    # 15 * 0.9 + 15
    assert apply_first_hour_discount(base, Decimal("15.00"), Decimal("10")) == Decimal("28.50")


@pytest.mark.parametrize("pct", [Decimal("-1"), Decimal("50.01"), Decimal("75")])
def test_discount_outside_range_is_rejected(pct):
    with pytest.raises(InvalidInputError):
        apply_first_hour_discount(Decimal("20.00"), RATE, pct)


def test_discount_of_fifty_percent_is_allowed():
    assert apply_first_hour_discount(Decimal("20.00"), RATE, Decimal("50")) == Decimal("15.00")


def test_event_multiplier():
    assert apply_event_multiplier(Decimal("20.00"), Decimal("1.5")) == Decimal("30.00")
    with pytest.raises(InvalidInputError):
        apply_event_multiplier(Decimal("20.00"), Decimal("0"))


def test_highest_overlapping_event_multiplier_wins():
    rules = [
        EventRule(Decimal("1.5"), T - timedelta(hours=1), T + timedelta(hours=1)),
        EventRule(Decimal("2.0"), T + timedelta(minutes=30), T + timedelta(hours=4)),
        EventRule(Decimal("4.0"), T + timedelta(days=1), T + timedelta(days=2)),
        EventRule(Decimal("5.0"), T, T + timedelta(hours=2), is_active=False),
    ]
    assert resolve_event_multiplier(rules, T, T + timedelta(hours=2)) == Decimal("2.0")


def test_event_rule_touching_window_edge_does_not_apply():
    rules = [EventRule(Decimal("3.0"), T + timedelta(hours=2), T + timedelta(hours=5))]
    assert resolve_event_multiplier(rules, T, T + timedelta(hours=2)) == Decimal("1")


def test_extension_cost():
    assert compute_extension_cost(RATE, 3) == Decimal("30.00")


@pytest.mark.parametrize("hours", [0, -2])
def test_extension_requires_positive_hours(hours):
    with pytest.raises(InvalidInputError):
        compute_extension_cost(RATE, hours)


def test_quote_rounds_once_at_the_end():
    quote = quote_booking(
        Decimal("8.50"),
        T,
        T + timedelta(hours=3),
        discount_percent=Decimal("15"),
        event_rules=[EventRule(Decimal("1.5"), T, T + timedelta(hours=1))],
    )
    # (25.50 - 1.275) * 1.5 = 36.3375
    assert quote.hours == 3
    assert quote.base_price == Decimal("25.50")
    assert quote.first_hour_discount == Decimal("1.28")
    assert quote.event_multiplier == Decimal("1.5")
    assert quote.total_price == Decimal("36.34")


def test_quote_without_extras_matches_base_price():
    quote = quote_booking(RATE, T, T + timedelta(hours=2))
    assert quote.total_price == compute_base_price(RATE, T, T + timedelta(hours=2))


def test_cancellation_refund_tiers():
    total = Decimal("20.00")
    assert compute_cancellation_refund(total, T, T - timedelta(hours=3)) == Decimal("20.00")
    assert compute_cancellation_refund(total, T, T - timedelta(hours=2)) == Decimal("10.00")
    assert compute_cancellation_refund(total, T, T - timedelta(minutes=5)) == Decimal("10.00")
    assert compute_cancellation_refund(total, T, T) is None
