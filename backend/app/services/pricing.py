"""Pricing engine for decoration bookings.

Two output modes share one core: ``estimate_price`` gives a single rounded
figure for quick quotes, ``calculate_breakdown`` itemizes base, city
surcharge, addons and GST. Unknown budget keys, occasions and cities resolve
to neutral values instead of raising.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable

TAX_RATE = 0.18
DEFAULT_GUEST_COUNT = 25
DEFAULT_ADDON_PRICE = 1000.0

TOKEN_RATE = 0.20
MIN_TOKEN_AMOUNT = 500
MAX_TOKEN_AMOUNT = 2000

CURRENCY_SYMBOL = "₹"


class Occasion(str, Enum):
    BIRTHDAY = "BIRTHDAY"
    ANNIVERSARY = "ANNIVERSARY"
    BABY_SHOWER = "BABY_SHOWER"
    CORPORATE = "CORPORATE"
    OTHER = "OTHER"


@dataclass(frozen=True)
class BudgetRange:
    label: str
    value: str
    min: int
    max: int


BUDGET_RANGES: tuple[BudgetRange, ...] = (
    BudgetRange("₹5,000 - ₹10,000", "5000-10000", 5000, 10000),
    BudgetRange("₹10,000 - ₹20,000", "10000-20000", 10000, 20000),
    BudgetRange("₹20,000 - ₹50,000", "20000-50000", 20000, 50000),
    BudgetRange("₹50,000+", "50000+", 50000, 100000),
)

OCCASION_MULTIPLIERS: dict[Occasion, float] = {
    Occasion.BIRTHDAY: 1.0,
    Occasion.ANNIVERSARY: 1.2,
    Occasion.BABY_SHOWER: 1.1,
    Occasion.CORPORATE: 1.5,
    Occasion.OTHER: 1.0,
}

LOCATION_SURCHARGES: dict[str, float] = {
    "Mumbai": 0.15,
    "Delhi": 0.12,
    "Bangalore": 0.10,
    "Chennai": 0.08,
    "Kolkata": 0.05,
    "Hyderabad": 0.08,
    "Pune": 0.10,
    "Ahmedabad": 0.05,
    "Jaipur": 0.03,
    "Surat": 0.02,
}

# (inclusive upper bound on guests, multiplier)
GUEST_COUNT_STEPS: tuple[tuple[int, float], ...] = (
    (10, 0.8),
    (25, 1.0),
    (50, 1.3),
    (100, 1.6),
)
LARGE_PARTY_MULTIPLIER = 2.0


@dataclass(frozen=True)
class PriceBreakdown:
    base_price: float
    addon_prices: dict[str, float] = field(default_factory=dict)
    location_surcharge: float = 0.0
    guest_count_multiplier: float = 0.0
    total_price: float = 0.0
    taxes: float = 0.0
    final_amount: int = 0


def round_half_up(value: float) -> int:
    """Round to the nearest whole unit with .5 going up."""
    return int(math.floor(value + 0.5))


def get_budget_range(key: str) -> BudgetRange | None:
    for budget in BUDGET_RANGES:
        if budget.value == key:
            return budget
    return None


def occasion_multiplier(occasion: Occasion | str) -> float:
    try:
        return OCCASION_MULTIPLIERS[Occasion(occasion)]
    except ValueError:
        return 1.0


def guest_count_multiplier(guest_count: int) -> float:
    for upper_bound, multiplier in GUEST_COUNT_STEPS:
        if guest_count <= upper_bound:
            return multiplier
    return LARGE_PARTY_MULTIPLIER


def get_location_surcharge_rate(location: str | None) -> float:
    return LOCATION_SURCHARGES.get(location or "", 0.0)


def is_location_serviceable(location: str) -> bool:
    """Substring match in either direction; an empty string matches every city."""
    needle = location.lower()
    return any(city.lower() in needle or needle in city.lower() for city in LOCATION_SURCHARGES)


def estimate_price(
    occasion: Occasion | str,
    budget_range_key: str,
    guest_count: int | None = None,
    location: str | None = None,
) -> int:
    """Quick quote with the city surcharge compounded into the price."""
    budget = get_budget_range(budget_range_key)
    if budget is None:
        return 0

    guests = DEFAULT_GUEST_COUNT if guest_count is None else guest_count
    price = float(budget.min)
    price *= occasion_multiplier(occasion)
    price *= guest_count_multiplier(guests)
    price *= 1 + get_location_surcharge_rate(location)
    return round_half_up(price)


def calculate_breakdown(
    occasion: Occasion | str,
    budget_range_key: str,
    guest_count: int | None = None,
    location: str | None = None,
    addon_ids: Iterable[str] = (),
    addon_price_lookup: Callable[[str], float] | None = None,
) -> PriceBreakdown:
    """Itemized quote.

    Unlike ``estimate_price`` the city surcharge is an amount on top of the
    adjusted base price, reported on its own line. Addon prices come from
    ``addon_price_lookup``; without one every addon costs
    ``DEFAULT_ADDON_PRICE``.
    """
    budget = get_budget_range(budget_range_key)
    if budget is None:
        return PriceBreakdown(base_price=0.0)

    guests = DEFAULT_GUEST_COUNT if guest_count is None else guest_count
    guest_multiplier = guest_count_multiplier(guests)
    adjusted_base_price = budget.min * occasion_multiplier(occasion) * guest_multiplier
    surcharge = adjusted_base_price * get_location_surcharge_rate(location)

    lookup = addon_price_lookup or (lambda _addon_id: DEFAULT_ADDON_PRICE)
    addon_prices: dict[str, float] = {}
    for addon_id in addon_ids:
        addon_prices[addon_id] = float(lookup(addon_id))
    total_addon_price = sum(addon_prices.values())

    subtotal = adjusted_base_price + surcharge + total_addon_price
    taxes = subtotal * TAX_RATE

    return PriceBreakdown(
        base_price=adjusted_base_price,
        addon_prices=addon_prices,
        location_surcharge=surcharge,
        guest_count_multiplier=guest_multiplier,
        total_price=subtotal,
        taxes=taxes,
        final_amount=round_half_up(subtotal + taxes),
    )


def calculate_token_amount(total_amount: float) -> int:
    """Upfront deposit: 20% of the total, kept within ₹500..₹2000."""
    token = round_half_up(total_amount * TOKEN_RATE)
    return max(MIN_TOKEN_AMOUNT, min(MAX_TOKEN_AMOUNT, token))


def _group_indian(digits: str) -> str:
    # Last three digits, then pairs: 12,34,567
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_price(amount: float) -> str:
    whole = round_half_up(amount)
    sign = "-" if whole < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{_group_indian(str(abs(whole)))}"
