# storefront/pricing.py
"""Line pricing.

``calc_line_amounts`` is the single place that decides the discount of an
order line. It is pure: the same price and quantity always give the same
rate and net amount. Checkout stores the rate, quotes and order views
recompute money from it with ``split_line``.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import List, NamedTuple, Optional, Tuple
from dotenv import load_dotenv
import os

load_dotenv()

CENT = Decimal("0.01")
RATE_STEP = Decimal("0.0001")

# "min_qty:rate" pairs, buy at least min_qty units to get rate off the line
DEFAULT_TIERS = "10:0.10,5:0.05"

Tier = Tuple[int, Decimal]


def parse_tiers(raw: str) -> List[Tier]:
    tiers = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        min_qty, rate = chunk.split(":")
        rate = Decimal(rate.strip())
        if not Decimal(0) <= rate <= Decimal(1):
            raise ValueError(f"Discount rate out of range [0, 1]: {rate}")
        tiers.append((int(min_qty), rate))
    # largest threshold first so the first match wins
    return sorted(tiers, key=lambda t: t[0], reverse=True)


BULK_DISCOUNT_TIERS = parse_tiers(os.getenv("BULK_DISCOUNT_TIERS", DEFAULT_TIERS))


class LineAmounts(NamedTuple):
    discount_rate: Decimal
    net_amount: Decimal


def to_money(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def discount_rate_for(quantity: int, tiers: Optional[List[Tier]] = None) -> Decimal:
    for min_qty, rate in (BULK_DISCOUNT_TIERS if tiers is None else tiers):
        if quantity >= min_qty:
            return rate.quantize(RATE_STEP)
    return Decimal("0.0000")


def split_line(unit_price, quantity: int, discount_rate) -> Tuple[Decimal, Decimal, Decimal]:
    """Return ``(gross, discount_amount, net)`` for one line, in cents.

    ``net`` is ``gross - discount_amount`` so the figures of one line
    reconcile. Order totals round the exact sums instead.
    """
    gross = to_money(Decimal(unit_price) * quantity)
    discount_amount = to_money(gross * Decimal(discount_rate))
    return gross, discount_amount, gross - discount_amount


def calc_line_amounts(unit_price, quantity: int, tiers: Optional[List[Tier]] = None) -> LineAmounts:
    if quantity <= 0:
        raise ValueError(f"quantity must be positive, got {quantity}")
    unit_price = Decimal(unit_price)
    if unit_price < 0:
        raise ValueError(f"unit_price must not be negative, got {unit_price}")

    rate = discount_rate_for(quantity, tiers)
    _, _, net = split_line(unit_price, quantity, rate)
    return LineAmounts(discount_rate=rate, net_amount=net)
