# storefront/utils/money.py

from decimal import Decimal, ROUND_HALF_UP

Money = Decimal

def D(x) -> Money:
    return x if isinstance(x, Decimal) else Decimal(str(x or "0"))

def round_money(x: Money) -> Money:
    return D(x).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

def to_cents(x) -> int:
    """Dollars (any numeric) -> integer cents."""
    return int(round_money(x) * 100)

def from_cents(cents) -> Money:
    return round_money(D(cents) / 100)

def percent_of(cents: int, percentage) -> int:
    """``percentage`` % of an integer cent amount, rounded half-up to a cent."""
    return int((D(cents) * D(percentage) / D(100)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
