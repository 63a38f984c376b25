"""
Money conversion shared by payment creation and confirmation.

Both paths must convert with this module only: a drift between them is
indistinguishable from tampering and would block legitimate payments.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict

from travelpay.errors import UnsupportedCurrency

# Multiplier from major unit to the provider's smallest unit.
SMALLEST_UNIT_MULTIPLIERS: Dict[str, int] = {
    "MYR": 100,
    "INR": 100,
    "USD": 100,
    "SGD": 100,
    "VND": 1,  # zero-decimal
}

SUPPORTED_CURRENCIES = frozenset(SMALLEST_UNIT_MULTIPLIERS)

# Roughly one unit of a major currency.
MIN_CHARGE_SMALLEST_UNIT = 100


def normalize_currency(currency: str) -> str:
    code = (currency or "").strip().upper()
    if code not in SMALLEST_UNIT_MULTIPLIERS:
        raise UnsupportedCurrency(f"Unsupported currency: {currency!r}", currency=currency)
    return code


def multiplier_for(currency: str) -> int:
    return SMALLEST_UNIT_MULTIPLIERS[normalize_currency(currency)]


def to_smallest_unit(amount: Decimal, currency: str) -> int:
    """Convert a decimal major-unit amount to an integer smallest-unit amount."""
    scaled = Decimal(amount) * multiplier_for(currency)
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_smallest_unit(value: int, currency: str) -> Decimal:
    multiplier = multiplier_for(currency)
    exponent = Decimal("1") if multiplier == 1 else Decimal("0.01")
    return (Decimal(int(value)) / multiplier).quantize(exponent, rounding=ROUND_HALF_UP)
