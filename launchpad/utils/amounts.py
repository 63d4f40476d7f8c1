"""
Safe amount handling utilities for fee accounting.
All on-chain amounts are handled as Decimal to keep full 18-decimal precision.
"""

from decimal import Decimal, ROUND_HALF_UP, getcontext
from typing import Union

getcontext().prec = 50

WEI_DECIMALS = 18
BPS_DENOMINATOR = 10000

ZERO = Decimal("0")


def to_decimal(amount: Union[str, int, float, Decimal, None]) -> Decimal:
    if amount is None:
        return ZERO
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))


def from_wei(raw: Union[int, str], decimals: int = WEI_DECIMALS) -> Decimal:
    """Convert a raw integer token amount to whole units"""
    value = int(raw)
    if value < 0:
        raise ValueError(f"Invalid amount: {raw}")
    return Decimal(value).scaleb(-decimals)


def percent_to_bps(share: Union[int, float, Decimal]) -> int:
    """Convert a percentage share to basis points, rounding half up"""
    return int((to_decimal(share) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def normalize_amount(amount: Union[str, Decimal]) -> str:
    amount = to_decimal(amount)
    if amount == ZERO:
        return "0"
    return format(amount, "f").rstrip("0").rstrip(".")


def format_fixed(amount: Union[str, Decimal], places: int = 6) -> str:
    return f"{to_decimal(amount):.{places}f}"
