# PATH: core/math.py
"""
Math utilities for swaplens.

No float money: human amounts are Decimal, raw ledger amounts are int.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Union

Number = Union[str, int, float, Decimal]

TICK_BASE = Decimal("1.0001")
Q64 = Decimal(2) ** 64

# Enough digits for 10**18-scaled amounts and 1.0001**tick at extreme ticks
PRICE_PRECISION = 50


def safe_decimal(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    """
    Convert value to a finite Decimal, or return default.

    Floats go through str() so 0.1 becomes Decimal("0.1") rather than its
    binary expansion.
    """
    if value is None or isinstance(value, bool):
        return default

    try:
        if isinstance(value, Decimal):
            result = value
        else:
            result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        return default

    if not result.is_finite():
        return default
    return result


def to_base_units(amount: Number, decimals: int) -> str:
    """
    Convert a human-readable amount to integer base units.

    Rounds half-up to the nearest unit and returns a decimal string so large
    magnitudes survive JSON and query strings intact.

    Example: to_base_units("1.5", 6) -> "1500000"
    """
    with localcontext() as ctx:
        ctx.prec = PRICE_PRECISION
        scaled = safe_decimal(amount) * (Decimal(10) ** decimals)
        return str(int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP)))


def from_base_units(amount: Any, decimals: int) -> Decimal:
    """
    Convert base units back to a human-readable amount.

    Missing or unparseable input yields 0; venues occasionally omit fields
    and that must not abort a comparison.
    """
    with localcontext() as ctx:
        ctx.prec = PRICE_PRECISION
        return safe_decimal(amount) / (Decimal(10) ** decimals)


def ratio(numerator: Number, denominator: Number) -> Decimal:
    """numerator / denominator, or 0 when the denominator is 0."""
    den = safe_decimal(denominator)
    if den == 0:
        return Decimal("0")
    with localcontext() as ctx:
        ctx.prec = PRICE_PRECISION
        return safe_decimal(numerator) / den


def tick_index_to_price(tick: int, decimals_a: int, decimals_b: int) -> Decimal:
    """
    Price of asset A in asset B at a CLMM tick.

    price = 1.0001^tick * 10^(decimals_a - decimals_b)
    """
    with localcontext() as ctx:
        ctx.prec = PRICE_PRECISION
        return (TICK_BASE ** tick) * (Decimal(10) ** (decimals_a - decimals_b))


def sqrt_price_x64_to_price(sqrt_price_x64: int, decimals_a: int, decimals_b: int) -> Decimal:
    """Convert a Q64.64 square-root price into a human-unit price of A in B."""
    with localcontext() as ctx:
        ctx.prec = PRICE_PRECISION
        sqrt_price = Decimal(sqrt_price_x64) / Q64
        return sqrt_price * sqrt_price * (Decimal(10) ** (decimals_a - decimals_b))
