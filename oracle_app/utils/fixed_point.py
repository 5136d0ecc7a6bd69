"""
Fixed-point arithmetic with 18 fractional decimal digits.

Values are stored as arbitrary-precision ints scaled by WAD so that prices
read from oracle feeds never pass through binary floating point.
"""

from decimal import ROUND_DOWN, ROUND_HALF_EVEN, Decimal, InvalidOperation, localcontext
from typing import Optional, Union

DECIMALS = 18
WAD = 10 ** DECIMALS

# Enough digits for any value a 256-bit feed word can hold
_PRECISION = 80

FixedInput = Union[str, Decimal, int, float]


def to_fixed(value: FixedInput) -> int:
    """
    Convert a human-unit value to its scaled integer form.

    Args:
        value: Amount in whole units. Ints are whole units, floats are
            converted through their shortest string repr.

    Returns:
        Integer scaled by WAD, truncated toward zero past 18 digits

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a numeric amount: {value!r}")
    if isinstance(value, int):
        return value * WAD
    if isinstance(value, float):
        value = repr(value)

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        try:
            amount = Decimal(value)
        except (InvalidOperation, TypeError) as e:
            raise ValueError(f"Not a numeric amount: {value!r}") from e
        if not amount.is_finite():
            raise ValueError(f"Amount must be finite: {value!r}")
        return int(amount.scaleb(DECIMALS).to_integral_value(rounding=ROUND_DOWN))


def from_fixed(raw: int) -> Decimal:
    """Convert a scaled integer back to an exact Decimal in whole units."""
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(raw).scaleb(-DECIMALS)


def fixed_mul(a: int, b: int) -> int:
    """Multiply two fixed-point values, truncating the extra 18 digits."""
    return a * b // WAD


def fixed_mul_ceil(a: int, b: int) -> int:
    """Multiply two non-negative fixed-point values, rounding any remainder up."""
    return -(-a * b // WAD)


def format_fixed(raw: int) -> str:
    """Plain decimal string without trailing zeros, for logs and records."""
    text = f"{from_fixed(raw):f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def format_display_price(raw: Optional[int]) -> str:
    """
    Format a price for display with magnitude-dependent precision.

    Prices above 1000 show no fraction digits, above 1 show at most two,
    everything else at most four. Thousands are comma separated.

    Args:
        raw: Fixed-point price, None when no price is known

    Returns:
        Display string, "0" for a missing or zero price
    """
    if not raw:
        return "0"

    price = from_fixed(raw)
    if price > 1000:
        digits = 0
    elif price > 1:
        digits = 2
    else:
        digits = 4

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        rounded = price.quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_EVEN)

    text = f"{rounded:,.{digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
