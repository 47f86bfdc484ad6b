"""Fixed-point conversions for the ledger's scaled integers. No I/O.

The ledger encodes rates, utilization and collateral factors scaled by 1e18,
prices by 1e8 and balances by the token's own decimals. Conversions go through
``int`` and ``Decimal`` only, so values near 2**64 and beyond stay exact.
"""
from __future__ import annotations

from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext

from .errors import InvalidScale, Overflow, PrecisionLoss

WAD = 10**18
PRICE_SCALE = 10**8
PERCENT = Decimal(100)

# Enough digits for any uint256 plus 18 fractional places
_PRECISION = 100


def scale_exponent(scale: int) -> int:
    """Return n for scale == 10**n, raising InvalidScale otherwise."""
    if isinstance(scale, bool) or not isinstance(scale, int) or scale <= 0:
        raise InvalidScale(scale)
    exponent = 0
    remaining = scale
    while remaining % 10 == 0:
        remaining //= 10
        exponent += 1
    if remaining != 1:
        raise InvalidScale(scale)
    return exponent


def scale_for_decimals(decimals: int) -> int:
    """Return 10**decimals for a token's ``decimals()`` value."""
    if isinstance(decimals, bool) or not isinstance(decimals, int) or decimals < 0:
        raise InvalidScale(decimals)
    return 10**decimals


def to_decimal(raw: int, scale: int, places: int | None = None) -> Decimal:
    """Convert a raw scaled integer to an exact Decimal.

    Args:
        raw: Integer as returned by the ledger.
        scale: Power of ten the value is scaled by (e.g. ``10**18``).
        places: Optional number of fractional digits to keep; extra digits
            are truncated, never rounded up.
    """
    exponent = scale_exponent(scale)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        value = Decimal(int(raw)).scaleb(-exponent)
        if places is not None:
            value = value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_DOWN)
    return value


def to_raw(
    value: Decimal | str | int,
    scale: int,
    bits: int = 256,
    signed: bool = False,
) -> int:
    """Convert a decimal amount into the ledger's scaled integer.

    Raises:
        InvalidScale: scale is not a positive power of ten.
        PrecisionLoss: ``value`` has more fractional digits than ``scale``.
        Overflow: the result does not fit the target integer type.
    """
    exponent = scale_exponent(scale)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Not a decimal number: {value!r}") from None
    if not amount.is_finite():
        raise Overflow(value, bits, signed)

    with localcontext() as ctx:
        ctx.prec = max(_PRECISION, len(amount.as_tuple().digits) + exponent + 1)
        scaled = amount.scaleb(exponent)
        integral = scaled.to_integral_value(rounding=ROUND_DOWN)
        if scaled != integral:
            raise PrecisionLoss(value, scale)
        raw = int(integral)

    if signed:
        low, high = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1
    else:
        low, high = 0, 2**bits - 1
    if raw < low or raw > high:
        raise Overflow(value, bits, signed)
    return raw


def format_units(raw: int, decimals: int = 18) -> str:
    """Render a raw token amount as a plain decimal string."""
    value = to_decimal(raw, scale_for_decimals(decimals))
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        text = format(value.normalize(), "f") if value else "0"
    return text if "." in text else f"{text}.0"


def parse_units(value: Decimal | str | int, decimals: int = 18) -> int:
    """Parse a human-readable amount into raw token units (uint256)."""
    return to_raw(value, scale_for_decimals(decimals))
