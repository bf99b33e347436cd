from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, localcontext


def to_display_quantity(raw_quantity: int, decimals: int) -> Decimal:
    """Convert a fixed-point integer amount into its human-readable value.

    Args:
        raw_quantity: Non-negative integer amount expressed with ``decimals``
            implied fractional digits.
        decimals: Number of implied fractional digits.

    Returns:
        The exact decimal value of ``raw_quantity / 10**decimals``.

    Raises:
        ValueError: If either argument is negative.

    Notes:
        - The decimal point is placed on the digit string, never through
          float or context-rounded division, so the result multiplied by
          ``10**decimals`` gives back ``raw_quantity`` exactly.
        - Zero is returned as ``Decimal(0)`` whatever ``decimals`` is.
    """
    if raw_quantity < 0:
        raise ValueError(f"Quantity must be non-negative, got {raw_quantity}")
    if decimals < 0:
        raise ValueError(f"Decimals must be non-negative, got {decimals}")
    if raw_quantity == 0:
        return Decimal(0)

    digits = str(raw_quantity)
    if decimals == 0:
        return Decimal(digits)
    if len(digits) <= decimals:
        return Decimal("0." + digits.rjust(decimals, "0"))
    return Decimal(f"{digits[:-decimals]}.{digits[-decimals:]}")


def _precision_for(value: Decimal, fraction_digits: int) -> int:
    integer_digits = max(value.adjusted() + 1, 1)
    return max(28, integer_digits + fraction_digits + 2)


def format_quantity(
    value: Decimal,
    min_fraction_digits: int = 2,
    max_fraction_digits: int = 6,
    grouping: bool = False,
) -> str:
    """Render a decimal with between ``min`` and ``max`` fractional digits.

    Rounds half-up at ``max_fraction_digits`` and trims trailing zeros down
    to ``min_fraction_digits``. ``grouping`` adds thousands separators.
    """
    with localcontext() as ctx:
        ctx.prec = _precision_for(value, max_fraction_digits)
        ctx.rounding = ROUND_HALF_UP
        rounded = value.quantize(Decimal(1).scaleb(-max_fraction_digits))

    text = format(rounded, ",f" if grouping else "f")
    integer, _, fraction = text.partition(".")
    fraction = fraction.rstrip("0").ljust(min_fraction_digits, "0")
    return f"{integer}.{fraction}" if fraction else integer


def format_usd(value: Decimal) -> str:
    return "$" + format_quantity(value, 2, 2, grouping=True)
