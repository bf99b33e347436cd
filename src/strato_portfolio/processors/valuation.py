from __future__ import annotations

from dataclasses import dataclass, field
from decimal import (
    MAX_EMAX,
    ROUND_HALF_UP,
    Decimal,
    DecimalException,
    InvalidOperation,
    localcontext,
)
from enum import Enum
from typing import Mapping, Sequence

from ..constants import MIN_DISPLAY_USD, NATIVE_TOKEN_SYMBOL
from ..exceptions import MalformedPriceError
from ..logger import get_logger
from ..units import format_quantity, to_display_quantity
from .asset_aggregator import AssetGroup

logger = get_logger(__name__)

CENT = Decimal("0.01")
MIN_USD = Decimal(MIN_DISPLAY_USD)


class ValuationCategory(str, Enum):
    FUNGIBLE = "fungible"
    NON_FUNGIBLE = "non_fungible"
    NATIVE = "native"


@dataclass
class GroupValuation:
    """Display values computed for one asset group."""

    name: str
    total_quantity: int
    token_count: int
    decimals: int
    display_quantity: Decimal
    formatted_quantity: str
    category: ValuationCategory
    usd_value: Decimal | None = None


@dataclass
class PortfolioSummary:
    fungible_count: int = 0
    fungible_value_usd: Decimal = field(default_factory=lambda: Decimal("0.00"))
    non_fungible_count: int = 0
    native_token_count: int = 0
    native_token_quantity: Decimal = field(default_factory=lambda: Decimal(0))


@dataclass
class PortfolioValuation:
    """Valuated asset groups plus summary totals for one owner."""

    groups: list[GroupValuation] = field(default_factory=list)
    summary: PortfolioSummary = field(default_factory=PortfolioSummary)
    diagnostics: list[str] = field(default_factory=list)


def parse_price(value: str) -> Decimal:
    """Parse an oracle price string.

    Raises:
        MalformedPriceError: If the price is not a finite, non-negative decimal.
    """
    try:
        price = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise MalformedPriceError(f"Invalid price value: {value!r}") from e
    if not price.is_finite():
        raise MalformedPriceError(f"Non-finite price value: {value!r}")
    if price < 0:
        raise MalformedPriceError(f"Negative price value: {value!r}")
    return price


def compute_usd_value(display_quantity: Decimal, price: Decimal) -> Decimal:
    """Multiply quantity by price and round to cents.

    The product is computed exactly. Non-zero values under one cent are
    raised to one cent; everything else rounds half-up to two places.

    Raises:
        MalformedPriceError: If the product is out of the representable range.
    """
    try:
        with localcontext() as ctx:
            ctx.prec = (
                len(display_quantity.as_tuple().digits)
                + len(price.as_tuple().digits)
                + 2
            )
            ctx.rounding = ROUND_HALF_UP
            value = display_quantity * price
            if value == 0:
                return Decimal("0.00")
            if value < MIN_USD:
                return MIN_USD
            ctx.prec = max(value.adjusted() + 1, 1) + 4
            return value.quantize(CENT)
    except DecimalException as e:
        raise MalformedPriceError(f"Price {price} is out of range: {e!r}") from e


def _add_exact(total: Decimal, value: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.Emax = MAX_EMAX
        ctx.prec = max(total.adjusted(), value.adjusted(), 0) + 4
        return total + value


def valuate(
    groups: Sequence[AssetGroup],
    prices: Mapping[str, str],
    native_symbol: str = NATIVE_TOKEN_SYMBOL,
) -> PortfolioValuation:
    """Compute display quantities, USD values and summary totals.

    Args:
        groups: Aggregated asset groups, already in display order
        prices: Symbol to price mapping from the price index
        native_symbol: Symbol tracked in its own summary bucket

    Returns:
        The per-group valuations in input order with summary totals. A price
        that cannot be parsed leaves that group unpriced and adds a
        diagnostic; the other groups are unaffected.
    """
    result = PortfolioValuation()
    summary = result.summary

    for group in groups:
        display_quantity = to_display_quantity(group.total_quantity, group.decimals)

        usd_value: Decimal | None = None
        raw_price = prices.get(group.name)
        if raw_price is not None:
            try:
                usd_value = compute_usd_value(display_quantity, parse_price(raw_price))
            except MalformedPriceError as e:
                logger.warning("Skipping valuation of %s: %s", group.name, e)
                result.diagnostics.append(f"{group.name}: {e}")

        if group.name == native_symbol:
            category = ValuationCategory.NATIVE
            summary.native_token_count += group.token_count
            summary.native_token_quantity = display_quantity
        elif usd_value is not None:
            category = ValuationCategory.FUNGIBLE
            summary.fungible_count += group.token_count
            summary.fungible_value_usd = _add_exact(
                summary.fungible_value_usd, usd_value
            )
        else:
            category = ValuationCategory.NON_FUNGIBLE
            summary.non_fungible_count += group.token_count

        result.groups.append(
            GroupValuation(
                name=group.name,
                total_quantity=group.total_quantity,
                token_count=group.token_count,
                decimals=group.decimals,
                display_quantity=display_quantity,
                formatted_quantity=format_quantity(display_quantity),
                category=category,
                usd_value=usd_value,
            )
        )

    logger.debug(
        "Valuated %d groups (%d fungible records, %d non-fungible records)",
        len(result.groups),
        summary.fungible_count,
        summary.non_fungible_count,
    )
    return result
