"""JSON-ready rendering of a portfolio valuation."""

from __future__ import annotations

from decimal import Decimal

from ..processors import GroupValuation, PortfolioValuation
from ..units import format_quantity


def _decimal_str(value: Decimal | None) -> str | None:
    return None if value is None else format(value, "f")


def _group_to_dict(group: GroupValuation) -> dict[str, object]:
    return {
        "name": group.name,
        "category": group.category.value,
        "token_count": group.token_count,
        "decimals": group.decimals,
        "total_quantity": str(group.total_quantity),
        "display_quantity": group.formatted_quantity,
        "exact_quantity": _decimal_str(group.display_quantity),
        "usd_value": _decimal_str(group.usd_value),
    }


def valuation_to_dict(owner: str, valuation: PortfolioValuation) -> dict[str, object]:
    """Convert a valuation to plain JSON types.

    Decimals and big integers are emitted as strings so no precision is lost
    on the consumer side.
    """
    summary = valuation.summary
    return {
        "owner": owner,
        "assets": [_group_to_dict(group) for group in valuation.groups],
        "summary": {
            "fungible_count": summary.fungible_count,
            "fungible_value_usd": _decimal_str(summary.fungible_value_usd),
            "non_fungible_count": summary.non_fungible_count,
            "native_token_count": summary.native_token_count,
            "native_token_quantity": format_quantity(summary.native_token_quantity),
        },
        "diagnostics": list(valuation.diagnostics),
    }
