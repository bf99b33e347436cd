from __future__ import annotations

from .asset_aggregator import AssetGroup, group_assets, parse_quantity
from .decimals import resolve_decimals
from .price_index import PriceIndex, apply_price_aliases, build_price_index
from .valuation import (
    GroupValuation,
    PortfolioSummary,
    PortfolioValuation,
    ValuationCategory,
    compute_usd_value,
    parse_price,
    valuate,
)

__all__ = [
    "AssetGroup",
    "group_assets",
    "parse_quantity",
    "resolve_decimals",
    "PriceIndex",
    "apply_price_aliases",
    "build_price_index",
    "GroupValuation",
    "PortfolioSummary",
    "PortfolioValuation",
    "ValuationCategory",
    "compute_usd_value",
    "parse_price",
    "valuate",
]
