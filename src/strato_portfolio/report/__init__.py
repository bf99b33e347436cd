from __future__ import annotations

from .formatter import build_portfolio_panel, format_portfolio_table
from .serializer import valuation_to_dict

__all__ = [
    "build_portfolio_panel",
    "format_portfolio_table",
    "valuation_to_dict",
]
