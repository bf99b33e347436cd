"""Exception types raised across the portfolio pipeline.

All of them are recovered somewhere inside the pipeline; none is expected to
abort a portfolio run.
"""

from __future__ import annotations


class PortfolioError(Exception):
    """Base class for portfolio errors."""


class UpstreamFetchError(PortfolioError):
    """Raised when cirrus is unreachable or answers with an unusable payload."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source


class AuthenticationError(PortfolioError):
    """Raised when a bearer token could not be obtained."""


class MalformedRecordError(PortfolioError, ValueError):
    """Raised when an asset quantity is not a non-negative integer."""


class MalformedPriceError(PortfolioError, ValueError):
    """Raised when a price is not a finite, non-negative decimal."""
