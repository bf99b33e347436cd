"""Static asset tables and endpoint defaults."""

from typing import NamedTuple, Optional


class PriceAlias(NamedTuple):
    """One entry of the price aliasing table.

    Exactly one of ``source`` (copy that symbol's observed price) or
    ``pinned`` (literal price) is set.
    """

    target: str
    source: Optional[str] = None
    pinned: Optional[str] = None


NATIVE_TOKEN_SYMBOL = "STRAT"
UNNAMED_ASSET = "Unnamed Asset"

DEFAULT_DECIMALS = 0

# Reported decimals for these assets are wrong upstream
DECIMALS_OVERRIDES: dict[str, int] = {
    "ETH": 18,
    "ETHST": 18,
    NATIVE_TOKEN_SYMBOL: 4,
}

USD_PEGGED_SYMBOLS: tuple[str, ...] = ("USDCST", "USDTST", "USDST")

# Order matters: applied once, top to bottom, after the direct observations.
PRICE_ALIASES: tuple[PriceAlias, ...] = (
    PriceAlias("ETHST", source="ETH"),
    PriceAlias("GOLDST", source="Gold"),
    PriceAlias("SILVST", source="Silver"),
    PriceAlias(NATIVE_TOKEN_SYMBOL, pinned="1"),
    *(PriceAlias(symbol, pinned="1") for symbol in USD_PEGGED_SYMBOLS),
    PriceAlias("WBTCST", source="BTC"),
)

DEFAULT_OPENID_DISCOVERY_URL = (
    "https://keycloak.blockapps.net/auth/realms/mercata/"
    ".well-known/openid-configuration"
)
DEFAULT_ASSET_TABLE = "BlockApps-Mercata-Asset"
DEFAULT_ORACLE_TABLE = "BlockApps-Mercata-PriceOracle-PriceUpdated"
CIRRUS_SEARCH_PATH = "/cirrus/search"

DEFAULT_REQUEST_TIMEOUT = 60.0
TOKEN_LIFETIME_RESERVE_SECONDS = 120  # refresh tokens 2 minutes before expiry

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

# Valuations below one cent are shown as one cent
MIN_DISPLAY_USD = "0.01"
