from __future__ import annotations

from .oauth import OAuthClient
from .token_cache import CachedToken, TokenCache

__all__ = ["CachedToken", "OAuthClient", "TokenCache"]
