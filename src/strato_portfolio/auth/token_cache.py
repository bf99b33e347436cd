from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable

from ..constants import TOKEN_LIFETIME_RESERVE_SECONDS
from ..logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CachedToken:
    token: str
    expires_at: float  # unix seconds


class TokenCache:
    """Bearer token cache keyed by client id or username.

    Tokens are reused until ``reserve_seconds`` before they expire. Refreshes
    through :meth:`get_or_refresh` are serialized so concurrent callers share
    one refresh instead of each fetching their own token.
    """

    def __init__(
        self,
        reserve_seconds: int = TOKEN_LIFETIME_RESERVE_SECONDS,
        now: Callable[[], float] = time.time,
    ):
        self.reserve_seconds = reserve_seconds
        self._now = now
        self._tokens: dict[str, CachedToken] = {}
        self._lock = threading.Lock()

    def _is_fresh(self, cached: CachedToken | None) -> bool:
        return (
            cached is not None
            and bool(cached.token)
            and cached.expires_at > self._now() + self.reserve_seconds
        )

    def get(self, key: str) -> str | None:
        """Return the cached token for ``key`` if it is still usable."""
        cached = self._tokens.get(key)
        return cached.token if self._is_fresh(cached) else None

    def put(self, key: str, token: str, expires_at: float) -> None:
        self._tokens[key] = CachedToken(token=token, expires_at=expires_at)

    def invalidate(self, key: str) -> None:
        self._tokens.pop(key, None)

    def get_or_refresh(
        self, key: str, fetch: Callable[[], CachedToken]
    ) -> str:
        """Return a usable token, calling ``fetch`` only when none is cached.

        Args:
            key: Cache key, usually the OAuth client id or username
            fetch: Callable obtaining a fresh token and its expiry

        Returns:
            The bearer token
        """
        token = self.get(key)
        if token is not None:
            logger.debug("Returning cached token for %s", key)
            return token

        with self._lock:
            # Another caller may have refreshed while we waited for the lock
            token = self.get(key)
            if token is not None:
                return token

            fresh = fetch()
            self._tokens[key] = fresh
            logger.info(
                "New OAuth token for %s expires in %ds",
                key,
                int(fresh.expires_at - self._now()),
            )
            return fresh.token
