"""OAuth bearer token acquisition for the STRATO node."""

from __future__ import annotations

import time
from typing import Any, Callable

import requests

from ..clients.retry import with_retries
from ..exceptions import AuthenticationError
from ..logger import get_logger
from ..settings import PortfolioSettings
from .token_cache import CachedToken, TokenCache

logger = get_logger(__name__)

OAUTH_SCOPE = "email openid"
TOKEN_FIELD = "access_token"


def _expiry_from_response(payload: dict[str, Any], now: float) -> float:
    """Absolute expiry (unix seconds) of a token response.

    ``expires_in`` is relative; ``expires_at`` is absolute and may be given in
    milliseconds. A response with neither is treated as already expired so
    the token is used once and never cached.
    """
    if payload.get("expires_in") is not None:
        return now + float(payload["expires_in"])
    if payload.get("expires_at") is not None:
        expires_at = float(payload["expires_at"])
        if expires_at > 1e12:
            expires_at /= 1000
        return expires_at
    return now


class OAuthClient:
    """Fetches bearer tokens with the client-credentials or password grant."""

    def __init__(
        self,
        settings: PortfolioSettings,
        cache: TokenCache | None = None,
        session: requests.Session | None = None,
        now: Callable[[], float] = time.time,
    ):
        self.settings = settings
        self.cache = cache or TokenCache(
            reserve_seconds=settings.token_lifetime_reserve_seconds, now=now
        )
        self.session = session or requests.Session()
        self._now = now
        self._token_endpoint: str | None = None

    @property
    def cache_key(self) -> str:
        if self.settings.uses_password_grant and self.settings.username:
            return self.settings.username
        return self.settings.client_id_required

    def _get_json(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        @with_retries(self.settings.max_retries)
        def _request() -> requests.Response:
            response = self.session.request(
                method, url, timeout=self.settings.request_timeout, **kwargs
            )
            response.raise_for_status()
            return response

        payload = _request().json()
        if not isinstance(payload, dict):
            raise AuthenticationError(f"Unexpected response from {url}: {payload!r}")
        return payload

    def token_endpoint(self) -> str:
        """Resolve the token endpoint from the OpenID discovery document."""
        if self._token_endpoint is None:
            discovery = self._get_json("GET", self.settings.openid_discovery_url)
            endpoint = discovery.get("token_endpoint")
            if not endpoint:
                raise AuthenticationError(
                    "OpenID discovery document has no token_endpoint"
                )
            self._token_endpoint = str(endpoint)
            logger.debug("Resolved token endpoint %s", self._token_endpoint)
        return self._token_endpoint

    def _token_request_data(self) -> dict[str, str]:
        s = self.settings
        client_secret = s.client_secret.get_secret_value() if s.client_secret else ""
        data = {
            "client_id": s.client_id_required,
            "client_secret": client_secret,
            "scope": OAUTH_SCOPE,
        }
        if s.uses_password_grant and s.username and s.password:
            data.update(
                grant_type="password",
                username=s.username,
                password=s.password.get_secret_value(),
            )
        else:
            data["grant_type"] = "client_credentials"
        return data

    def fetch_token(self) -> CachedToken:
        """Request a new token from the identity provider.

        Raises:
            AuthenticationError: If discovery or the token request fails, or
                the response carries no access token.
        """
        try:
            payload = self._get_json(
                "POST", self.token_endpoint(), data=self._token_request_data()
            )
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error("Error fetching OAuth token: %s", e)
            raise AuthenticationError("Failed to fetch OAuth token") from e

        token = payload.get(TOKEN_FIELD)
        if not token:
            raise AuthenticationError(f"Token response has no '{TOKEN_FIELD}' field")
        return CachedToken(
            token=str(token),
            expires_at=_expiry_from_response(payload, self._now()),
        )

    def get_token(self) -> str:
        """Return a cached token, refreshing it when close to expiry."""
        try:
            key = self.cache_key
        except ValueError as e:
            raise AuthenticationError(str(e)) from e
        return self.cache.get_or_refresh(key, self.fetch_token)

    def invalidate_token(self) -> None:
        """Drop the cached token so the next request fetches a new one."""
        try:
            key = self.cache_key
        except ValueError:
            # no client id, so nothing was ever cached
            return
        self.cache.invalidate(key)
        logger.info("Invalidated cached OAuth token for %s", key)
