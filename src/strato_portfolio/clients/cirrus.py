"""Client for the cirrus search endpoint of a STRATO node."""

from __future__ import annotations

from typing import Any, Callable

import requests

from ..domain import AssetRecord, OracleObservation
from ..exceptions import UpstreamFetchError
from ..logger import get_logger
from ..settings import PortfolioSettings
from .retry import with_retries

logger = get_logger(__name__)

OWNER_FILTER_FIELD = "ownerCommonName"


def owner_filter(owner_common_name: str) -> str:
    """PostgREST-style exact-match filter for an owner common name."""
    if owner_common_name.startswith("eq."):
        return owner_common_name
    return f"eq.{owner_common_name}"


def _is_unauthorized(exc: Exception) -> bool:
    return (
        isinstance(exc, requests.exceptions.HTTPError)
        and exc.response is not None
        and exc.response.status_code == 401
    )


class CirrusClient:
    """Authenticated read-only access to cirrus tables."""

    def __init__(
        self,
        settings: PortfolioSettings,
        token_provider: Callable[[], str],
        session: requests.Session | None = None,
        on_unauthorized: Callable[[], None] | None = None,
    ):
        """Initialize the client.

        Args:
            settings: Portfolio settings (marketplace URL, tables, timeouts)
            token_provider: Returns a bearer token; called once per request
            session: Optional preconfigured session, mostly for tests
            on_unauthorized: Called when cirrus rejects the bearer token
        """
        self.settings = settings
        self.base_url = settings.cirrus_url
        self.token_provider = token_provider
        self.on_unauthorized = on_unauthorized
        self.session = session or requests.Session()
        self.session.headers.update(
            {"Accept": "application/json", "Content-Type": "application/json"}
        )

    def search(self, table: str, params: dict[str, str] | None = None) -> list[dict[str, Any]]:
        """Query one cirrus table.

        Args:
            table: Table name, e.g. ``BlockApps-Mercata-Asset``
            params: Query string filters

        Returns:
            The rows that are JSON objects; other entries are skipped

        Raises:
            UpstreamFetchError: If the request fails after retries or the
                payload is not a list
        """
        url = f"{self.base_url}/{table}"

        @with_retries(self.settings.max_retries)
        def _request() -> requests.Response:
            response = self.session.get(
                url,
                params=params,
                headers={"Authorization": f"Bearer {self.token_provider()}"},
                timeout=self.settings.request_timeout,
            )
            response.raise_for_status()
            return response

        try:
            payload = _request().json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error("Cirrus request to %s failed: %s", table, e)
            if _is_unauthorized(e) and self.on_unauthorized is not None:
                self.on_unauthorized()
            raise UpstreamFetchError(table, str(e)) from e

        if not isinstance(payload, list):
            raise UpstreamFetchError(
                table, f"expected a list of rows, got {type(payload).__name__}"
            )

        rows = [row for row in payload if isinstance(row, dict)]
        if len(rows) != len(payload):
            logger.warning(
                "Skipped %d non-object rows from %s", len(payload) - len(rows), table
            )
        logger.debug("Cirrus %s returned %d rows", table, len(rows))
        return rows

    def fetch_asset_records(self, owner_common_name: str) -> list[AssetRecord]:
        rows = self.search(
            self.settings.asset_table,
            {OWNER_FILTER_FIELD: owner_filter(owner_common_name)},
        )
        return [AssetRecord.from_json(row) for row in rows]

    def fetch_oracle_observations(self) -> list[OracleObservation]:
        rows = self.search(self.settings.oracle_table)
        return [OracleObservation.from_json(row) for row in rows]
