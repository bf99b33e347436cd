"""High-level pipeline orchestration."""

from __future__ import annotations

import asyncio

from ..auth import OAuthClient
from ..clients.cirrus import CirrusClient
from ..processors import PortfolioValuation, build_price_index, group_assets, valuate
from ..settings import PortfolioSettings
from ..state import AppState
from .context import PipelineContext
from .fetch import fetch_inputs


def build_cirrus_client(settings: PortfolioSettings) -> CirrusClient:
    """Create a cirrus client authenticated through the OAuth token cache."""
    oauth = OAuthClient(settings)
    return CirrusClient(
        settings,
        token_provider=oauth.get_token,
        on_unauthorized=oauth.invalidate_token,
    )


def compute_portfolio(ctx: PipelineContext) -> None:
    """Aggregate, index and valuate the fetched inputs.

    Args:
        ctx: Pipeline context with asset records and observations set

    Sets the groups, price index and valuation in the context.
    """
    log = ctx.state.logger
    s = ctx.state.settings

    ctx.groups = group_assets(ctx.asset_records_required)
    log.debug("Grouped %d records into %d assets", len(ctx.asset_records_required), len(ctx.groups))

    ctx.prices = build_price_index(ctx.observations_required)
    log.debug("Price index holds %d symbols", len(ctx.prices))

    valuation = valuate(ctx.groups, ctx.prices, native_symbol=s.native_token_symbol)
    valuation.diagnostics[:0] = ctx.fetch_failures
    ctx.valuation = valuation


async def run_portfolio(
    state: AppState,
    owner: str,
    client: CirrusClient | None = None,
) -> PortfolioValuation:
    """Execute the portfolio pipeline for one owner.

    1. Fetch asset records and oracle observations (concurrently)
    2. Group assets and build the price index
    3. Valuate

    Args:
        state: Application state containing settings and logger
        owner: Owner common name to report on
        client: Optional cirrus client; built from settings when omitted

    Returns:
        The valuated portfolio. Upstream failures degrade to empty inputs and
        show up in ``diagnostics``.
    """
    s = state.settings
    log = state.logger
    log.info("Starting portfolio run", extra={"owner": owner})

    if client is None:
        client = build_cirrus_client(s)

    ctx = PipelineContext(state=state, owner=owner)
    timeout_s = s.global_timeout_seconds

    async def _run_pipeline() -> None:
        await fetch_inputs(ctx, client)
        compute_portfolio(ctx)

    try:
        if timeout_s is None or timeout_s <= 0:
            await _run_pipeline()
        else:
            async with asyncio.timeout(timeout_s):
                await _run_pipeline()
    except asyncio.TimeoutError as exc:
        log.error(
            "Portfolio run timed out",
            extra={"owner": owner, "timeout_seconds": timeout_s},
        )
        raise asyncio.TimeoutError(
            f"Portfolio run exceeded global timeout {timeout_s}s (owner={owner})\n"
            "N.B. This can be changed via `global_timeout_seconds` "
            "or CLI flag `--global-timeout-seconds`."
        ) from exc

    log.info("Portfolio run completed", extra={"owner": owner})
    return ctx.valuation_required
