"""Concurrent retrieval of portfolio inputs."""

from __future__ import annotations

import asyncio
from typing import Any, TypeVar

from ..clients.cirrus import CirrusClient
from .context import PipelineContext

T = TypeVar("T")

ASSETS_SOURCE = "assets"
ORACLE_SOURCE = "oracle"


def _resolve_fetch_result(
    source: str,
    result: list[T] | BaseException,
    failures: list[str],
    log: Any,
) -> list[T]:
    """Turn one asyncio.gather result into rows, degrading failures to [].

    Exceptions other than ``Exception`` subclasses (cancellation, interrupts)
    are re-raised.
    """
    if isinstance(result, Exception):
        log.error("Fetching %s failed, continuing without it: %s", source, result)
        failures.append(f"{source} fetch failed: {result}")
        return []
    if isinstance(result, BaseException):
        raise result
    log.debug("Fetched %d %s rows", len(result), source)
    return result


async def fetch_inputs(ctx: PipelineContext, client: CirrusClient) -> None:
    """Fetch asset records and oracle observations concurrently.

    Args:
        ctx: Pipeline context holding the owner to query
        client: Cirrus client used for both queries

    Sets the asset records and observations in the context. A failed fetch
    yields an empty list for that source and a recorded failure.
    """
    s = ctx.state.settings
    log = ctx.state.logger

    async def _no_observations() -> list[Any]:
        return []

    if s.oracle_enabled:
        oracle_task = asyncio.to_thread(client.fetch_oracle_observations)
    else:
        log.info("Oracle prices disabled; all assets will be unpriced")
        oracle_task = _no_observations()

    log.info("Fetching assets for %s and oracle prices...", ctx.owner)
    assets_result, oracle_result = await asyncio.gather(
        asyncio.to_thread(client.fetch_asset_records, ctx.owner),
        oracle_task,
        return_exceptions=True,
    )

    ctx.asset_records = _resolve_fetch_result(
        ASSETS_SOURCE, assets_result, ctx.fetch_failures, log
    )
    ctx.observations = _resolve_fetch_result(
        ORACLE_SOURCE, oracle_result, ctx.fetch_failures, log
    )
