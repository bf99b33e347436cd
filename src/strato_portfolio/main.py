"""CLI entrypoint for the STRATO portfolio tool."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Annotated

import typer

from .logger import setup_logging
from .settings import CONFIG_ENV_VAR, PortfolioSettings
from .state import AppState

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    add_help_option=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="Show a STRATO user's tokenized assets valued with oracle prices.",
)


def _build_logger() -> logging.Logger:
    """Build a logger instance."""
    return logging.getLogger("strato_portfolio")


@app.command()
def report(
    owner: Annotated[
        str | None, typer.Argument(help="Owner common name to look up.")
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML config file (can include [strato_portfolio] table).",
        ),
    ] = None,
    marketplace_url: Annotated[
        str | None,
        typer.Option(
            "--marketplace-url",
            help="Host of the STRATO marketplace serving /cirrus/search.",
        ),
    ] = None,
    oracle_enabled: Annotated[
        bool | None,
        typer.Option(
            "--oracle/--no-oracle",
            help="Fetch oracle prices to value assets.",
        ),
    ] = None,
    global_timeout_seconds: Annotated[
        float | None,
        typer.Option(
            "--global-timeout-seconds",
            help="Abort the run after this many seconds (0 disables).",
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Override logging verbosity (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).",
        ),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the valuation as JSON instead of a table."),
    ] = False,
    show_config: Annotated[
        bool,
        typer.Option(
            "--show-config",
            help="Print effective config (with secrets redacted) and exit.",
        ),
    ] = False,
):
    """Fetch a user's assets and oracle prices, then print the valuation.

    This is the default command: it loads configuration, validates it and
    runs the portfolio pipeline for the configured or given owner.
    """
    if config_path:
        os.environ[CONFIG_ENV_VAR] = str(config_path)

    init_kwargs: dict[str, bool | float | str] = {}
    if owner is not None:
        init_kwargs["owner_common_name"] = owner
    if marketplace_url is not None:
        init_kwargs["marketplace_url"] = marketplace_url
    if oracle_enabled is not None:
        init_kwargs["oracle_enabled"] = oracle_enabled
    if global_timeout_seconds is not None:
        init_kwargs["global_timeout_seconds"] = global_timeout_seconds
    if log_level is not None:
        init_kwargs["log_level"] = log_level.upper()

    settings = PortfolioSettings(**init_kwargs)

    setup_logging(settings.log_level)
    state = AppState(settings=settings, logger=_build_logger())

    if show_config:
        typer.echo(json.dumps(settings.as_safe_dict(), indent=2))
        raise typer.Exit(code=0)

    if not settings.owner_common_name:
        raise typer.BadParameter(
            "owner_common_name must be configured",
            param_hint=["OWNER", "STRATO_PORTFOLIO_OWNER_COMMON_NAME"],
        )
    if not settings.marketplace_url:
        raise typer.BadParameter(
            "marketplace_url must be configured",
            param_hint=["--marketplace-url", "STRATO_PORTFOLIO_MARKETPLACE_URL"],
        )
    if not settings.client_id:
        raise typer.BadParameter(
            "client_id must be configured",
            param_hint=["STRATO_PORTFOLIO_CLIENT_ID"],
        )

    from .pipeline.run import run_portfolio
    from .report import format_portfolio_table, valuation_to_dict

    owner_name = settings.owner_common_name_required
    valuation = asyncio.run(run_portfolio(state, owner_name))

    if as_json:
        typer.echo(json.dumps(valuation_to_dict(owner_name, valuation), indent=2))
    else:
        format_portfolio_table(owner_name, valuation, settings.native_token_symbol)


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
