"""Rich console formatter for portfolio reports."""

from __future__ import annotations

from rich.columns import Columns
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..constants import NATIVE_TOKEN_SYMBOL
from ..processors import PortfolioValuation, ValuationCategory
from ..units import format_quantity, format_usd

_CATEGORY_LABELS = {
    ValuationCategory.FUNGIBLE: "priced",
    ValuationCategory.NON_FUNGIBLE: "unpriced",
    ValuationCategory.NATIVE: "native",
}


def build_portfolio_panel(
    owner: str, valuation: PortfolioValuation, native_symbol: str = NATIVE_TOKEN_SYMBOL
) -> Panel:
    """Build the two-column dashboard renderable for a valuation."""
    summary = valuation.summary

    owner_table = Table(show_header=False, box=None, padding=(0, 1))
    owner_table.add_column("Key", style="dim")
    owner_table.add_column("Value", style="cyan")
    owner_table.add_row("Owner", Text(owner))
    owner_table.add_row("Assets", str(len(valuation.groups)))
    owner_table.add_row(
        "Records", str(sum(group.token_count for group in valuation.groups))
    )
    owner_panel = Panel(owner_table, title="[bold]Owner[/]", border_style="blue")

    summary_table = Table(show_header=False, box=None, padding=(0, 1))
    summary_table.add_column("Key", style="dim")
    summary_table.add_column("Value", style="green")
    summary_table.add_row("Priced records", str(summary.fungible_count))
    summary_table.add_row("Priced value", format_usd(summary.fungible_value_usd))
    summary_table.add_row("Unpriced records", str(summary.non_fungible_count))
    summary_table.add_row(
        native_symbol,
        f"{format_quantity(summary.native_token_quantity, grouping=True)} "
        f"({summary.native_token_count} records)",
    )
    summary_panel = Panel(summary_table, title="[bold]Summary[/]", border_style="green")

    top_row = Columns([owner_panel, summary_panel], equal=True, expand=True)

    asset_table = Table(title=None, expand=True, show_lines=False)
    asset_table.add_column("Asset", style="cyan", no_wrap=True)
    asset_table.add_column("Kind", style="dim")
    asset_table.add_column("Tokens", justify="right")
    asset_table.add_column("Quantity", justify="right")
    asset_table.add_column("Value (USD)", justify="right", style="green")

    for group in valuation.groups:
        value_display = (
            format_usd(group.usd_value)
            if group.usd_value is not None
            else "[dim]<N/A>[/]"
        )
        asset_table.add_row(
            Text(group.name),
            _CATEGORY_LABELS[group.category],
            str(group.token_count),
            format_quantity(group.display_quantity, grouping=True),
            value_display,
        )

    asset_panel = Panel(asset_table, title="[bold]Assets[/]", border_style="cyan")

    parts: list = [top_row, "", asset_panel]
    if valuation.diagnostics:
        parts += [
            "",
            Panel(
                Text("\n".join(valuation.diagnostics), style="yellow"),
                title="[bold]Diagnostics[/]",
                border_style="yellow",
            ),
        ]

    return Panel(
        Group(*parts),
        title="[bold white]STRATO Portfolio[/]",
        border_style="white",
        padding=(1, 2),
    )


def format_portfolio_table(
    owner: str,
    valuation: PortfolioValuation,
    native_symbol: str = NATIVE_TOKEN_SYMBOL,
    console: Console | None = None,
) -> None:
    """Print the rich formatted dashboard to stdout."""
    console = console or Console()
    console.print()
    console.print(build_portfolio_panel(owner, valuation, native_symbol))
    console.print()
