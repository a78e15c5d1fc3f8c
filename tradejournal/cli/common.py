"""Shared console helpers for CLI commands."""

import click
from rich.console import Console
from rich.panel import Panel

console = Console()


def fail(message: str, title: str = "Error") -> None:
    """Print an error panel and exit with status 1."""
    console.print(Panel(
        f"[red]{message}[/red]",
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


def get_config(ctx: click.Context) -> dict:
    """Configuration loaded by the root command."""
    return ctx.find_root().obj["config"]


def get_store(ctx: click.Context):
    """Data store for the active configuration."""
    from tradejournal.config import get_data_store

    return get_data_store(get_config(ctx))


def currency(ctx: click.Context) -> str:
    return get_config(ctx).get("journal", {}).get("currency", "$")


def format_pnl(value: float, symbol: str = "$") -> str:
    """Colour a P&L amount green/red with an explicit sign."""
    color = "green" if value >= 0 else "red"
    sign = "+" if value >= 0 else "-"
    return f"[{color}]{sign}{symbol}{abs(value):,.2f}[/{color}]"


def percent_bar(pct: float, width: int = 20) -> str:
    """Text progress bar for a 0-100 percentage."""
    filled = int(round(max(0.0, min(pct, 100.0)) / 100 * width))
    return "█" * filled + "░" * (width - filled)
