"""Setup commands: configuration file and trading accounts."""

import sqlite3

import click
from pydantic import ValidationError
from rich.panel import Panel
from rich.table import Table

from tradejournal.cli.common import console, currency, fail, format_pnl, get_store


@click.command()
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing config file.")
@click.pass_context
def init(ctx: click.Context, force: bool) -> None:
    """Create a template configuration file.

    \b
    Examples:
      tradejournal init
      tradejournal --config ./journal.toml init
    """
    from tradejournal.config import create_template_config, resolve_config_path

    path = resolve_config_path(ctx.find_root().obj.get("config_path"))
    if path.exists() and not force:
        console.print(Panel(
            f"[yellow]Config already exists at[/yellow] [cyan]{path}[/cyan]\n\n"
            "Use [cyan]--force[/cyan] to overwrite it.",
            title="[bold yellow]Init[/bold yellow]",
            border_style="yellow",
        ))
        return

    written = create_template_config(path)
    console.print(Panel(
        f"[green]Config written to[/green] [cyan]{written}[/cyan]\n\n"
        "[dim]Edit db_path, timezone and currency to taste.[/dim]",
        title="[bold green]Init[/bold green]",
        border_style="green",
    ))


@click.group()
def account() -> None:
    """Manage trading accounts.

    Logging a trade against an account adds its P&L to the
    account's current capital.

    \b
    Examples:
      tradejournal account add "Prop 50K" --capital 50000
      tradejournal account list
    """
    pass


@account.command("add")
@click.argument("name")
@click.option("--capital", type=float, default=0.0, help="Initial capital.")
@click.pass_context
def add_account(ctx: click.Context, name: str, capital: float) -> None:
    """Create an account named NAME."""
    store = get_store(ctx)
    try:
        created = store.create_account(name, capital)
    except sqlite3.IntegrityError:
        fail(f"Account '{name}' already exists.")
    except ValidationError:
        fail("Account name must not be empty.")

    console.print(
        f"[green]✓[/green] Created account [bold]{created.name}[/bold] (id {created.id})"
    )


@account.command("list")
@click.pass_context
def list_accounts(ctx: click.Context) -> None:
    """List accounts with their capital."""
    store = get_store(ctx)
    accounts = store.get_accounts()
    symbol = currency(ctx)

    if not accounts:
        console.print(Panel(
            "[dim]No accounts found[/dim]",
            title="[bold]Accounts[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Accounts", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Initial", justify="right")
    table.add_column("Current", justify="right")
    table.add_column("Change", justify="right")

    for acc in accounts:
        table.add_row(
            str(acc.id),
            acc.name,
            f"{symbol}{acc.initial_capital:,.2f}",
            f"{symbol}{acc.current_capital:,.2f}",
            format_pnl(acc.current_capital - acc.initial_capital, symbol),
        )

    console.print(table)
