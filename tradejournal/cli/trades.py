"""Trade commands: log a trade, list the journal, import trades from JSON."""

import json
import sqlite3
from datetime import date
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.panel import Panel
from rich.table import Table

from tradejournal.cli.common import console, currency, fail, format_pnl, get_config, get_store
from tradejournal.models import EMOTIONS, Trade


def _parse_date(ctx, param, value: Optional[str]) -> date:
    if value is None:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Invalid date '{value}'. Use YYYY-MM-DD")


@click.command()
@click.option("--date", "trade_date", callback=_parse_date, default=None,
              help="Trade date (YYYY-MM-DD). Defaults to today.")
@click.option("--entry", "entry_time", required=True, help="Entry time (HH:MM or HH:MM:SS).")
@click.option("--exit", "exit_time", required=True, help="Exit time (HH:MM or HH:MM:SS).")
@click.option("--pair", required=True, help="Instrument symbol (e.g. NAS100, EURUSD).")
@click.option("--pnl", required=True, help="Net P&L of the trade.")
@click.option("--risk", default=None, help="Amount risked.")
@click.option("--emotion", type=click.Choice(EMOTIONS, case_sensitive=False), default=None,
              help="Dominant emotion during the trade.")
@click.option("--type", "trade_type", type=click.Choice(["buy", "sell"], case_sensitive=False),
              default="buy", show_default=True, help="Trade direction.")
@click.option("--strategy", "strategy_id", type=int, default=None, help="Strategy ID.")
@click.option("--account", "account_id", type=int, default=None, help="Account ID.")
@click.option("--broken-rule", "broken_rules", type=int, multiple=True,
              help="ID of a strategy rule broken on this trade (repeatable).")
@click.option("--rating", default=None, help="Setup rating (e.g. A+, B).")
@click.option("--pre-notes", default=None, help="Notes written before the trade.")
@click.option("--post-notes", default=None, help="Notes written after the trade.")
@click.pass_context
def log(
    ctx: click.Context,
    trade_date: date,
    entry_time: str,
    exit_time: str,
    pair: str,
    pnl: str,
    risk: Optional[str],
    emotion: Optional[str],
    trade_type: str,
    strategy_id: Optional[int],
    account_id: Optional[int],
    broken_rules: tuple[int, ...],
    rating: Optional[str],
    pre_notes: Optional[str],
    post_notes: Optional[str],
) -> None:
    """Log a trade to the journal.

    Times are read in the configured timezone. An exit time earlier
    than the entry time is taken to be on the following day.

    \b
    Examples:
      tradejournal log --entry 09:30 --exit 10:15 --pair nas100 --pnl 120
      tradejournal log --date 2024-05-02 --entry 23:30 --exit 00:20 \\
          --pair eurusd --pnl -40 --strategy 1 --broken-rule 2 --emotion Fear
    """
    from tradejournal.entry import build_trade

    store = get_store(ctx)
    symbol = currency(ctx)
    tz_name = get_config(ctx).get("journal", {}).get("timezone", "UTC")

    if broken_rules:
        if strategy_id is None:
            raise click.BadParameter("--broken-rule requires --strategy", param_hint="--broken-rule")
        known = {rule.id for rule in store.get_rules(strategy_id)}
        unknown = [r for r in broken_rules if r not in known]
        if unknown:
            raise click.BadParameter(
                f"Rules {unknown} do not belong to strategy {strategy_id}",
                param_hint="--broken-rule",
            )

    if strategy_id is not None and store.get_strategy(strategy_id) is None:
        fail(f"Strategy {strategy_id} not found.")
    if account_id is not None and store.get_account(account_id) is None:
        fail(f"Account {account_id} not found.")

    if emotion:
        emotion = next(e for e in EMOTIONS if e.lower() == emotion.lower())

    try:
        trade = build_trade(
            trade_date=trade_date,
            entry_time=entry_time,
            exit_time=exit_time,
            pair=pair,
            pnl=pnl,
            risk=risk,
            emotion=emotion,
            trade_type=trade_type.lower(),
            strategy_id=strategy_id,
            account_id=account_id,
            broken_rule_ids=broken_rules,
            setup_rating=rating,
            pre_trade_notes=pre_notes,
            post_trade_notes=post_notes,
            tz_name=tz_name,
        )
    except (ValueError, ValidationError) as e:
        fail(f"Invalid trade:\n\n{e}")

    trade_id = store.log_trade(trade, broken_rule_ids=broken_rules)

    rules_text = "[green]Yes[/green]" if trade.rules_followed else f"[red]No[/red] ({len(broken_rules)} broken)"
    console.print(Panel(
        f"[bold]{trade.pair}[/bold] {trade.trade_type.upper()}\n\n"
        f"Entry:  {trade.entry_time:%Y-%m-%d %H:%M:%S} UTC\n"
        f"Exit:   {trade.exit_time:%Y-%m-%d %H:%M:%S} UTC\n"
        f"P&L:    {format_pnl(trade.pnl_net, symbol)}\n"
        f"Rules followed: {rules_text}",
        title=f"[bold green]Trade #{trade_id} logged[/bold green]",
        border_style="green",
    ))


@click.command()
@click.option("--strategy", "strategy_id", type=int, default=None, help="Filter by strategy ID.")
@click.option("--account", "account_id", type=int, default=None, help="Filter by account ID.")
@click.option("--limit", type=int, default=None, help="Show only the most recent N trades.")
@click.pass_context
def trades(
    ctx: click.Context,
    strategy_id: Optional[int],
    account_id: Optional[int],
    limit: Optional[int],
) -> None:
    """Display the trade journal.

    \b
    Examples:
      tradejournal trades
      tradejournal trades --strategy 1 --limit 20
    """
    store = get_store(ctx)
    symbol = currency(ctx)
    journal = store.get_trades(strategy_id=strategy_id, account_id=account_id)

    if limit is not None:
        journal = journal[-limit:] if limit > 0 else []

    if not journal:
        console.print(Panel(
            "[dim]No trades found[/dim]",
            title="[bold]Trade Journal[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Trade Journal", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Entry (UTC)", style="dim")
    table.add_column("Pair", style="bold")
    table.add_column("Side", justify="center")
    table.add_column("P&L", justify="right")
    table.add_column("R", justify="right")
    table.add_column("Rules", justify="center")
    table.add_column("Emotion")

    total_pnl = 0.0
    for trade in journal:
        side_color = "green" if trade.trade_type == "buy" else "red"
        r_multiple = f"{trade.pnl_net / trade.risk_amount:+.2f}R" if trade.risk_amount else "-"
        table.add_row(
            str(trade.id),
            trade.entry_time.strftime("%Y-%m-%d %H:%M") if trade.entry_time else "-",
            trade.pair or "-",
            f"[{side_color}]{trade.trade_type.upper()}[/{side_color}]",
            format_pnl(trade.pnl_net, symbol),
            r_multiple,
            "[green]✓[/green]" if trade.rules_followed else "[red]✗[/red]",
            trade.emotion or "-",
        )
        total_pnl += trade.pnl_net

    console.print(table)
    console.print(f"\n[bold]Total Trades:[/bold] {len(journal)}")
    console.print(f"[bold]Total P&L:[/bold] {format_pnl(total_pnl, symbol)}")


def unknown_references(trade: Trade, strategy_ids: set[int], account_ids: set[int]) -> list[str]:
    """Errors for strategy or account ids that are not in the journal."""
    errors = []
    if trade.strategy_id is not None and trade.strategy_id not in strategy_ids:
        errors.append(f"strategyId: strategy {trade.strategy_id} not found")
    if trade.account_id is not None and trade.account_id not in account_ids:
        errors.append(f"accountId: account {trade.account_id} not found")
    return errors


@click.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--dry-run", is_flag=True, default=False, help="Validate without saving.")
@click.pass_context
def import_trades(ctx: click.Context, path: Path, dry_run: bool) -> None:
    """Import trades from a JSON file.

    PATH must contain a JSON list of trade objects. Records with an
    unparseable timestamp, or referring to a strategy or account that
    does not exist, are rejected and listed; the rest are saved. Records
    without a timestamp are kept but left out of time-based views.

    \b
    Examples:
      tradejournal import trades.json
      tradejournal import trades.json --dry-run
    """
    from tradejournal.analytics import RejectedRecord, count_untimed, validate_trades

    try:
        records = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        fail(f"Could not read {path}:\n\n{e}")

    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        fail(f"{path} must contain a JSON list of objects.")

    valid, rejected = validate_trades(records)
    rejected_indices = {r.index for r in rejected}
    indexed = list(zip((i for i in range(len(records)) if i not in rejected_indices), valid))

    store = None
    if not dry_run or any(t.strategy_id is not None or t.account_id is not None for t in valid):
        store = get_store(ctx)

    accepted = []
    if store is not None:
        strategy_ids = {s.id for s in store.get_strategies()}
        account_ids = {a.id for a in store.get_accounts()}
        for index, trade in indexed:
            errors = unknown_references(trade, strategy_ids, account_ids)
            if errors:
                rejected.append(RejectedRecord(index=index, errors=errors))
            else:
                accepted.append((index, trade))
    else:
        accepted = indexed

    if not dry_run:
        saved = []
        for index, trade in accepted:
            try:
                store.log_trade(trade)
            except sqlite3.IntegrityError as e:
                rejected.append(RejectedRecord(index=index, errors=[f"database: {e}"]))
                continue
            saved.append((index, trade))
        accepted = saved

    rejected.sort(key=lambda r: r.index)
    untimed = count_untimed(trade for _, trade in accepted)
    verb = "Validated" if dry_run else "Imported"
    summary = (
        f"{verb}: [green]{len(accepted)}[/green] trades\n"
        f"Rejected: [red]{len(rejected)}[/red]"
    )
    if untimed:
        summary += f"\n[yellow]{untimed} without entry time (excluded from time-based views)[/yellow]"

    console.print(Panel(
        summary,
        title="[bold cyan]Import[/bold cyan]",
        border_style="cyan",
    ))

    if rejected:
        table = Table(title="Rejected Records", show_header=True, header_style="bold red")
        table.add_column("#", justify="right")
        table.add_column("Errors")
        for record in rejected:
            table.add_row(str(record.index), "\n".join(record.errors))
        console.print(table)
