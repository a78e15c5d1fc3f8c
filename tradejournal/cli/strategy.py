"""Strategy commands: strategies, their rules, and strategy reports."""

import sqlite3

import click
from pydantic import ValidationError
from rich.columns import Columns
from rich.panel import Panel
from rich.table import Table

from tradejournal.cli.common import console, currency, fail, format_pnl, get_store, percent_bar
from tradejournal.models import NO_RULE, Rule, StrategyReport, StrategyStats


@click.group()
def strategy() -> None:
    """Manage strategies and view strategy reports.

    \b
    Examples:
      tradejournal strategy add "London Breakout"
      tradejournal strategy list
      tradejournal strategy report 1
    """
    pass


@strategy.command("add")
@click.argument("name")
@click.pass_context
def add_strategy(ctx: click.Context, name: str) -> None:
    """Create a strategy named NAME."""
    store = get_store(ctx)
    try:
        created = store.create_strategy(name)
    except sqlite3.IntegrityError:
        fail(f"Strategy '{name}' already exists.")
    except ValidationError:
        fail("Strategy name must not be empty.")

    console.print(
        f"[green]✓[/green] Created strategy [bold]{created.name}[/bold] (id {created.id})"
    )


@strategy.command("list")
@click.pass_context
def list_strategies(ctx: click.Context) -> None:
    """List strategies with their rule and trade counts."""
    store = get_store(ctx)
    strategies = store.get_strategies()

    if not strategies:
        console.print(Panel(
            "[dim]No strategies found[/dim]\n\n"
            "Run [cyan]tradejournal strategy add NAME[/cyan] to create one.",
            title="[bold]Strategies[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Strategies", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Rules", justify="right")
    table.add_column("Trades", justify="right")

    for strat in strategies:
        table.add_row(
            str(strat.id),
            strat.name,
            str(len(store.get_rules(strat.id))),
            str(len(store.get_trades(strategy_id=strat.id))),
        )

    console.print(table)


def resolve_rule_label(stats: StrategyStats, rules: list[Rule]) -> str:
    """Display text for the most broken rule."""
    identifier = stats.most_broken_rule
    if identifier == NO_RULE:
        return identifier
    if not stats.most_broken_is_rule:
        return "Unrecorded rule"
    for rule in rules:
        if str(rule.id) == identifier:
            return rule.text
    return f"Rule {identifier}"


def render_report(report: StrategyReport, rules: list[Rule], symbol: str) -> None:
    """Print every section of a strategy report."""
    from tradejournal.cli.dashboard import render_calendar

    stats = report.stats
    console.print(f"\n[bold]Report: {report.strategy_name}[/bold]\n")

    cards = [
        Panel(f"[bold green]{stats.realized_win_pct:.1f}%[/bold green]", title="Realized Win %", border_style="cyan"),
        Panel(f"[bold blue]{stats.rules_followed_win_pct:.1f}%[/bold blue]", title="Rules Followed Win %", border_style="cyan"),
        Panel(f"[bold]{stats.current_streak}[/bold]", title="Current Streak", border_style="cyan"),
        Panel(
            f"[bold]{resolve_rule_label(stats, rules)}[/bold]",
            title="Most Broken Rule",
            border_style="cyan",
        ),
    ]
    console.print(Columns(cards))

    if report.untimed_trades:
        console.print(
            f"[yellow]{report.untimed_trades} trade(s) without entry time are "
            "left out of the equity curve and calendar.[/yellow]"
        )

    if report.equity_curve:
        table = Table(title="Cumulative Performance", show_header=True, header_style="bold cyan")
        table.add_column("Date (UTC)", style="dim")
        table.add_column("Cumulative P&L", justify="right")
        for point in report.equity_curve:
            table.add_row(point.date.isoformat(), format_pnl(point.cumulative_pnl, symbol))
        console.print(table)

    table = Table(title="Performance Profile", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    for metric in report.radar:
        table.add_row(metric.name, f"{metric.value:,.2f}")
    console.print(table)

    if report.rule_compliance:
        table = Table(title="Rule Analysis", show_header=True, header_style="bold cyan")
        table.add_column("Rule", style="bold", max_width=40)
        table.add_column("Broken", justify="right")
        table.add_column("Trades", justify="right")
        table.add_column("Compliance", justify="right")
        table.add_column("")
        for row in report.rule_compliance:
            table.add_row(
                row.rule_text,
                str(row.broken_count),
                str(row.total_trades),
                f"{row.compliance_pct:.0f}%",
                percent_bar(row.compliance_pct),
            )
        console.print(table)
    else:
        console.print("[dim]No rules defined for this strategy.[/dim]")

    if report.calendar:
        render_calendar(report.calendar, symbol)


@strategy.command("report")
@click.argument("strategy_id", type=int)
@click.pass_context
def report(ctx: click.Context, strategy_id: int) -> None:
    """Display the performance report of strategy STRATEGY_ID.

    \b
    Examples:
      tradejournal strategy report 1
    """
    from tradejournal.analytics import build_strategy_report

    store = get_store(ctx)
    strat = store.get_strategy(strategy_id)
    if strat is None:
        fail(f"Strategy {strategy_id} not found.")

    rules = store.get_rules(strategy_id)
    trades = store.get_trades(strategy_id=strategy_id)
    broken_rules = store.get_broken_rules(t.id for t in trades)

    built = build_strategy_report(strat, rules, trades, broken_rules)
    render_report(built, rules, currency(ctx))


@click.group()
def rule() -> None:
    """Manage the rules of a strategy.

    \b
    Examples:
      tradejournal rule add 1 "Wait for the 5m close"
      tradejournal rule list 1
    """
    pass


@rule.command("add")
@click.argument("strategy_id", type=int)
@click.argument("text")
@click.pass_context
def add_rule(ctx: click.Context, strategy_id: int, text: str) -> None:
    """Attach rule TEXT to strategy STRATEGY_ID."""
    store = get_store(ctx)
    if store.get_strategy(strategy_id) is None:
        fail(f"Strategy {strategy_id} not found.")

    try:
        created = store.add_rule(strategy_id, text)
    except ValidationError:
        fail("Rule text must not be empty.")
    console.print(f"[green]✓[/green] Added rule {created.id} to strategy {strategy_id}")


@rule.command("list")
@click.argument("strategy_id", type=int)
@click.pass_context
def list_rules(ctx: click.Context, strategy_id: int) -> None:
    """List the rules of strategy STRATEGY_ID."""
    store = get_store(ctx)
    rules = store.get_rules(strategy_id)

    if not rules:
        console.print(Panel(
            f"[dim]No rules for strategy {strategy_id}[/dim]",
            title="[bold]Rules[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title=f"Rules of strategy {strategy_id}", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Rule")
    for r in rules:
        table.add_row(str(r.id), r.text)
    console.print(table)
