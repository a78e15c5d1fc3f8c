"""Dashboard commands: headline metrics, equity curve, hourly P&L and calendar."""

from typing import Optional

import click
from rich.columns import Columns
from rich.panel import Panel
from rich.table import Table

from tradejournal.analytics import (
    build_equity_curve,
    calendar_days,
    hourly_pnl_from_buckets,
    hourly_pnl_from_trades,
    split_from_overall_stats,
    split_from_trades,
    summarize_trades,
)
from tradejournal.cli.common import console, currency, fail, format_pnl, get_store, percent_bar
from tradejournal.models import NO_EMOTION, OverallStats, Trade


def build_dashboard(
    trades: list[Trade],
    overall_stats: Optional[OverallStats] = None,
    hourly_rows: Optional[list[dict]] = None,
) -> dict:
    """Compute every dashboard section.

    The store-side shortcuts are optional; without them each section is
    derived from the raw trades, with the same result.

    Args:
        trades: Trades ascending by entry time.
        overall_stats: Precomputed win/loss/breakeven counts and emotion.
        hourly_rows: Precomputed sparse per-hour totals.

    Returns:
        Dictionary with summary, split, equity and hourly sections.
    """
    summary = summarize_trades(trades)

    if overall_stats is not None:
        split = split_from_overall_stats(overall_stats)
        summary = summary.model_copy(
            update={"most_frequent_emotion": overall_stats.most_frequent_emotion or NO_EMOTION}
        )
    else:
        split = split_from_trades(trades)

    if hourly_rows is not None:
        hourly = hourly_pnl_from_buckets(hourly_rows)
    else:
        hourly = hourly_pnl_from_trades(trades)

    return {
        "summary": summary,
        "split": split,
        "equity": build_equity_curve(trades),
        "hourly": hourly,
    }


@click.command()
@click.option("--account", "account_id", type=int, default=None, help="Only this account's trades.")
@click.option("--points", type=int, default=10, show_default=True,
              help="Number of most recent equity-curve points to show.")
@click.option("--server-aggregates", is_flag=True, default=False,
              help="Use the store's precomputed aggregates for the split and hourly P&L.")
@click.pass_context
def dashboard(
    ctx: click.Context,
    account_id: Optional[int],
    points: int,
    server_aggregates: bool,
) -> None:
    """Display the performance dashboard.

    \b
    Examples:
      tradejournal dashboard
      tradejournal dashboard --account 1 --points 20
    """
    if server_aggregates and account_id is not None:
        raise click.BadParameter(
            "--server-aggregates covers the whole journal and cannot be combined with --account",
            param_hint="--server-aggregates",
        )

    store = get_store(ctx)
    symbol = currency(ctx)
    trades = store.get_trades(account_id=account_id)

    if server_aggregates:
        data = build_dashboard(trades, store.get_overall_stats(), store.get_pnl_by_hour())
    else:
        data = build_dashboard(trades)

    summary = data["summary"]
    split = data["split"]

    # Headline cards
    win_rate_text = f"{split.win_rate:.1f}%" if split.has_trades else "[dim]No trades[/dim]"
    cards = [
        Panel(f"[bold]{summary.total_trades}[/bold]", title="Trades", border_style="cyan"),
        Panel(format_pnl(summary.pnl_total, symbol), title="Net P&L", border_style="cyan"),
        Panel(
            f"[bold]{win_rate_text}[/bold]\n"
            f"[dim]W: {split.wins}  L: {split.losses}  BE: {split.breakeven}[/dim]",
            title="Win Rate",
            border_style="cyan",
        ),
        Panel(f"[bold]{summary.rule_compliance_rate:.1f}%[/bold]", title="Rule Compliance", border_style="cyan"),
        Panel(f"[bold]{summary.most_frequent_emotion}[/bold]", title="Top Emotion", border_style="cyan"),
    ]
    console.print(Columns(cards))

    if summary.untimed_trades:
        console.print(
            f"[yellow]{summary.untimed_trades} trade(s) without entry time are "
            "left out of the equity curve and hourly P&L.[/yellow]"
        )

    # Equity curve
    equity = data["equity"]
    if equity:
        table = Table(title="Equity Curve", show_header=True, header_style="bold cyan")
        table.add_column("Date (UTC)", style="dim")
        table.add_column("Trade", justify="right", style="dim")
        table.add_column("Cumulative P&L", justify="right")
        for point in equity[-points:] if points > 0 else []:
            table.add_row(
                point.date.isoformat(),
                str(point.trade_id) if point.trade_id is not None else "-",
                format_pnl(point.cumulative_pnl, symbol),
            )
        console.print(table)

    # Hourly P&L
    hourly = data["hourly"]
    peak = max((abs(h.pnl) for h in hourly), default=0.0)
    table = Table(title="P&L by Hour (UTC)", show_header=True, header_style="bold cyan")
    table.add_column("Hour", justify="right")
    table.add_column("P&L", justify="right")
    table.add_column("")
    for bucket in hourly:
        if bucket.pnl == 0:
            continue
        color = "green" if bucket.pnl > 0 else "red"
        width = int(round(abs(bucket.pnl) / peak * 20)) if peak else 0
        table.add_row(
            f"{bucket.hour:02d}:00",
            format_pnl(bucket.pnl, symbol),
            f"[{color}]{'█' * width}[/{color}]",
        )
    if table.row_count:
        console.print(table)


@click.command()
@click.option("--month", default=None, help="Only show this month (YYYY-MM).")
@click.option("--strategy", "strategy_id", type=int, default=None, help="Only this strategy's trades.")
@click.pass_context
def calendar(ctx: click.Context, month: Optional[str], strategy_id: Optional[int]) -> None:
    """Display daily P&L and rule compliance.

    \b
    Examples:
      tradejournal calendar
      tradejournal calendar --month 2024-05 --strategy 1
    """
    store = get_store(ctx)
    symbol = currency(ctx)
    days = calendar_days(store.get_trades(strategy_id=strategy_id))

    if month:
        try:
            year_str, month_str = month.split("-")
            year, month_num = int(year_str), int(month_str)
        except ValueError:
            fail(f"Invalid month '{month}'. Use YYYY-MM")
        days = [d for d in days if d.date.year == year and d.date.month == month_num]

    if not days:
        console.print(Panel(
            "[dim]No trading days found[/dim]",
            title="[bold]P&L Calendar[/bold]",
            border_style="dim",
        ))
        return

    render_calendar(days, symbol)


def render_calendar(days, symbol: str) -> None:
    """Print a table of CalendarDay rows."""
    table = Table(title="P&L Calendar", show_header=True, header_style="bold cyan")
    table.add_column("Date", style="bold")
    table.add_column("Day", style="dim")
    table.add_column("Trades", justify="right")
    table.add_column("P&L", justify="right")
    table.add_column("Rules Followed", justify="right")
    table.add_column("")

    for day in days:
        table.add_row(
            day.date.isoformat(),
            day.date.strftime("%a"),
            str(day.trade_count),
            format_pnl(day.pnl, symbol),
            f"{day.rules_followed_pct:.0f}%",
            percent_bar(day.rules_followed_pct, width=10),
        )
    console.print(table)
