"""Strategy report aggregation.

Callers pass the trades of a single strategy, ascending by entry time (the
order ``DataStore.get_trades`` returns). Filtering by strategy is the
caller's job; rules from another strategy simply find no applicable trades.

``broken_rules`` maps a trade id to the ids of the rules broken on that
trade. A trade without entries in it (or any trade, when it is not
supplied) is only known to have broken rules at trade level
(``rules_followed``), and its per-rule figures fall back to that.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Optional

from tradejournal.analytics.calendar import calendar_days
from tradejournal.analytics.coerce import count_untimed, timed_trades
from tradejournal.analytics.equity import build_equity_curve
from tradejournal.analytics.summary import most_frequent_label, percentage
from tradejournal.models import (
    NO_RULE,
    RadarMetric,
    Rule,
    RuleCompliance,
    Strategy,
    StrategyReport,
    StrategyStats,
    Trade,
)

logger = logging.getLogger(__name__)

BrokenRules = Mapping[int, Iterable[int]]


def _sign(pnl: float) -> int:
    if pnl > 0:
        return 1
    if pnl < 0:
        return -1
    return 0


def _recorded_breaks(
    trade: Trade, broken_rules: Optional[BrokenRules]
) -> Optional[set[int]]:
    """Rule ids recorded as broken on ``trade``, or None when none are recorded."""
    if broken_rules is None or trade.id is None:
        return None
    rule_ids = set(broken_rules.get(trade.id, ()))
    return rule_ids or None


def current_streak(trades: list[Trade]) -> int:
    """Count trailing trades sharing the last trade's win/loss sign.

    A breakeven trade breaks the streak; if the last trade is breakeven the
    streak is 0.

    Args:
        trades: Trades ascending by entry time (last element is most recent).
    """
    if not trades:
        return 0

    last_sign = _sign(trades[-1].pnl_net)
    if last_sign == 0:
        return 0

    streak = 0
    for trade in reversed(trades):
        if _sign(trade.pnl_net) != last_sign:
            break
        streak += 1
    return streak


def most_broken_source(
    trades: Iterable[Trade], broken_rules: Optional[BrokenRules] = None
) -> Optional[tuple[str, int]]:
    """Most frequently broken identifier among rule-breaking trades.

    A trade with recorded rule breaks contributes its rule ids. A
    rule-breaking trade without recorded breaks can only be grouped by its
    strategy id. The two kinds are counted separately.

    Returns:
        ``("rule", rule_id)`` or ``("strategy", strategy_id)``, or None when
        no trade broke a rule.
    """
    keys: list[str] = []
    for trade in trades:
        if trade.rules_followed:
            continue
        recorded = _recorded_breaks(trade, broken_rules)
        if recorded is None:
            if trade.strategy_id is not None:
                keys.append(f"strategy:{trade.strategy_id}")
        else:
            keys.extend(f"rule:{rule_id}" for rule_id in sorted(recorded))

    top = most_frequent_label(keys, NO_RULE)
    if top == NO_RULE:
        return None
    kind, identifier = top.split(":")
    return kind, int(identifier)


def most_broken_identifier(
    trades: Iterable[Trade], broken_rules: Optional[BrokenRules] = None
) -> str:
    """Most broken rule id (or strategy id fallback) as a string, "N/A" if none."""
    source = most_broken_source(trades, broken_rules)
    return str(source[1]) if source else NO_RULE


def strategy_stats(
    trades: list[Trade], broken_rules: Optional[BrokenRules] = None
) -> StrategyStats:
    """Calculate the headline metrics of a strategy report."""
    if not trades:
        return StrategyStats(
            realized_win_pct=0.0,
            rules_followed_win_pct=0.0,
            current_streak=0,
            most_broken_rule=NO_RULE,
        )

    wins = sum(1 for t in trades if t.pnl_net > 0)
    followed = [t for t in trades if t.rules_followed]
    followed_wins = sum(1 for t in followed if t.pnl_net > 0)
    source = most_broken_source(trades, broken_rules)

    return StrategyStats(
        realized_win_pct=percentage(wins, len(trades)),
        rules_followed_win_pct=percentage(followed_wins, len(followed)),
        current_streak=current_streak(timed_trades(trades)),
        most_broken_rule=str(source[1]) if source else NO_RULE,
        most_broken_is_rule=source is not None and source[0] == "rule",
    )


def rule_compliance(
    rules: Iterable[Rule],
    trades: list[Trade],
    broken_rules: Optional[BrokenRules] = None,
) -> list[RuleCompliance]:
    """Per-rule broken counts and compliance percentage.

    A rule applies to the trades of its own strategy. A rule with no
    applicable trades reports 100% compliance. A trade with recorded rule
    breaks counts against the rules it broke; a rule-breaking trade without
    recorded breaks counts against every rule of its strategy.
    """
    results = []
    for rule in rules:
        applicable = [t for t in trades if t.strategy_id == rule.strategy_id]
        broken = 0
        for trade in applicable:
            recorded = _recorded_breaks(trade, broken_rules)
            if recorded is None:
                if not trade.rules_followed:
                    broken += 1
            elif rule.id in recorded:
                broken += 1

        total = len(applicable)
        compliance = ((total - broken) / total) * 100 if total > 0 else 100.0
        results.append(
            RuleCompliance(
                rule_id=rule.id,
                rule_text=rule.text,
                broken_count=broken,
                total_trades=total,
                compliance_pct=compliance,
            )
        )
    return results


def radar_metrics(trades: list[Trade]) -> list[RadarMetric]:
    """Raw values for the strategy radar chart.

    Normalisation for display is left to the presentation layer.
    """
    total = len(trades)
    wins = sum(1 for t in trades if t.pnl_net > 0)
    losses = sum(1 for t in trades if t.pnl_net < 0)
    followed = sum(1 for t in trades if t.rules_followed)
    total_pnl = sum(t.pnl_net for t in trades)
    avg_pnl = total_pnl / total if total > 0 else 0.0

    return [
        RadarMetric(name="Win Rate", value=percentage(wins, total)),
        RadarMetric(name="Win/Loss Ratio", value=wins / losses if losses > 0 else float(wins)),
        RadarMetric(name="Consistency", value=percentage(followed, total)),
        RadarMetric(name="Avg PnL", value=abs(avg_pnl)),
        RadarMetric(name="Total Trades", value=float(total)),
    ]


def build_strategy_report(
    strategy: Strategy,
    rules: Iterable[Rule],
    trades: Iterable[Trade],
    broken_rules: Optional[BrokenRules] = None,
) -> StrategyReport:
    """Assemble every section of a strategy report.

    Args:
        strategy: The strategy being reported on.
        rules: Rules belonging to the strategy.
        trades: The strategy's trades, ascending by entry time.
        broken_rules: Optional trade id -> broken rule ids association.
    """
    trades = list(trades)
    logger.debug(
        "Building report for strategy %s from %d trades", strategy.name, len(trades)
    )
    return StrategyReport(
        strategy_name=strategy.name,
        stats=strategy_stats(trades, broken_rules),
        equity_curve=build_equity_curve(trades),
        radar=radar_metrics(trades),
        rule_compliance=rule_compliance(rules, trades, broken_rules),
        calendar=calendar_days(trades),
        untimed_trades=count_untimed(trades),
    )
