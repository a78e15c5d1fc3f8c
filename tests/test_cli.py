"""End-to-end tests for the command line interface.

**Feature: trade-journal**
"""

import json
from pathlib import Path

import pytest
import toml
from click.testing import CliRunner

from tradejournal.cli.main import cli
from tradejournal.db.store import DataStore


@pytest.fixture
def journal(tmp_path: Path):
    """Config file pointing at a database inside tmp_path."""
    db_path = tmp_path / "journal.db"
    config_path = tmp_path / "config.toml"
    config_path.write_text(toml.dumps({"journal": {"db_path": str(db_path), "currency": "$"}}))
    return config_path, db_path


def run(config_path: Path, *args: str):
    return CliRunner().invoke(cli, ["--config", str(config_path), *args])


def log_scenario(config_path: Path) -> None:
    """Create a strategy with one rule and log three trades over two days."""
    assert run(config_path, "strategy", "add", "Breakout").exit_code == 0
    assert run(config_path, "rule", "add", "1", "Wait for close").exit_code == 0
    trades = [
        ("2024-03-04", "10:00", "10:30", "100", []),
        ("2024-03-04", "14:00", "14:45", "-40", ["--broken-rule", "1"]),
        ("2024-03-05", "09:00", "09:20", "60", []),
    ]
    for day, entry, exit_, pnl, extra in trades:
        result = run(
            config_path, "log", "--date", day, "--entry", entry, "--exit", exit_,
            "--pair", "nas100", "--pnl", pnl, "--strategy", "1", *extra,
        )
        assert result.exit_code == 0, result.output


class TestSetupCommands:
    """Config and account commands."""

    def test_init_writes_config(self, tmp_path: Path):
        config_path = tmp_path / "fresh.toml"
        result = run(config_path, "init")

        assert result.exit_code == 0
        assert toml.load(config_path)["journal"]["timezone"] == "UTC"

    def test_init_keeps_existing_config(self, journal):
        config_path, _ = journal
        before = config_path.read_text()
        result = run(config_path, "init")

        assert result.exit_code == 0
        assert "already exists" in result.output
        assert config_path.read_text() == before

    def test_invalid_config_exits(self, tmp_path: Path):
        config_path = tmp_path / "broken.toml"
        config_path.write_text("this is not toml")
        result = run(config_path, "dashboard")

        assert result.exit_code == 1

    def test_account_capital_follows_trades(self, journal):
        config_path, db_path = journal
        assert run(config_path, "account", "add", "Main", "--capital", "1000").exit_code == 0
        result = run(
            config_path, "log", "--date", "2024-03-04", "--entry", "10:00", "--exit", "10:30",
            "--pair", "eurusd", "--pnl", "-25", "--account", "1",
        )

        assert result.exit_code == 0, result.output
        assert DataStore(db_path).get_account(1).current_capital == 975

    def test_duplicate_account_fails(self, journal):
        config_path, _ = journal
        run(config_path, "account", "add", "Main")

        assert run(config_path, "account", "add", "Main").exit_code == 1


class TestLogCommand:
    """Trade logging."""

    def test_logs_trade_with_broken_rule(self, journal):
        config_path, db_path = journal
        log_scenario(config_path)
        store = DataStore(db_path)

        trades = store.get_trades()
        assert [t.pnl_net for t in trades] == [100, -40, 60]
        assert [t.rules_followed for t in trades] == [True, False, True]
        assert trades[0].pair == "NAS100"
        assert store.get_broken_rules() == {trades[1].id: {1}}

    def test_overnight_exit_wraps(self, journal):
        config_path, db_path = journal
        result = run(
            config_path, "log", "--date", "2024-03-04", "--entry", "23:30", "--exit", "00:15",
            "--pair", "eurusd", "--pnl", "10",
        )

        assert result.exit_code == 0, result.output
        trade = DataStore(db_path).get_trades()[0]
        assert trade.exit_time.day == 5

    def test_invalid_time_fails(self, journal):
        config_path, db_path = journal
        result = run(
            config_path, "log", "--entry", "nine", "--exit", "10:00", "--pair", "eurusd", "--pnl", "10",
        )

        assert result.exit_code == 1
        assert DataStore(db_path).get_trades() == []

    def test_broken_rule_requires_strategy(self, journal):
        config_path, _ = journal
        result = run(
            config_path, "log", "--entry", "09:00", "--exit", "10:00", "--pair", "eurusd",
            "--pnl", "10", "--broken-rule", "1",
        )

        assert result.exit_code == 2

    def test_unknown_strategy_fails(self, journal):
        config_path, _ = journal
        result = run(
            config_path, "log", "--entry", "09:00", "--exit", "10:00", "--pair", "eurusd",
            "--pnl", "10", "--strategy", "7",
        )

        assert result.exit_code == 1


class TestDashboardCommands:
    """Dashboard, calendar and journal views."""

    def test_empty_dashboard(self, journal):
        config_path, _ = journal
        result = run(config_path, "dashboard")

        assert result.exit_code == 0
        assert "No trades" in result.output

    def test_dashboard_totals(self, journal):
        config_path, _ = journal
        log_scenario(config_path)
        result = run(config_path, "dashboard")

        assert result.exit_code == 0, result.output
        assert "+$120.00" in result.output
        assert "66.7%" in result.output

    def test_server_aggregates_match(self, journal):
        config_path, _ = journal
        log_scenario(config_path)

        plain = run(config_path, "dashboard")
        shortcut = run(config_path, "dashboard", "--server-aggregates")
        assert shortcut.exit_code == 0
        assert shortcut.output == plain.output

    def test_server_aggregates_reject_account(self, journal):
        config_path, _ = journal
        result = run(config_path, "dashboard", "--server-aggregates", "--account", "1")

        assert result.exit_code == 2

    def test_calendar_month_filter(self, journal):
        config_path, _ = journal
        log_scenario(config_path)

        assert "2024-03-05" in run(config_path, "calendar").output
        assert "No trading days" in run(config_path, "calendar", "--month", "2024-04").output
        assert run(config_path, "calendar", "--month", "March").exit_code == 1

    def test_trades_listing(self, journal):
        config_path, _ = journal
        log_scenario(config_path)
        result = run(config_path, "trades", "--limit", "2")

        assert result.exit_code == 0
        assert "Total Trades: 2" in result.output


class TestStrategyCommands:
    """Strategy and rule commands."""

    def test_strategy_report(self, journal):
        config_path, _ = journal
        log_scenario(config_path)
        result = run(config_path, "strategy", "report", "1")

        assert result.exit_code == 0, result.output
        assert "Report: Breakout" in result.output
        assert "Rule Analysis" in result.output
        assert "Wait for close" in result.output

    def test_report_for_missing_strategy(self, journal):
        config_path, _ = journal

        assert run(config_path, "strategy", "report", "9").exit_code == 1

    def test_rule_for_missing_strategy(self, journal):
        config_path, _ = journal

        assert run(config_path, "rule", "add", "9", "Orphan").exit_code == 1

    def test_duplicate_strategy_fails(self, journal):
        config_path, _ = journal
        run(config_path, "strategy", "add", "Scalp")

        assert run(config_path, "strategy", "add", "Scalp").exit_code == 1


class TestImportCommand:
    """JSON import."""

    def test_import_reports_rejected_records(self, journal, tmp_path: Path):
        config_path, db_path = journal
        source = tmp_path / "trades.json"
        source.write_text(json.dumps([
            {"entryTime": "2024-03-04T10:00:00Z", "pnlNet": 100, "pair": "nas100"},
            {"entryTime": "garbage", "pnlNet": 5},
            {"pnlNet": "-20"},
        ]))

        result = run(config_path, "import", str(source))

        assert result.exit_code == 0, result.output
        assert "Imported: 2" in result.output
        assert "Rejected: 1" in result.output
        assert len(DataStore(db_path).get_trades()) == 2

    def test_dry_run_saves_nothing(self, journal, tmp_path: Path):
        config_path, db_path = journal
        source = tmp_path / "trades.json"
        source.write_text(json.dumps([{"pnlNet": 5}]))

        result = run(config_path, "import", str(source), "--dry-run")

        assert result.exit_code == 0
        assert "Validated: 1" in result.output
        assert not db_path.exists()

    def test_non_list_json_fails(self, journal, tmp_path: Path):
        config_path, _ = journal
        source = tmp_path / "trades.json"
        source.write_text(json.dumps({"pnlNet": 5}))

        assert run(config_path, "import", str(source)).exit_code == 1

    def test_unknown_references_are_rejected(self, journal, tmp_path: Path):
        config_path, db_path = journal
        assert run(config_path, "strategy", "add", "Breakout").exit_code == 0
        source = tmp_path / "trades.json"
        source.write_text(json.dumps([
            {"pnlNet": 10, "pair": "eurusd", "strategyId": 1},
            {"pnlNet": 20, "pair": "eurusd", "strategyId": 99},
            {"pnlNet": 30, "pair": "eurusd", "accountId": 5},
            {"pnlNet": 40, "pair": "eurusd"},
        ]))

        result = run(config_path, "import", str(source))

        assert result.exit_code == 0, result.output
        assert "Imported: 2" in result.output
        assert "Rejected: 2" in result.output
        assert "strategy 99 not found" in result.output
        assert "account 5 not found" in result.output
        assert [t.pnl_net for t in DataStore(db_path).get_trades()] == [10, 40]

    def test_dry_run_checks_references(self, journal, tmp_path: Path):
        config_path, db_path = journal
        source = tmp_path / "trades.json"
        source.write_text(json.dumps([{"pnlNet": 5, "strategyId": 3}]))

        result = run(config_path, "import", str(source), "--dry-run")

        assert result.exit_code == 0
        assert "Validated: 0" in result.output
        assert "Rejected: 1" in result.output
        assert DataStore(db_path).get_trades() == []


class TestImportedRuleBreaks:
    """Strategy reports over trades whose broken rules were not recorded."""

    def test_report_counts_unrecorded_breaks(self, journal, tmp_path: Path):
        config_path, _ = journal
        assert run(config_path, "strategy", "add", "Breakout").exit_code == 0
        assert run(config_path, "rule", "add", "1", "Wait").exit_code == 0
        source = tmp_path / "trades.json"
        source.write_text(json.dumps([
            {"entryTime": "2024-03-04T10:00:00Z", "pnlNet": -10, "strategyId": 1, "rulesFollowed": False},
            {"entryTime": "2024-03-04T11:00:00Z", "pnlNet": 15, "strategyId": 1, "rulesFollowed": False},
        ]))
        assert run(config_path, "import", str(source)).exit_code == 0

        result = run(config_path, "strategy", "report", "1")

        assert result.exit_code == 0, result.output
        assert "N/A" not in result.output
        assert "Unrecorded rule" in result.output
        assert "100%" not in result.output

    def test_blank_strategy_name_rejected(self, journal):
        config_path, db_path = journal

        assert run(config_path, "strategy", "add", "   ").exit_code == 1
        assert DataStore(db_path).get_strategies() == []
