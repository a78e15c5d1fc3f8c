"""SQLite data store for the trade journal."""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from tradejournal.models import Account, OverallStats, Rule, Strategy, Trade

logger = logging.getLogger(__name__)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_iso(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class DataStore:
    """SQLite-based data store for the trade journal.

    Timestamps are stored as UTC ISO-8601 strings, so lexical order is
    chronological and the hour sits at a fixed offset.
    """

    REQUIRED_TABLES = [
        "accounts",
        "strategies",
        "rules",
        "trades",
        "broken_rules_by_trade",
    ]

    TRADE_COLUMNS = (
        "id, entry_time, exit_time, pair, pnl_net, risk_amount, rules_followed, "
        "emotion, trade_type, setup_rating, pre_trade_notes, post_trade_notes, "
        "strategy_id, account_id"
    )

    def __init__(self, db_path: Path):
        """Initialize the data store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS accounts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE,
                    initial_capital REAL NOT NULL DEFAULT 0,
                    current_capital REAL NOT NULL DEFAULT 0
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS strategies (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS rules (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    text TEXT NOT NULL,
                    strategy_id INTEGER NOT NULL REFERENCES strategies(id)
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS trades (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    entry_time TEXT,
                    exit_time TEXT,
                    pair TEXT,
                    pnl_net REAL NOT NULL DEFAULT 0,
                    risk_amount REAL,
                    rules_followed INTEGER NOT NULL DEFAULT 1,
                    emotion TEXT,
                    trade_type TEXT NOT NULL DEFAULT 'buy',
                    setup_rating TEXT,
                    pre_trade_notes TEXT,
                    post_trade_notes TEXT,
                    strategy_id INTEGER REFERENCES strategies(id),
                    account_id INTEGER REFERENCES accounts(id)
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS broken_rules_by_trade (
                    trade_id INTEGER NOT NULL REFERENCES trades(id),
                    rule_id INTEGER NOT NULL REFERENCES rules(id),
                    UNIQUE(trade_id, rule_id)
                )
            """)

            conn.commit()
        finally:
            conn.close()

    def get_tables(self) -> list[str]:
        """Get list of all tables in the database."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            return [row["name"] for row in cursor.fetchall()]
        finally:
            conn.close()

    # ==================== Accounts ====================

    def create_account(self, name: str, initial_capital: float = 0.0) -> Account:
        """Create an account whose current capital starts at its initial capital.

        Args:
            name: Unique account name.
            initial_capital: Starting capital.

        Returns:
            The stored account.
        """
        account = Account(
            name=name, initial_capital=initial_capital, current_capital=initial_capital
        )
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO accounts (name, initial_capital, current_capital)
                VALUES (?, ?, ?)
                """,
                (account.name, account.initial_capital, account.current_capital),
            )
            conn.commit()
            logger.info("Created account %s", account.name)
            return account.model_copy(update={"id": cursor.lastrowid})
        finally:
            conn.close()

    def get_accounts(self) -> list[Account]:
        """Get all accounts ordered by name."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT id, name, initial_capital, current_capital FROM accounts ORDER BY name"
            )
            return [Account(**dict(row)) for row in cursor.fetchall()]
        finally:
            conn.close()

    def get_account(self, account_id: int) -> Optional[Account]:
        """Get an account by ID.

        Returns:
            Account if found, None otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT id, name, initial_capital, current_capital FROM accounts WHERE id = ?",
                (account_id,),
            )
            row = cursor.fetchone()
            return Account(**dict(row)) if row else None
        finally:
            conn.close()

    # ==================== Strategies & Rules ====================

    def create_strategy(self, name: str) -> Strategy:
        """Create a strategy.

        Args:
            name: Unique strategy name.

        Returns:
            The stored strategy.
        """
        strategy = Strategy(name=name)
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("INSERT INTO strategies (name) VALUES (?)", (strategy.name,))
            conn.commit()
            logger.info("Created strategy %s", strategy.name)
            return strategy.model_copy(update={"id": cursor.lastrowid})
        finally:
            conn.close()

    def get_strategies(self) -> list[Strategy]:
        """Get all strategies ordered by name."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT id, name FROM strategies ORDER BY name")
            return [Strategy(id=row["id"], name=row["name"]) for row in cursor.fetchall()]
        finally:
            conn.close()

    def get_strategy(self, strategy_id: int) -> Optional[Strategy]:
        """Get a strategy by ID.

        Returns:
            Strategy if found, None otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT id, name FROM strategies WHERE id = ?", (strategy_id,))
            row = cursor.fetchone()
            return Strategy(id=row["id"], name=row["name"]) if row else None
        finally:
            conn.close()

    def add_rule(self, strategy_id: int, text: str) -> Rule:
        """Attach a rule to a strategy.

        Raises:
            sqlite3.IntegrityError: If the strategy does not exist.
        """
        rule = Rule(text=text, strategy_id=strategy_id)
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO rules (text, strategy_id) VALUES (?, ?)",
                (rule.text, rule.strategy_id),
            )
            conn.commit()
            return rule.model_copy(update={"id": cursor.lastrowid})
        finally:
            conn.close()

    def get_rules(self, strategy_id: int) -> list[Rule]:
        """Get the rules of a strategy in creation order."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT id, text, strategy_id FROM rules WHERE strategy_id = ? ORDER BY id",
                (strategy_id,),
            )
            return [
                Rule(id=row["id"], text=row["text"], strategy_id=row["strategy_id"])
                for row in cursor.fetchall()
            ]
        finally:
            conn.close()

    # ==================== Trades ====================

    def log_trade(self, trade: Trade, broken_rule_ids: Iterable[int] = ()) -> int:
        """Log a trade, its broken rules, and update the account capital.

        Everything is written in one transaction.

        Args:
            trade: Trade to log.
            broken_rule_ids: IDs of the rules broken on this trade.

        Returns:
            The ID of the stored trade.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO trades
                (entry_time, exit_time, pair, pnl_net, risk_amount, rules_followed,
                 emotion, trade_type, setup_rating, pre_trade_notes, post_trade_notes,
                 strategy_id, account_id)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    _iso(trade.entry_time),
                    _iso(trade.exit_time),
                    trade.pair,
                    trade.pnl_net,
                    trade.risk_amount,
                    1 if trade.rules_followed else 0,
                    trade.emotion,
                    trade.trade_type,
                    trade.setup_rating,
                    trade.pre_trade_notes,
                    trade.post_trade_notes,
                    trade.strategy_id,
                    trade.account_id,
                ),
            )
            trade_id = cursor.lastrowid

            if trade.account_id is not None:
                cursor.execute(
                    "UPDATE accounts SET current_capital = current_capital + ? WHERE id = ?",
                    (trade.pnl_net, trade.account_id),
                )

            for rule_id in broken_rule_ids:
                cursor.execute(
                    "INSERT OR IGNORE INTO broken_rules_by_trade (trade_id, rule_id) VALUES (?, ?)",
                    (trade_id, rule_id),
                )

            conn.commit()
            logger.info("Logged trade %d (%s, pnl=%.2f)", trade_id, trade.pair, trade.pnl_net)
            return trade_id
        except sqlite3.Error:
            conn.rollback()
            raise
        finally:
            conn.close()

    def get_trades(
        self,
        strategy_id: Optional[int] = None,
        account_id: Optional[int] = None,
    ) -> list[Trade]:
        """Get trades ascending by entry time; trades without one come last.

        Args:
            strategy_id: Optional strategy filter.
            account_id: Optional account filter.

        Returns:
            List of trades.
        """
        clauses = []
        params: list = []
        if strategy_id is not None:
            clauses.append("strategy_id = ?")
            params.append(strategy_id)
        if account_id is not None:
            clauses.append("account_id = ?")
            params.append(account_id)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT {self.TRADE_COLUMNS}
                FROM trades
                {where}
                ORDER BY entry_time IS NULL, entry_time, id
                """,
                params,
            )
            return [
                Trade(
                    id=row["id"],
                    entry_time=_parse_iso(row["entry_time"]),
                    exit_time=_parse_iso(row["exit_time"]),
                    pair=row["pair"],
                    pnl_net=row["pnl_net"],
                    risk_amount=row["risk_amount"],
                    rules_followed=bool(row["rules_followed"]),
                    emotion=row["emotion"],
                    trade_type=row["trade_type"],
                    setup_rating=row["setup_rating"],
                    pre_trade_notes=row["pre_trade_notes"],
                    post_trade_notes=row["post_trade_notes"],
                    strategy_id=row["strategy_id"],
                    account_id=row["account_id"],
                )
                for row in cursor.fetchall()
            ]
        finally:
            conn.close()

    def get_broken_rules(
        self, trade_ids: Optional[Iterable[int]] = None
    ) -> dict[int, set[int]]:
        """Get the broken-rules association.

        Args:
            trade_ids: Optional restriction to these trades.

        Returns:
            Mapping of trade ID to the set of broken rule IDs.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            if trade_ids is None:
                cursor.execute("SELECT trade_id, rule_id FROM broken_rules_by_trade")
            else:
                ids = list(trade_ids)
                if not ids:
                    return {}
                placeholders = ", ".join("?" for _ in ids)
                cursor.execute(
                    f"SELECT trade_id, rule_id FROM broken_rules_by_trade WHERE trade_id IN ({placeholders})",
                    ids,
                )
            association: dict[int, set[int]] = {}
            for row in cursor.fetchall():
                association.setdefault(row["trade_id"], set()).add(row["rule_id"])
            return association
        finally:
            conn.close()

    # ==================== Aggregation shortcuts ====================

    def get_overall_stats(self) -> OverallStats:
        """Win/loss/breakeven counts and most frequent emotion, computed in SQL.

        Matches ``split_from_trades`` and ``summarize_trades`` over the
        result of ``get_trades()``, including the first-encountered tie rule
        for emotions.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT
                    COALESCE(SUM(CASE WHEN pnl_net > 0 THEN 1 ELSE 0 END), 0) AS winning_trades,
                    COALESCE(SUM(CASE WHEN pnl_net < 0 THEN 1 ELSE 0 END), 0) AS losing_trades,
                    COALESCE(SUM(CASE WHEN pnl_net = 0 THEN 1 ELSE 0 END), 0) AS breakeven_trades
                FROM trades
                """
            )
            counts = cursor.fetchone()

            cursor.execute(
                """
                WITH ordered AS (
                    SELECT emotion,
                           ROW_NUMBER() OVER (ORDER BY entry_time IS NULL, entry_time, id) AS pos
                    FROM trades
                )
                SELECT emotion, COUNT(*) AS occurrences, MIN(pos) AS first_pos
                FROM ordered
                WHERE emotion IS NOT NULL AND emotion != ''
                GROUP BY emotion
                ORDER BY occurrences DESC, first_pos ASC
                LIMIT 1
                """
            )
            emotion_row = cursor.fetchone()

            return OverallStats(
                winning_trades=counts["winning_trades"],
                losing_trades=counts["losing_trades"],
                breakeven_trades=counts["breakeven_trades"],
                most_frequent_emotion=emotion_row["emotion"] if emotion_row else None,
            )
        finally:
            conn.close()

    def get_pnl_by_hour(self) -> list[dict]:
        """Sparse per-hour P&L totals by UTC entry hour, computed in SQL.

        Returns:
            Rows of ``{"hour": int, "total_pnl": float}`` for hours with trades.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT CAST(substr(entry_time, 12, 2) AS INTEGER) AS hour,
                       SUM(pnl_net) AS total_pnl
                FROM trades
                WHERE entry_time IS NOT NULL
                GROUP BY hour
                ORDER BY hour
                """
            )
            return [
                {"hour": row["hour"], "total_pnl": row["total_pnl"]}
                for row in cursor.fetchall()
            ]
        finally:
            conn.close()

    # ==================== Stats ====================

    def get_stats(self) -> dict:
        """Get database statistics.

        Returns:
            Dictionary with table record counts.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            stats = {}
            for table in self.REQUIRED_TABLES:
                cursor.execute(f"SELECT COUNT(*) as count FROM {table}")
                stats[table] = cursor.fetchone()["count"]
            return stats
        finally:
            conn.close()
