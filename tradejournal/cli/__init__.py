"""CLI commands for the trade journal.

This package provides the command-line interface, including trade logging,
strategy management, dashboards and strategy reports.
"""

from tradejournal.cli.main import cli, main

__all__ = ["cli", "main"]
