"""Main CLI entry point for the trade journal.

This module provides the main click group and lazy loading
for command modules to improve startup time.
"""

import logging
from pathlib import Path
from typing import Optional

import click
import toml
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from tradejournal.config import load_config

# Console for rich output
console = Console()


class LazyGroup(click.Group):
    """A click Group that lazily loads commands.

    Command modules are only imported when they are actually invoked.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        """Initialize the lazy group.

        Args:
            lazy_subcommands: Mapping of command names to module paths.
        """
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """List all available commands."""
        base = super().list_commands(ctx)
        lazy = list(self._lazy_subcommands.keys())
        return sorted(set(base + lazy))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, lazily loading if needed."""
        if cmd_name in self.commands:
            return self.commands[cmd_name]

        if cmd_name in self._lazy_subcommands:
            return self._lazy_load(cmd_name)

        return None

    def _lazy_load(self, cmd_name: str) -> click.Command:
        """Lazily load a command from its module path."""
        import importlib

        module_path = self._lazy_subcommands[cmd_name]
        module = importlib.import_module(module_path)

        cmd = None
        attr = getattr(module, cmd_name, None)
        if isinstance(attr, click.Command):
            cmd = attr
        else:
            # Command names such as "import" differ from their function names
            for attr_name in dir(module):
                attr = getattr(module, attr_name)
                if isinstance(attr, click.Command) and attr.name == cmd_name:
                    cmd = attr
                    break

        if cmd is None:
            raise click.ClickException(f"Could not find command '{cmd_name}' in {module_path}")

        self.add_command(cmd)
        return cmd


LAZY_SUBCOMMANDS = {
    "init": "tradejournal.cli.setup",
    "account": "tradejournal.cli.setup",
    "log": "tradejournal.cli.trades",
    "trades": "tradejournal.cli.trades",
    "import": "tradejournal.cli.trades",
    "dashboard": "tradejournal.cli.dashboard",
    "calendar": "tradejournal.cli.dashboard",
    "strategy": "tradejournal.cli.strategy",
    "rule": "tradejournal.cli.strategy",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def configure_logging(level: str) -> None:
    """Route log records through rich on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="tradejournal")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config.toml (default: ~/.config/tradejournal/config.toml).",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool) -> None:
    """Trade Journal - log trades and review your performance.

    Record trades with their strategy, broken rules and emotional state,
    then review dashboards, P&L calendars and strategy reports.

    \b
    Quick Start:
      tradejournal init                       # Create a config file
      tradejournal strategy add "Breakout"    # Create a strategy
      tradejournal log --entry 09:30 --exit 10:15 --pair nas100 --pnl 120
      tradejournal dashboard                  # Review performance
    """
    ctx.ensure_object(dict)

    try:
        config = load_config(config_path)
    except (toml.TomlDecodeError, OSError) as e:
        console.print(Panel(
            f"[red]Could not read configuration:[/red]\n\n{e}",
            title="[bold red]Error[/bold red]",
            border_style="red",
        ))
        raise SystemExit(1)

    level = "DEBUG" if verbose else config.get("logging", {}).get("level", "WARNING")
    configure_logging(level)

    ctx.obj["config_path"] = config_path
    ctx.obj["config"] = config


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
