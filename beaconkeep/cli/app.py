"""Main Typer application — imports and registers all CLI commands.

Entry point: ``beaconkeep`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from beaconkeep.cli.commands.demo import demo_cmd
from beaconkeep.cli.commands.probe import probe_cmd
from beaconkeep.config import CompanionConfig

app = typer.Typer(
    name="beaconkeep",
    help="BeaconKeep: token acquisition and report download for tracked accessories.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None, "--log-level", help="Logging level (defaults to BEACONKEEP_LOG_LEVEL)."
    ),
) -> None:
    """Configure logging for every command."""
    level = (log_level or CompanionConfig().log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


# Register subcommands
app.command(name="demo", help="Run the core flows against simulated collaborators.")(demo_cmd)
app.command(name="probe", help="Check whether the token is directly readable.")(probe_cmd)


@app.command(name="config", help="Show the effective configuration.")
def config_cmd() -> None:
    """Print every setting after environment and .env overrides."""
    console = Console()
    table = Table(title="BeaconKeep Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    for name, value in CompanionConfig().model_dump().items():
        table.add_row(name, str(value))
    console.print(table)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
