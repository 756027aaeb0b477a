# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.22
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/cli/main.py

"""
CLI dispatcher routing commands to handlers.

Handlers live in rbs.cli.commands.actions (state-changing) and
rbs.cli.commands.info (read-only); this module only parses options.
"""

# Standard library imports
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, Optional

# Third-party imports
import typer
from rich.console import Console

# Local RBS imports
from rbs.cli.commands import actions as action_commands
from rbs.cli.commands import info as info_commands
from rbs.cli.prompts import TyperChooser
from rbs.cli.utils import run_with_config
from rbs.core.selection import RestoreScope
from rbs.system.logging_setup import setup_logging

# Initialize Typer app
app = typer.Typer(
    help="""rbs - Per-host restic backups in an S3 bucket

[bold green]Backup:[/bold green] run
[bold blue]Browse:[/bold blue] list, hosts, size
[bold magenta]Restore:[/bold magenta] restore
[bold red]Setup:[/bold red] init, validate-config
""",
    rich_markup_mode="rich"
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        try:
            pkg_version = version("rbs")
        except PackageNotFoundError:
            pkg_version = "unknown"
        console.print(f"rbs version {pkg_version}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None, "--version", callback=version_callback, is_eager=True,
        help="Show version and exit"
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """rbs - Back up paths into per-path restic repositories and restore them by time."""
    setup_logging(debug=debug, verbose=verbose)


# =============================================================================
# BACKUP
# =============================================================================

@app.command()
def run(
    paths: Optional[list[str]] = typer.Argument(None, help="Additional paths to back up"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress progress output"),
) -> Any:
    """[bold green]Backup[/bold green]: Back up configured paths and docker volumes."""
    return run_with_config(
        console, "running backup",
        lambda console, config: action_commands.backup(console, config, paths=paths, quiet=quiet),
    )


# =============================================================================
# BROWSE
# =============================================================================

@app.command(name="list")
def list_command(
    host: Optional[str] = typer.Option(None, "--host", help="Host to list (default: this host)"),
    to_json: bool = typer.Option(False, "--json", help="Output results as JSON"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress progress output"),
) -> Any:
    """[bold blue]Browse[/bold blue]: List repositories and the snapshot timeline of a host."""
    return run_with_config(
        console, "listing backups",
        lambda console, config: info_commands.list_backups(console, config, host=host, to_json=to_json, quiet=quiet),
    )


@app.command()
def hosts() -> Any:
    """[bold blue]Browse[/bold blue]: List hosts with backups in the bucket."""
    return run_with_config(console, "listing hosts", info_commands.hosts)


@app.command()
def size(
    path: str = typer.Argument(..., help="Backed-up path"),
) -> Any:
    """[bold blue]Browse[/bold blue]: Show the size of the latest backup of a path."""
    return run_with_config(
        console, "getting backup size",
        lambda console, config: info_commands.size(console, config, path),
    )


# =============================================================================
# RESTORE
# =============================================================================

@app.command()
def restore(
    host: Optional[str] = typer.Option(None, "--host", help="Host to restore from"),
    path: Optional[str] = typer.Option(None, "--path", help="Restore only this backed-up path"),
    timestamp: Optional[str] = typer.Option(None, "--timestamp", help="Target time, ISO 8601 (UTC if no offset)"),
    scope: Optional[RestoreScope] = typer.Option(None, "--scope", case_sensitive=False, help="Which repositories to restore"),
    target: Optional[Path] = typer.Option(None, "--target", help="Restore destination (default: /tmp/restic/interactive)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Clear the destination without asking and leave restored files there"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress progress output"),
) -> Any:
    """[bold magenta]Restore[/bold magenta]: Restore repositories to a point in time."""
    return run_with_config(
        console, "restoring",
        lambda console, config: action_commands.restore(
            console, config, TyperChooser(console),
            host=host, path=path, timestamp=timestamp, scope=scope,
            target=target, assume_yes=yes, quiet=quiet,
        ),
    )


# =============================================================================
# SETUP
# =============================================================================

@app.command()
def init(
    path: Optional[Path] = typer.Option(None, "--path", help="Where to write the sample config (default: ~/.config/rbs/rbs.yml)"),
) -> Any:
    """[bold red]Setup[/bold red]: Write a sample configuration file."""
    return action_commands.init(console, path=path)


@app.command(name="validate-config")
def validate_config_command(
    check_credentials: bool = typer.Option(True, "--credentials/--no-credentials", help="Test bucket access"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress output"),
) -> Any:
    """[bold red]Setup[/bold red]: Validate configuration and credentials."""
    result = info_commands.validate_config(console, check_credentials=check_credentials, quiet=quiet)
    if not result['valid']:
        raise typer.Exit(1)
    return result


# =============================================================================
# ENTRY POINT
# =============================================================================

def cli_main() -> None:  # pragma: no cover - entry point
    """Entry point for the rbs CLI application."""
    app()


if __name__ == "__main__":  # pragma: no cover
    cli_main()
