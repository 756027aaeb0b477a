# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.21
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/cli/utils.py

"""
CLI utility functions for common patterns across RBS commands.

This module provides standardized functions for:
- Configuration loading with console output
- Error handling with typer exits and operator guidance

All functions handle console output and typer exits consistently.
"""

from typing import Any, Callable, NoReturn

import typer
from loguru import logger
from rich.console import Console

from rbs.config.manager import BackupConfig
from rbs.system.exceptions import (
    AuthenticationError,
    BatchFailedError,
    ConfigError,
    NetworkError,
    RBSError,
    ToolNotFoundError,
)

GUIDANCE = {
    AuthenticationError: [
        "Check AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY",
        "Check that the credentials may list and write the bucket",
        "Check RESTIC_PASSWORD for the repository",
    ],
    NetworkError: [
        "Check network connectivity",
        "Check the S3 endpoint URL (aws_s3_endpoint / restic_repo_base)",
    ],
    ToolNotFoundError: [
        "Install restic and the aws CLI and make sure both are on PATH",
    ],
}


def load_config_with_console(console: Console, verbose: bool = False) -> BackupConfig:
    """
    Load RBS configuration with proper error handling and console output.

    Args:
        console: Rich console for output
        verbose: Show loading message if True

    Returns:
        Loaded configuration object

    Raises:
        typer.Exit: If configuration loading fails
    """
    if verbose:
        console.print("[dim]Loading configuration...[/dim]")

    try:
        return BackupConfig.load()
    except ConfigError as e:
        console.print(f"[red]✗[/red] Configuration error: {e}")
        console.print("Run 'rbs init' to create a sample configuration")
        raise typer.Exit(1)


def handle_config_error(console: Console, error_message: str) -> NoReturn:
    """Handle configuration errors with consistent formatting."""
    console.print(f"[red]✗[/red] Configuration error: {error_message}")
    raise typer.Exit(1)


def handle_operation_error(console: Console, operation: str, error: Exception) -> NoReturn:
    """Handle operation errors with consistent formatting and exit 1."""
    logger.debug(f"Error {operation}: {type(error).__name__}: {error}")
    if isinstance(error, ConfigError):
        handle_config_error(console, str(error))

    console.print(f"[red]✗[/red] Error {operation}: {error}")
    for error_type, hints in GUIDANCE.items():
        if isinstance(error, error_type):
            for hint in hints:
                console.print(f"  - {hint}")
    raise typer.Exit(1)


def run_with_config(
    console: Console,
    operation: str,
    handler: Callable[[Console, BackupConfig], Any],
    verbose: bool = False,
) -> Any:
    """Load config, run a command handler and turn RBS errors into exit 1."""
    config = load_config_with_console(console, verbose=verbose)
    try:
        return handler(console, config)
    except BatchFailedError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)
    except RBSError as e:
        handle_operation_error(console, operation, e)
