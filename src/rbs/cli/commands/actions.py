# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.22
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/cli/commands/actions.py

"""
Action command handlers - state-changing commands.

Handles: run, restore, init
"""

from pathlib import Path
from typing import Any, Optional

from rich.console import Console

from rbs.config.manager import BackupConfig, default_user_config_path, write_sample_config
from rbs.core.backup import collect_backup_paths, run_backup
from rbs.core.operations import list_hosts
from rbs.core.restore import PostRestoreAction, apply_post_restore, prepare_destination, restore_repositories
from rbs.core.selection import Chooser, RestoreScope, select_host, select_repositories, select_window
from rbs.core.snapshots import collect_with_snapshots
from rbs.storage.factory import create_discovery, create_engine, create_snapshot_index, validate_credentials
from rbs.system.display import display_backup_summary, display_restore_summary
from rbs.system.exceptions import ConfigError
from rbs.system.progress import OperationProgressReporter


def backup(
    console: Console,
    config: BackupConfig,
    paths: Optional[list[str]] = None,
    quiet: bool = False,
) -> dict[str, Any]:
    """Back up configured, command-line and detected docker volume paths.

    Args:
        console: Rich console for output
        config: Loaded configuration
        paths: Additional paths from the command line
        quiet: Suppress progress output

    Returns:
        Backup result for JSON output

    Raises:
        BatchFailedError: If every attempted path was skipped
    """
    validate_credentials(config)

    all_paths = collect_backup_paths(config.backup_paths, paths or [], config.docker_volumes_root)
    if not all_paths:
        console.print("[yellow]No backup paths configured[/yellow]")
        return {'operation': 'run', 'paths': []}

    if not quiet:
        console.print(f"[dim]Backing up {len(all_paths)} paths for {config.hostname}[/dim]")

    engine = create_engine(config, config.hostname)
    with OperationProgressReporter(console, "Backing up", quiet=quiet) as reporter:
        summary = run_backup(
            engine,
            all_paths,
            config.hostname,
            volumes_root=config.docker_volumes_root,
            progress=reporter.update,
        )

    display_backup_summary(console, summary)
    summary.raise_for_failure()

    return {
        'operation': 'run',
        'paths': all_paths,
        'summary': summary,
    }


def _choose_post_restore_action(chooser: Chooser, console: Console) -> PostRestoreAction:
    actions = list(PostRestoreAction)
    action = actions[chooser.choose(
        "What would you like to do with the restored files?",
        [a.label for a in actions],
        default=actions.index(PostRestoreAction.LEAVE),
    )]
    if action is not PostRestoreAction.LEAVE and not chooser.confirm(
        "This will overwrite files in their original locations. Continue?", default=False
    ):
        console.print("[dim]Leaving restored files in place[/dim]")
        return PostRestoreAction.LEAVE
    return action


def restore(
    console: Console,
    config: BackupConfig,
    chooser: Chooser,
    host: Optional[str] = None,
    path: Optional[str] = None,
    timestamp: Optional[str] = None,
    scope: Optional[RestoreScope] = None,
    target: Optional[Path] = None,
    assume_yes: bool = False,
    quiet: bool = False,
) -> dict[str, Any]:
    """Restore repositories of a host to a point in time.

    Every value not given on the command line is asked for through chooser.
    With assume_yes the destination is cleared without asking and the
    restored files stay in the destination.

    Returns:
        Restore result for JSON output

    Raises:
        ConfigError: If there is nothing to restore or the operator aborts
        BatchFailedError: If no repository could be restored
    """
    validate_credentials(config)
    discovery = create_discovery(config)

    hosts = [] if host else list_hosts(discovery)
    host = select_host(hosts, config.hostname, chooser, preselected=host)

    with OperationProgressReporter(console, f"Loading snapshots for {host}", quiet=quiet) as reporter:
        candidates = collect_with_snapshots(
            discovery,
            create_snapshot_index(config, host),
            host,
            max_workers=config.max_parallel_lookups,
            progress=reporter.update,
        )
    if not candidates:
        raise ConfigError(f"No backups found for host {host}")

    selected = select_repositories(candidates, chooser, path=path, scope=scope)
    target_time = select_window(selected, chooser, timestamp=timestamp)
    destination = prepare_destination(target or config.restore_destination, chooser, assume_yes=assume_yes)

    if not quiet:
        console.print(
            f"[dim]Restoring {len(selected)} repositories from {host} "
            f"as of {target_time:%Y-%m-%d %H:%M} into {destination}[/dim]"
        )

    engine = create_engine(config, host)
    with OperationProgressReporter(console, "Restoring", quiet=quiet) as reporter:
        summary = restore_repositories(engine, selected, target_time, destination, progress=reporter.update)

    display_restore_summary(console, summary)
    summary.raise_for_failure()

    placed = []
    if summary.restored and not assume_yes:
        action = _choose_post_restore_action(chooser, console)
        placed = apply_post_restore(summary, action)
        if placed:
            console.print(f"[green]✓[/green] {len(placed)} paths put back in their original locations")
        else:
            console.print(f"Restored files are in {destination}")

    return {
        'operation': 'restore',
        'host': host,
        'target_time': target_time,
        'summary': summary,
        'placed': placed,
    }


def init(console: Console, path: Optional[Path] = None) -> dict[str, Any]:
    """Write a sample configuration file, never overwriting an existing one."""
    config_path = path or default_user_config_path()
    written = write_sample_config(config_path)
    if written:
        console.print(f"[green]✓[/green] Sample configuration written to {config_path}")
        console.print("Edit it with your repository and credential values")
    else:
        console.print(f"[yellow]Configuration already exists at {config_path}, not overwriting[/yellow]")
    return {
        'operation': 'init',
        'path': config_path,
        'written': written,
    }
