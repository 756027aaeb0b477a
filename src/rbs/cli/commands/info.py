# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.22
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/cli/commands/info.py

"""
Info command handlers - read-only information commands.

Handles: list, size, hosts, validate-config
"""

from typing import Any, Optional

import orjson
from rich.console import Console

from rbs.config.manager import BackupConfig, validate_config as validate_config_files
from rbs.core import operations
from rbs.storage.factory import create_discovery, create_engine, create_snapshot_index, validate_credentials
from rbs.system.display import display_backup_listing, display_hosts, display_size
from rbs.system.exceptions import RBSError
from rbs.system.progress import OperationProgressReporter


def list_backups(
    console: Console,
    config: BackupConfig,
    host: Optional[str] = None,
    to_json: bool = False,
    quiet: bool = False,
) -> dict[str, Any]:
    """Show the repositories and snapshot timeline of a host.

    Args:
        console: Rich console for output
        config: Loaded configuration
        host: Host to list, defaults to this host
        to_json: Print the listing as JSON instead of tables
        quiet: Suppress progress output

    Returns:
        Listing result for JSON output
    """
    host = host or config.hostname
    validate_credentials(config)

    with OperationProgressReporter(console, f"Loading snapshots for {host}", quiet=quiet or to_json) as reporter:
        listing = operations.list_backups(
            create_discovery(config),
            create_snapshot_index(config, host),
            host,
            max_workers=config.max_parallel_lookups,
            progress=reporter.update,
        )

    data = listing.to_json_dict()
    if to_json:
        console.print_json(orjson.dumps(data).decode())
    else:
        display_backup_listing(console, listing)
    return data


def size(console: Console, config: BackupConfig, path: str) -> dict[str, Any]:
    """Show the raw data size of the latest snapshot of a path."""
    native_path = path.rstrip("/") or "/"
    engine = create_engine(config, config.hostname)
    size_bytes = operations.backup_size(engine, native_path, volumes_root=config.docker_volumes_root)
    display_size(console, native_path, size_bytes)
    return {'path': native_path, 'size': size_bytes}


def hosts(console: Console, config: BackupConfig) -> dict[str, Any]:
    """List the hosts that have backups in the bucket."""
    validate_credentials(config)
    host_names = operations.list_hosts(create_discovery(config))
    display_hosts(console, host_names, current_host=config.hostname)
    return {'hosts': host_names}


def validate_config(console: Console, check_credentials: bool = True, quiet: bool = False) -> dict[str, Any]:
    """Validate the configuration files and optionally the credentials.

    Returns:
        Validation result; 'valid' is False when any check failed
    """
    errors = validate_config_files()
    if not errors and check_credentials:
        try:
            validate_credentials(BackupConfig.load())
        except RBSError as e:
            errors.append(f"Credential check failed: {e}")

    if errors:
        for error in errors:
            console.print(f"[red]✗[/red] {error}")
    elif not quiet:
        console.print("[green]✓[/green] Configuration is valid")
        if check_credentials:
            console.print("[green]✓[/green] Credentials validated")

    return {'valid': not errors, 'errors': errors}
