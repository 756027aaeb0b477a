# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.21
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/system/display.py

# Standard library imports
from typing import Optional

# Third-party imports
import humanize
from rich.console import Console
from rich.table import Table

# Local RBS imports
from rbs.core.backup import BackupSummary
from rbs.core.operations import BackupListing, TIMELINE_LIMIT
from rbs.core.restore import RestoreSummary


def format_size(size_bytes: int) -> str:
    return humanize.naturalsize(size_bytes, binary=True)


def display_backup_listing(console: Console, listing: BackupListing, limit: int = TIMELINE_LIMIT) -> None:
    """Summary of repositories by category followed by the snapshot timeline.

    Args:
        console: Rich console for output
        listing: Repositories and snapshots of one host
        limit: Number of time points shown in the timeline
    """
    if not listing.repositories:
        console.print(f"[yellow]No backups found for host {listing.host}[/yellow]")
        return

    console.print(f"\n[bold]Backups for {listing.host}[/bold]")
    for category, repos in listing.by_category().items():
        if not repos:
            continue
        console.print(f"\n[bold cyan]{category.label}[/bold cyan]")
        for repo in repos:
            console.print(f"  {repo.info.native_path:<50} - {repo.count} snapshots", markup=False, highlight=False)

    points, remaining = listing.timeline(limit=limit)
    console.print("\n[bold]Timeline[/bold]")
    for point in points:
        console.print(f"\n  [green]{point.minute:%Y-%m-%d %H:%M}[/green]")
        for native_path, snapshot_id in point.entries:
            console.print(f"    {native_path} ({snapshot_id})", markup=False, highlight=False)
    if remaining:
        console.print(f"\n  ... and {remaining} more time points")


def hosts_to_table(hosts: list[str], current_host: Optional[str] = None) -> Table:
    table = Table(title="Backed-up hosts")
    table.add_column("Host")
    table.add_column("Current", justify="center")
    for host in hosts:
        table.add_row(host, "✓" if host == current_host else "")
    return table


def display_hosts(console: Console, hosts: list[str], current_host: Optional[str] = None) -> None:
    if not hosts:
        console.print("[yellow]No hosts found in backup repository[/yellow]")
        return
    console.print(hosts_to_table(hosts, current_host))


def backup_summary_to_table(summary: BackupSummary) -> Table:
    table = Table(title="Backup results")
    table.add_column("Status")
    table.add_column("Path")
    table.add_column("Details")
    for result in summary.succeeded:
        status = "[yellow]warning[/yellow]" if result.incomplete else "[green]saved[/green]"
        details = f"snapshot {result.snapshot_id}"
        if result.incomplete:
            details += " (some files could not be read)"
        table.add_row(status, result.native_path, details)
    for skipped in summary.skipped:
        table.add_row("[red]skipped[/red]", skipped.native_path, skipped.reason)
    return table


def display_backup_summary(console: Console, summary: BackupSummary) -> None:
    if summary.succeeded or summary.skipped:
        console.print(backup_summary_to_table(summary))

    if summary.failed:
        console.print(f"[red]✗[/red] All backups failed ({len(summary.skipped)} skipped)")
    elif summary.partial:
        console.print(
            f"[yellow]![/yellow] {len(summary.succeeded)} backups completed, {len(summary.skipped)} skipped"
        )
    elif summary.succeeded:
        console.print(f"[green]✓[/green] All {len(summary.succeeded)} backups completed")
    else:
        console.print("[yellow]Nothing to back up[/yellow]")


def restore_summary_to_table(summary: RestoreSummary) -> Table:
    table = Table(title=f"Restored into {summary.destination}")
    table.add_column("Status")
    table.add_column("Path")
    table.add_column("Snapshot")
    table.add_column("Time")
    for restored in summary.restored:
        table.add_row(
            "[green]restored[/green]",
            restored.native_path,
            restored.snapshot_id,
            f"{restored.snapshot_time:%Y-%m-%d %H:%M:%S}",
        )
    for skipped in summary.skipped:
        table.add_row("[red]skipped[/red]", skipped.native_path, "", skipped.reason)
    return table


def display_restore_summary(console: Console, summary: RestoreSummary) -> None:
    console.print(restore_summary_to_table(summary))
    if summary.failed:
        console.print(f"[red]✗[/red] No repository could be restored ({len(summary.skipped)} skipped)")
    else:
        console.print(
            f"[green]✓[/green] Restored {len(summary.restored)} repositories"
            + (f", {len(summary.skipped)} skipped" if summary.skipped else "")
        )


def display_size(console: Console, native_path: str, size_bytes: Optional[int]) -> None:
    if size_bytes is None:
        console.print(f"[yellow]No backups found for {native_path}[/yellow]")
        return
    console.print(f"{native_path}: {format_size(size_bytes)}")
