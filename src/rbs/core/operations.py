# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.20
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/core/operations.py

"""
Read-only operations: backup listings, sizes and hosts.

These functions return data; rendering belongs to rbs.system.display.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from loguru import logger

from rbs.core.discovery import RepositoryDiscovery
from rbs.core.paths import Category, DOCKER_VOLUMES_DIR, encode
from rbs.core.selection import sort_repositories
from rbs.core.snapshots import RepositorySnapshots, SnapshotIndex, collect_with_snapshots
from rbs.storage.protocols import BackupEngine
from rbs.system.exceptions import RepositoryNotFoundError

TIMELINE_LIMIT = 20


@dataclass(frozen=True)
class TimelinePoint:
    """All snapshots taken within one minute."""
    minute: datetime
    entries: list[tuple[str, str]] = field(default_factory=list)  # (native_path, snapshot_id)


@dataclass
class BackupListing:
    host: str
    repositories: list[RepositorySnapshots] = field(default_factory=list)

    def by_category(self) -> dict[Category, list[RepositorySnapshots]]:
        grouped = {category: [] for category in Category}
        for repo in sort_repositories(self.repositories):
            grouped[repo.info.category].append(repo)
        return grouped

    def timeline(self, limit: int = TIMELINE_LIMIT) -> tuple[list[TimelinePoint], int]:
        """Snapshots grouped per minute, newest first.

        Returns:
            The newest `limit` time points and the number left out
        """
        minutes = defaultdict(list)
        for repo in self.repositories:
            for snapshot in repo.snapshots:
                minute = snapshot.timestamp.replace(second=0, microsecond=0)
                minutes[minute].append((snapshot.native_path, snapshot.id))

        ordered = sorted(minutes, reverse=True)
        points = [TimelinePoint(minute=m, entries=sorted(minutes[m])) for m in ordered[:limit]]
        return points, max(0, len(ordered) - limit)

    def to_json_dict(self) -> dict[str, Any]:
        repositories = sort_repositories(self.repositories)
        snapshots = sorted(
            (s for r in repositories for s in r.snapshots),
            key=lambda s: s.timestamp,
            reverse=True,
        )
        return {
            "host": self.host,
            "repositories": [
                {
                    "path": r.info.native_path,
                    "category": r.info.category.value,
                    "snapshot_count": r.count,
                }
                for r in repositories
            ],
            "snapshots": [
                {
                    "time": s.timestamp.isoformat(),
                    "path": s.native_path,
                    "id": s.id,
                }
                for s in snapshots
            ],
        }


def list_backups(
    discovery: RepositoryDiscovery,
    index: SnapshotIndex,
    host: str,
    max_workers: int = 8,
    progress: Optional[Callable[[int, int], None]] = None,
) -> BackupListing:
    repos = collect_with_snapshots(discovery, index, host, max_workers=max_workers, progress=progress)
    return BackupListing(host=host, repositories=repos)


def list_hosts(discovery: RepositoryDiscovery) -> list[str]:
    return sorted(discovery.list_hosts())


def backup_size(engine: BackupEngine, native_path: str, volumes_root: str = DOCKER_VOLUMES_DIR) -> Optional[int]:
    """Raw data size of the latest snapshot of a path.

    Returns:
        Size in bytes, or None when the path has no snapshots

    Raises:
        TransportError: classified engine failure
    """
    repo_key = encode(native_path, volumes_root)
    try:
        snapshots = engine.list_snapshots(repo_key, path_filter=native_path)
    except RepositoryNotFoundError:
        snapshots = []
    if not snapshots:
        logger.warning(f"No snapshots found for {native_path}")
        return None
    return engine.total_size(repo_key, native_path)
