# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.15
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/storage/protocols.py

"""
Collaborator interfaces consumed by the core.

The core never talks to S3 or restic directly; discovery and the snapshot
index only see these protocols. Production implementations live in
rbs.storage.s3 and rbs.storage.restic.
"""

from typing import Any, Optional, Protocol


class ObjectStoreLister(Protocol):
    """Lists the "directories" (common prefixes) of an object store."""

    def list_directories(self, prefix: str) -> list[str]:
        """List directory names directly below a prefix.

        Args:
            prefix: Bucket-relative prefix, without leading or trailing slash

        Returns:
            Directory names with embedded whitespace preserved and the
            trailing separator stripped. An absent prefix yields [].

        Raises:
            AuthenticationError, NetworkError: access or connectivity failure
            TransportError: any other listing failure
        """
        ...


class BackupEngine(Protocol):
    """Snapshot operations scoped by repository key for one host."""

    def repo_exists(self, repo_key: str) -> bool:
        ...

    def init_if_absent(self, repo_key: str) -> None:
        ...

    def create_snapshot(self, repo_key: str, native_path: str, host: str, tag: str) -> str:
        """Back up native_path under host and tag; returns the engine's free-text output."""
        ...

    def list_snapshots(self, repo_key: str, path_filter: Optional[str] = None) -> list[dict[str, Any]]:
        """Snapshot metadata records (``short_id``, ``time``, ``paths`` ...)."""
        ...

    def restore(self, repo_key: str, snapshot_id: str, source_path: str, target_dir: str) -> None:
        ...

    def total_size(self, repo_key: str, path: str) -> int:
        """Raw data size in bytes of the latest snapshot of path."""
        ...
