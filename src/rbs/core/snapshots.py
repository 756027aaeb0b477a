# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.17
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/core/snapshots.py

"""
Snapshot index: per-repository snapshot listings and the concurrent
fan-out across all repositories of a host.
"""

import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from loguru import logger

from rbs.core.discovery import RepositoryDiscovery, RepositoryInfo
from rbs.storage.protocols import BackupEngine
from rbs.system.exceptions import TransportError, is_fatal
from rbs.system.progress import ProgressCounter

# restic reports nanoseconds; datetime holds microseconds
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


@dataclass(frozen=True)
class SnapshotRecord:
    id: str
    timestamp: datetime
    native_path: str


@dataclass(frozen=True)
class RepositorySnapshots:
    """A repository together with the snapshots found in it."""
    info: RepositoryInfo
    snapshots: list[SnapshotRecord] = field(default_factory=list)
    count: int = 0


def parse_snapshot_time(value: str) -> Optional[datetime]:
    """Parse an RFC 3339 snapshot time into an aware UTC datetime.

    Returns None for anything unparsable. Times without an offset are
    taken as UTC.
    """
    if not isinstance(value, str) or not value:
        return None
    text = _FRACTION_RE.sub(r"\1", value.strip())
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _record_from_raw(raw: dict[str, Any], fallback_path: Optional[str]) -> Optional[SnapshotRecord]:
    snapshot_id = raw.get("short_id") or raw.get("id")
    timestamp = parse_snapshot_time(raw.get("time"))
    if not snapshot_id or timestamp is None:
        return None
    # the engine's path is authoritative; decoded keys are lossy
    paths = raw.get("paths") or []
    native_path = paths[0] if paths else (fallback_path or "")
    return SnapshotRecord(id=str(snapshot_id)[:8], timestamp=timestamp, native_path=native_path)


class SnapshotIndex:
    """Snapshot listings of one host's repositories."""

    def __init__(self, engine: BackupEngine) -> None:
        self.engine = engine

    def snapshots_for(
        self,
        repo_key: str,
        path_filter: Optional[str] = None,
        native_path: Optional[str] = None,
    ) -> tuple[int, list[SnapshotRecord]]:
        """List the snapshots of one repository.

        Args:
            repo_key: Repository key below the host
            path_filter: Only snapshots of this path
            native_path: Path to attribute a record to when the engine
                reports none; otherwise its first reported path is kept

        Returns:
            (number of snapshots the engine reported, parsed records). Records
            without an id or with an unparsable time are dropped.

        Raises:
            TransportError: classified engine failure
        """
        raw_snapshots = self.engine.list_snapshots(repo_key, path_filter=path_filter)
        records = []
        for raw in raw_snapshots:
            record = _record_from_raw(raw, native_path)
            if record is None:
                logger.debug(f"Dropping malformed snapshot record in {repo_key}: {raw!r}")
                continue
            records.append(record)
        return len(raw_snapshots), records


def collect_with_snapshots(
    discovery: RepositoryDiscovery,
    index: SnapshotIndex,
    host: str,
    max_workers: int = 8,
    progress: Optional[Callable[[int, int], None]] = None,
) -> list[RepositorySnapshots]:
    """Discover a host's repositories and fetch their snapshots concurrently.

    One lookup per repository runs on a bounded thread pool. Results are
    gathered here only; the shared counter feeds progress reporting.

    Args:
        discovery: Repository discovery for the bucket
        index: Snapshot index for the host
        host: Host to collect
        max_workers: Upper bound on concurrent lookups
        progress: Called with (completed, total) after each lookup

    Returns:
        Repositories with at least one snapshot, in completion order

    Raises:
        AuthenticationError, NetworkError: from discovery or any lookup;
            pending lookups are cancelled and nothing is returned
    """
    repos = discovery.discover(host)
    if not repos:
        return []

    counter = ProgressCounter(len(repos), callback=progress)
    results = []

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(repos)))) as executor:
        futures = {
            executor.submit(index.snapshots_for, repo.repo_key, native_path=repo.native_path): repo
            for repo in repos
        }
        for future in as_completed(futures):
            repo = futures[future]
            counter.advance()
            try:
                count, records = future.result()
            except TransportError as e:
                if is_fatal(e):
                    executor.shutdown(wait=False, cancel_futures=True)
                    raise
                logger.warning(f"Skipping {repo.native_path}: {e}")
                continue

            if count == 0:
                logger.debug(f"No snapshots in {repo.repo_key}")
                continue
            results.append(RepositorySnapshots(info=repo, snapshots=records, count=count))

    logger.debug(f"{len(results)} of {len(repos)} repositories on {host} have snapshots")
    return results
