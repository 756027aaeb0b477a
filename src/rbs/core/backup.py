# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.19
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/core/backup.py

"""Backup run: one snapshot per configured path into its own repository."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional

from loguru import logger

from rbs.core.paths import DOCKER_VOLUMES_DIR, backup_tag, encode, is_docker_volume_entry
from rbs.storage.protocols import BackupEngine
from rbs.system.exceptions import BatchFailedError, CommandFailedError, TransportError, is_fatal

PARTIAL_READ_MARKER = "at least one source file could not be read"


@dataclass(frozen=True)
class BackupResult:
    native_path: str
    repo_key: str
    snapshot_id: str
    incomplete: bool = False


@dataclass(frozen=True)
class SkippedPath:
    native_path: str
    reason: str


@dataclass
class BackupSummary:
    succeeded: list[BackupResult] = field(default_factory=list)
    skipped: list[SkippedPath] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        """No path was backed up although at least one was attempted."""
        return not self.succeeded and bool(self.skipped)

    @property
    def partial(self) -> bool:
        return bool(self.succeeded) and bool(self.skipped)

    def raise_for_failure(self) -> None:
        if self.failed:
            raise BatchFailedError(
                f"All {len(self.skipped)} backups failed",
                skipped=len(self.skipped),
            )


def detect_docker_volumes(volumes_root: str = DOCKER_VOLUMES_DIR) -> list[str]:
    """Volume directories below the volumes root, sorted; [] if the root is absent."""
    root = Path(volumes_root)
    if not root.is_dir():
        logger.debug(f"No docker volumes directory at {volumes_root}")
        return []
    try:
        entries = list(root.iterdir())
    except OSError as e:
        logger.warning(f"Cannot read docker volumes directory {volumes_root}: {e}")
        return []
    return sorted(
        str(entry)
        for entry in entries
        if entry.is_dir() and is_docker_volume_entry(entry.name)
    )


def collect_backup_paths(
    configured: Iterable[Path],
    extra: Iterable[str] = (),
    volumes_root: str = DOCKER_VOLUMES_DIR,
    include_docker_volumes: bool = True,
) -> list[str]:
    """Configured paths, then command-line paths, then detected volumes; deduplicated."""
    candidates = [str(p) for p in configured] + [str(p) for p in extra]
    if include_docker_volumes:
        candidates.extend(detect_docker_volumes(volumes_root))

    paths = []
    for candidate in candidates:
        normalized = candidate.rstrip("/") or "/"
        if normalized not in paths:
            paths.append(normalized)
    return paths


def parse_snapshot_id(output: str) -> Optional[str]:
    """Snapshot id from restic's ``snapshot <id> saved`` line."""
    for line in output.splitlines():
        if "snapshot" in line and "saved" in line:
            words = line.split()
            if len(words) > 1:
                return words[1]
    return None


def backup_path(engine: BackupEngine, native_path: str, host: str, volumes_root: str = DOCKER_VOLUMES_DIR) -> BackupResult:
    """Back up one path into the repository its key addresses.

    Raises:
        TransportError: classified engine failure, or CommandFailedError when
            the engine did not report a saved snapshot
    """
    repo_key = encode(native_path, volumes_root)
    logger.info(f"Backing up {native_path} -> {repo_key}")

    engine.init_if_absent(repo_key)
    output = engine.create_snapshot(repo_key, native_path, host, backup_tag(native_path, volumes_root))

    snapshot_id = parse_snapshot_id(output)
    if snapshot_id is None:
        raise CommandFailedError(output or "backup reported no snapshot", context=repo_key)

    incomplete = PARTIAL_READ_MARKER in output
    if incomplete:
        logger.warning(f"Backup of {native_path} completed with warnings: some files could not be read")
    logger.info(f"Snapshot {snapshot_id} saved for {native_path}")
    return BackupResult(native_path=native_path, repo_key=repo_key, snapshot_id=snapshot_id, incomplete=incomplete)


def run_backup(
    engine: BackupEngine,
    paths: Iterable[str],
    host: str,
    volumes_root: str = DOCKER_VOLUMES_DIR,
    progress: Optional[Callable[[int, int], None]] = None,
) -> BackupSummary:
    """Back up every path in turn.

    Missing paths and recoverable engine failures are recorded as skipped
    and the run continues.

    Raises:
        AuthenticationError, NetworkError: abort the run immediately
    """
    paths = list(paths)
    summary = BackupSummary()

    for position, native_path in enumerate(paths, start=1):
        if not Path(native_path).exists():
            logger.warning(f"Path does not exist, skipping: {native_path}")
            summary.skipped.append(SkippedPath(native_path, "path does not exist"))
        else:
            try:
                summary.succeeded.append(backup_path(engine, native_path, host, volumes_root))
            except TransportError as e:
                if is_fatal(e):
                    raise
                logger.error(f"Backup of {native_path} failed: {e}")
                summary.skipped.append(SkippedPath(native_path, str(e)))
        if progress:
            progress(position, len(paths))

    logger.info(f"Backup run finished: {len(summary.succeeded)} succeeded, {len(summary.skipped)} skipped")
    return summary
