# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.20
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/core/restore.py

"""
Point-in-time restore across repositories.

Every selected repository is restored from the snapshot select_best picks
for the target time, into a staging destination. Moving the staged trees
back to their original locations is a separate, explicit step.
"""

import shutil
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Sequence

from loguru import logger

from rbs.core.backup import SkippedPath
from rbs.core.selection import Chooser
from rbs.core.snapshots import RepositorySnapshots
from rbs.core.windows import select_best
from rbs.storage.protocols import BackupEngine
from rbs.system.exceptions import BatchFailedError, ConfigError, TransportError, is_fatal


@dataclass(frozen=True)
class RestoredRepository:
    native_path: str
    repo_key: str
    snapshot_id: str
    snapshot_time: datetime
    restored_path: Path


@dataclass
class RestoreSummary:
    destination: Path
    restored: list[RestoredRepository] = field(default_factory=list)
    skipped: list[SkippedPath] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return not self.restored and bool(self.skipped)

    def raise_for_failure(self) -> None:
        if self.failed:
            raise BatchFailedError(
                f"No repository could be restored ({len(self.skipped)} skipped)",
                skipped=len(self.skipped),
            )


class PostRestoreAction(str, Enum):
    COPY = "copy"
    MOVE = "move"
    LEAVE = "leave"

    @property
    def label(self) -> str:
        return _ACTION_LABELS[self]


_ACTION_LABELS = {
    PostRestoreAction.COPY: "Copy files to original locations",
    PostRestoreAction.MOVE: "Move files to original locations",
    PostRestoreAction.LEAVE: "Leave files in the restore destination",
}


def staged_path(destination: Path, native_path: str) -> Path:
    """Where the engine puts native_path below the restore destination."""
    return Path(destination) / native_path.lstrip("/")


def prepare_destination(destination: Path, chooser: Chooser, assume_yes: bool = False) -> Path:
    """Create the destination, clearing it first if it holds anything.

    Raises:
        ConfigError: If the destination is not empty and clearing is declined
    """
    destination = Path(destination)
    if destination.exists() and not destination.is_dir():
        raise ConfigError(f"Restore destination is not a directory: {destination}")

    if destination.is_dir() and any(destination.iterdir()):
        if not (assume_yes or chooser.confirm(f"{destination} is not empty. Clear it before restoring?", default=False)):
            raise ConfigError(f"Restore destination {destination} is not empty")
        logger.info(f"Clearing restore destination {destination}")
        shutil.rmtree(destination)

    destination.mkdir(parents=True, exist_ok=True)
    return destination


def restore_repositories(
    engine: BackupEngine,
    repos: Sequence[RepositorySnapshots],
    target: datetime,
    destination: Path,
    progress: Optional[Callable[[int, int], None]] = None,
) -> RestoreSummary:
    """Restore each repository from its best snapshot for target.

    Raises:
        AuthenticationError, NetworkError: abort the batch immediately
    """
    summary = RestoreSummary(destination=Path(destination))

    for position, repo in enumerate(repos, start=1):
        info = repo.info
        best = select_best(repo.snapshots, target)
        if best is None:
            logger.warning(f"No suitable snapshot for {info.native_path}")
            summary.skipped.append(SkippedPath(info.native_path, f"no snapshot at or before {target:%Y-%m-%d %H:%M}"))
        else:
            source_path = best.native_path or info.native_path
            logger.info(f"Restoring {source_path} from snapshot {best.id} ({best.timestamp:%Y-%m-%d %H:%M:%S})")
            try:
                engine.restore(info.repo_key, best.id, source_path, str(destination))
            except TransportError as e:
                if is_fatal(e):
                    raise
                logger.error(f"Restore of {source_path} failed: {e}")
                summary.skipped.append(SkippedPath(source_path, str(e)))
            else:
                summary.restored.append(RestoredRepository(
                    native_path=source_path,
                    repo_key=info.repo_key,
                    snapshot_id=best.id,
                    snapshot_time=best.timestamp,
                    restored_path=staged_path(destination, source_path),
                ))
        if progress:
            progress(position, len(repos))

    return summary


def _copy_into_place(source: Path, target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    if source.is_dir():
        shutil.copytree(source, target, symlinks=True, dirs_exist_ok=True)
    else:
        shutil.copy2(source, target)


def _move_into_place(source: Path, target: Path) -> None:
    """Replace target with source; nothing of the old target survives."""
    target.parent.mkdir(parents=True, exist_ok=True)
    if target.is_dir() and not target.is_symlink():
        shutil.rmtree(target)
    elif target.exists() or target.is_symlink():
        target.unlink()
    shutil.move(str(source), str(target))


def apply_post_restore(summary: RestoreSummary, action: PostRestoreAction) -> list[str]:
    """Copy or move the staged trees back to their original locations.

    COPY merges into whatever is already there; MOVE replaces it.

    Returns:
        Native paths that were put back in place
    """
    if action is PostRestoreAction.LEAVE:
        logger.info(f"Restored files left in {summary.destination}")
        return []

    placed = []
    for restored in summary.restored:
        source = restored.restored_path
        if not source.exists():
            logger.warning(f"Nothing restored at {source}, skipping {restored.native_path}")
            continue
        target = Path(restored.native_path)
        logger.info(f"{action.value.capitalize()} {source} -> {target}")
        if action is PostRestoreAction.MOVE:
            _move_into_place(source, target)
        else:
            _copy_into_place(source, target)
        placed.append(restored.native_path)
    return placed
