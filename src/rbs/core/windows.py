# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.17
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/core/windows.py

"""
Five-minute time windows over snapshot timestamps.

Backups of many repositories started by one run land within a few minutes
of each other; grouping them into fixed windows gives the operator a short
list of restore points that span all repositories.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Sequence

from rbs.core.snapshots import SnapshotRecord

WINDOW = timedelta(minutes=5)
_WINDOW_SECONDS = int(WINDOW.total_seconds())


@dataclass(frozen=True)
class WindowSummary:
    start: datetime
    end: datetime
    count: int

    @property
    def label(self) -> str:
        return f"{self.start:%Y-%m-%d %H:%M} to {self.end:%H:%M} ({self.count} snapshots)"


def window_start(ts: datetime) -> datetime:
    """Floor a timestamp to its window boundary (epoch-aligned, UTC)."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    epoch = int(ts.timestamp())
    return datetime.fromtimestamp(epoch - epoch % _WINDOW_SECONDS, tz=timezone.utc)


def bucket(timestamps: Iterable[datetime]) -> list[datetime]:
    """Distinct window starts of the given timestamps, newest first."""
    return sorted({window_start(ts) for ts in timestamps}, reverse=True)


def summarize_windows(timestamps: Iterable[datetime]) -> list[WindowSummary]:
    """Windows with the number of distinct snapshot times in each, newest first."""
    counts = Counter(window_start(ts) for ts in set(timestamps))
    return [
        WindowSummary(start=start, end=start + WINDOW, count=counts[start])
        for start in sorted(counts, reverse=True)
    ]


def select_best(snapshots: Sequence[SnapshotRecord], target: datetime) -> Optional[SnapshotRecord]:
    """Pick the snapshot of one repository to restore for a target window.

    The latest snapshot inside ``[target, target + WINDOW)`` wins; failing
    that, the latest one strictly before target. Snapshots after the window
    are never chosen.
    """
    if target.tzinfo is None:
        target = target.replace(tzinfo=timezone.utc)
    window_end = target + WINDOW

    in_window = [s for s in snapshots if target <= s.timestamp < window_end]
    if in_window:
        return max(in_window, key=lambda s: s.timestamp)

    before = [s for s in snapshots if s.timestamp < target]
    if before:
        return max(before, key=lambda s: s.timestamp)
    return None
