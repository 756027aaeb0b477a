# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/system/progress.py

"""
Progress reporting utilities for multi-repository operations.

Provides a thread-safe completion counter for worker pools and a
Rich-based reporter for long-running lookups, backups and restores.
"""

import threading
from typing import Callable, Optional

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn, TimeRemainingColumn


class ProgressCounter:
    """Counts completed tasks across threads.

    The count is informational only; results never flow through it.
    """

    def __init__(self, total: int, callback: Optional[Callable[[int, int], None]] = None) -> None:
        self.total = total
        self._completed = 0
        self._lock = threading.Lock()
        self._callback = callback

    @property
    def completed(self) -> int:
        with self._lock:
            return self._completed

    def advance(self) -> int:
        with self._lock:
            self._completed += 1
            completed = self._completed
        if self._callback:
            self._callback(completed, self.total)
        return completed


class OperationProgressReporter:
    """Progress bar for one multi-repository operation with Rich UI."""

    def __init__(self, console: Console, description: str, quiet: bool = False) -> None:
        self.console = console
        self.description = description
        self.quiet = quiet
        self.progress = None
        self.task = None

    def __enter__(self) -> "OperationProgressReporter":
        self.start_progress()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop_progress()

    def start_progress(self) -> None:
        """Start the progress display."""
        if self.quiet:
            return

        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeRemainingColumn(),
            console=self.console,
            transient=True
        )
        self.progress.start()
        self.task = self.progress.add_task(f"[cyan]{self.description}...", total=None)

    def stop_progress(self) -> None:
        """Stop the progress display."""
        if self.progress:
            self.progress.stop()
            self.progress = None
            self.task = None

    def update(self, completed: int, total: int) -> None:
        """Callback form usable as ``progress=`` of the core operations."""
        if self.progress and self.task is not None:
            self.progress.update(self.task, completed=completed, total=total)
