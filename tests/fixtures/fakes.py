# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.23
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# tests/fixtures/fakes.py

"""
In-memory collaborators for the rbs test suite.

FakeLister serves a fixed prefix tree, FakeEngine serves canned snapshot
listings per repository key, ScriptedChooser answers prompts from queues.
"""

import threading
from collections import deque
from typing import Any, Optional, Sequence


def raw_snapshot(short_id: str, time: str, path: str) -> dict[str, Any]:
    """Snapshot record shaped like restic's ``snapshots --json`` output."""
    return {
        "id": short_id + "0" * 56,
        "short_id": short_id,
        "time": time,
        "paths": [path],
        "hostname": "web1",
    }


class FakeLister:
    """ObjectStoreLister over a dict of prefix -> directory names."""

    def __init__(self, tree: Optional[dict[str, list[str]]] = None, errors: Optional[dict[str, Exception]] = None):
        self.tree = tree or {}
        self.errors = errors or {}
        self.calls = []

    def list_directories(self, prefix: str) -> list[str]:
        self.calls.append(prefix)
        if prefix in self.errors:
            raise self.errors[prefix]
        return list(self.tree.get(prefix, []))


class FakeEngine:
    """BackupEngine keyed by repository key; errors are raised per key."""

    def __init__(
        self,
        snapshots: Optional[dict[str, list[dict]]] = None,
        errors: Optional[dict[str, Exception]] = None,
        backup_output: str = "Files: 3 new\nsnapshot 1a2b3c4d saved\n",
        sizes: Optional[dict[str, int]] = None,
    ):
        self.snapshots = snapshots or {}
        self.errors = errors or {}
        self.backup_output = backup_output
        self.sizes = sizes or {}
        self.initialized = set()
        self.backups = []
        self.restores = []
        self.lookups = []
        self._lock = threading.Lock()

    def _maybe_fail(self, repo_key: str) -> None:
        if repo_key in self.errors:
            raise self.errors[repo_key]

    def repo_exists(self, repo_key: str) -> bool:
        return repo_key in self.initialized or repo_key in self.snapshots

    def init_if_absent(self, repo_key: str) -> None:
        self._maybe_fail(repo_key)
        self.initialized.add(repo_key)

    def create_snapshot(self, repo_key: str, native_path: str, host: str, tag: str) -> str:
        self._maybe_fail(repo_key)
        self.backups.append((repo_key, native_path, host, tag))
        return self.backup_output

    def list_snapshots(self, repo_key: str, path_filter: Optional[str] = None) -> list[dict]:
        with self._lock:
            self.lookups.append((repo_key, path_filter))
        self._maybe_fail(repo_key)
        return list(self.snapshots.get(repo_key, []))

    def restore(self, repo_key: str, snapshot_id: str, source_path: str, target_dir: str) -> None:
        self._maybe_fail(repo_key)
        self.restores.append((repo_key, snapshot_id, source_path, target_dir))

    def total_size(self, repo_key: str, path: str) -> int:
        self._maybe_fail(repo_key)
        return self.sizes.get(repo_key, 0)


class ScriptedChooser:
    """Chooser answering from queued responses and recording every prompt."""

    def __init__(
        self,
        choices: Sequence[int] = (),
        many: Sequence[list[int]] = (),
        confirms: Sequence[bool] = (),
    ):
        self.choices = deque(choices)
        self.many = deque(many)
        self.confirms = deque(confirms)
        self.prompts = []

    def choose(self, prompt: str, options: Sequence[str], default: int = 0) -> int:
        self.prompts.append(("choose", prompt, list(options), default))
        return self.choices.popleft() if self.choices else default

    def choose_many(self, prompt: str, options: Sequence[str]) -> list[int]:
        self.prompts.append(("choose_many", prompt, list(options), None))
        return self.many.popleft() if self.many else []

    def confirm(self, prompt: str, default: bool = False) -> bool:
        self.prompts.append(("confirm", prompt, None, default))
        return self.confirms.popleft() if self.confirms else default
