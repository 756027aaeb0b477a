# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.16
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/storage/restic.py

"""
Backup engine adapter running the restic command line tool.

Every repository key of a host maps to its own restic repository at
``<restic_repo_base>/<host>/<repo_key>``.
"""

from typing import Any, Optional

import orjson
from loguru import logger

from rbs.config.manager import BackupConfig
from rbs.core.error_classifier import error_from_diagnostic
from rbs.system.exceptions import TransportError, is_fatal
from rbs.system.execution import CommandExecutor as ce

# restic exits 3 when the snapshot was saved but some sources were unreadable
EXIT_PARTIAL_BACKUP = 3


class ResticEngine:
    """BackupEngine implementation for one host."""

    def __init__(self, config: BackupConfig, host: str, timeout: Optional[float] = None) -> None:
        self.config = config
        self.host = host
        self.context = config.execution_context()
        self.timeout = timeout

    def repo_url(self, repo_key: str) -> str:
        return self.config.repo_url(self.host, repo_key)

    def _run(self, repo_key: str, args: list[str], allowed_codes: tuple[int, ...] = (0,)) -> str:
        """Run restic against a repository and return its stdout.

        Raises:
            TransportError: classified from restic's stderr
        """
        url = self.repo_url(repo_key)
        cmd = ["restic", "--repo", url, *args]
        result = ce.run_local(cmd, context=self.context, timeout=self.timeout)
        if result.returncode in allowed_codes:
            if result.returncode != 0:
                return f"{result.stdout}\n{result.stderr}"
            return result.stdout
        raise error_from_diagnostic(result.stderr or f"restic {args[0]} exited with {result.returncode}", url)

    def repo_exists(self, repo_key: str) -> bool:
        """Probe the repository with a snapshot listing.

        Fatal errors propagate; any other failure means the repository has
        not been initialized.
        """
        try:
            self._run(repo_key, ["snapshots", "--json"])
            return True
        except TransportError as e:
            if is_fatal(e):
                raise
            logger.debug(f"Repository {self.repo_url(repo_key)} not usable: {e}")
            return False

    def init_if_absent(self, repo_key: str) -> None:
        if self.repo_exists(repo_key):
            return
        logger.info(f"Initializing repository {self.repo_url(repo_key)}")
        self._run(repo_key, ["init"])
        logger.info("Repository initialized")

    def create_snapshot(self, repo_key: str, native_path: str, host: str, tag: str) -> str:
        return self._run(
            repo_key,
            ["backup", str(native_path), "--host", host, "--tag", tag],
            allowed_codes=(0, EXIT_PARTIAL_BACKUP),
        )

    def list_snapshots(self, repo_key: str, path_filter: Optional[str] = None) -> list[dict[str, Any]]:
        args = ["snapshots", "--json"]
        if path_filter:
            args.extend(["--path", str(path_filter)])
        output = self._run(repo_key, args)
        try:
            snapshots = orjson.loads(output or "[]")
        except orjson.JSONDecodeError:
            logger.warning(f"Unparsable snapshot listing from {self.repo_url(repo_key)}")
            return []
        if not isinstance(snapshots, list):
            return []
        return [s for s in snapshots if isinstance(s, dict)]

    def restore(self, repo_key: str, snapshot_id: str, source_path: str, target_dir: str) -> None:
        self._run(
            repo_key,
            ["restore", snapshot_id, "--path", str(source_path), "--target", str(target_dir)],
        )

    def total_size(self, repo_key: str, path: str) -> int:
        output = self._run(
            repo_key,
            ["stats", "latest", "--mode", "raw-data", "--json", "--path", str(path)],
        )
        try:
            stats = orjson.loads(output)
        except orjson.JSONDecodeError:
            return 0
        total = stats.get("total_size") if isinstance(stats, dict) else None
        return total if isinstance(total, int) else 0
