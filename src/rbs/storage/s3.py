# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.16
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/storage/s3.py

"""Object-store listing through the aws CLI (``aws s3 ls``)."""

from typing import Optional

from loguru import logger

from rbs.core.error_classifier import error_from_diagnostic
from rbs.system.execution import CommandExecutor as ce, ExecutionContext

PREFIX_MARKER = "PRE "


def parse_directory_listing(output: str) -> list[str]:
    """Extract directory names from ``aws s3 ls`` output.

    Only ``PRE`` lines describe directories. Everything after the marker is
    the name, so embedded spaces survive; the trailing slash is dropped.
    """
    dirs = []
    for line in output.splitlines():
        start = line.find(PREFIX_MARKER)
        if start == -1:
            continue
        name = line[start + len(PREFIX_MARKER):].rstrip("\r").rstrip("/")
        if name:
            dirs.append(name)
    return dirs


class AwsCliLister:
    """ObjectStoreLister backed by the aws command line tool."""

    def __init__(self, bucket: str, endpoint: str, context: ExecutionContext, timeout: Optional[float] = 120):
        self.bucket = bucket
        self.endpoint = endpoint
        self.context = context
        self.timeout = timeout

    def _url(self, prefix: str) -> str:
        prefix = prefix.strip("/")
        if not prefix:
            return f"s3://{self.bucket}/"
        return f"s3://{self.bucket}/{prefix}/"

    def _ls(self, url: str):
        cmd = ["aws", "s3", "ls", url, "--endpoint-url", self.endpoint]
        return ce.run_local(cmd, context=self.context, timeout=self.timeout)

    def list_directories(self, prefix: str) -> list[str]:
        url = self._url(prefix)
        result = self._ls(url)

        if result.returncode == 0:
            return parse_directory_listing(result.stdout)

        # aws exits 1 without diagnostics when nothing matches the prefix
        if not result.stderr.strip():
            logger.debug(f"Prefix absent: {url}")
            return []

        raise error_from_diagnostic(result.stderr, url)

    def check_access(self) -> None:
        """List the bucket root; raises the classified error on failure."""
        url = self._url("")
        result = self._ls(url)
        if result.returncode != 0:
            raise error_from_diagnostic(result.stderr or f"aws s3 ls {url} failed", url)
