# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.17
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/core/discovery.py

"""Repository discovery: walk a host's prefixes in the object store."""

from dataclasses import dataclass
from typing import Final

from loguru import logger

from rbs.core.paths import Category, DOCKER_VOLUMES_DIR, HOME_DIR, decode
from rbs.storage.protocols import ObjectStoreLister
from rbs.system.exceptions import TransportError, is_fatal

# Directories restic creates inside every repository
ENGINE_INTERNAL_DIRS: Final[frozenset[str]] = frozenset({
    "data",
    "index",
    "keys",
    "snapshots",
    "locks",
})


def is_engine_internal_dir(name: str) -> bool:
    return name in ENGINE_INTERNAL_DIRS


@dataclass(frozen=True)
class RepositoryInfo:
    """One backup repository of a host."""
    native_path: str
    repo_key: str
    category: Category


class RepositoryDiscovery:
    """Enumerate the repositories stored for a host.

    The bucket layout is ``<base>/<host>/<category>/...``. Each category has
    its own shape, so each is scanned by its own branch; the branches are
    independent of each other.
    """

    def __init__(self, lister: ObjectStoreLister, base_path: str = "", volumes_root: str = DOCKER_VOLUMES_DIR) -> None:
        self.lister = lister
        self.base_path = base_path.strip("/")
        self.volumes_root = volumes_root.rstrip("/")

    def _prefix(self, *parts: str) -> str:
        return "/".join(part for part in (self.base_path, *parts) if part)

    def _list(self, prefix: str) -> list[str]:
        """List a prefix, treating recoverable failures as an empty listing.

        Raises:
            TransportError: only fatal ones (authentication, network, missing tool)
        """
        try:
            return self.lister.list_directories(prefix)
        except TransportError as e:
            if is_fatal(e):
                raise
            logger.debug(f"Listing {prefix} failed, treating as empty: {e}")
            return []

    def list_hosts(self) -> list[str]:
        """Host directories below the base path; every failure propagates."""
        return self.lister.list_directories(self._prefix())

    def discover(self, host: str) -> list[RepositoryInfo]:
        """Enumerate all repositories of a host.

        Args:
            host: Host directory name in the bucket

        Returns:
            RepositoryInfo for every repository found, grouped by branch

        Raises:
            AuthenticationError, NetworkError: on the first fatal listing failure;
                no partial result is returned
        """
        repos = []
        repos.extend(self._scan_user_homes(host))
        repos.extend(self._scan_docker_volumes(host))
        repos.extend(self._scan_system(host))
        logger.debug(f"Discovered {len(repos)} repositories for {host}")
        return repos

    def _scan_user_homes(self, host: str) -> list[RepositoryInfo]:
        category = Category.USER_HOME
        repos = []
        for user in self._list(self._prefix(host, category.value)):
            leaves = self._list(self._prefix(host, category.value, user))

            # restic internals directly below the user: /home/<user> itself is a repository
            if any(is_engine_internal_dir(leaf) for leaf in leaves):
                repos.append(RepositoryInfo(
                    native_path=f"{HOME_DIR}/{user}",
                    repo_key=f"{category.value}/{user}",
                    category=category,
                ))

            for leaf in leaves:
                if is_engine_internal_dir(leaf):
                    continue
                repos.append(RepositoryInfo(
                    native_path=f"{HOME_DIR}/{user}/{decode(leaf)}",
                    repo_key=f"{category.value}/{user}/{leaf}",
                    category=category,
                ))
        return repos

    def _scan_docker_volumes(self, host: str) -> list[RepositoryInfo]:
        category = Category.CONTAINER_VOLUME
        repos = []
        for volume in self._list(self._prefix(host, category.value)):
            repos.append(RepositoryInfo(
                native_path=f"{self.volumes_root}/{volume}",
                repo_key=f"{category.value}/{volume}",
                category=category,
            ))

            # A volume may hold further, independently initialized repositories
            for nested in self._list(self._prefix(host, category.value, volume)):
                if is_engine_internal_dir(nested):
                    continue
                repos.append(RepositoryInfo(
                    native_path=f"{self.volumes_root}/{volume}/{nested}",
                    repo_key=f"{category.value}/{volume}/{nested}",
                    category=category,
                ))
        return repos

    def _scan_system(self, host: str) -> list[RepositoryInfo]:
        category = Category.SYSTEM
        return [
            RepositoryInfo(
                native_path=f"/{decode(leaf)}",
                repo_key=f"{category.value}/{leaf}",
                category=category,
            )
            for leaf in self._list(self._prefix(host, category.value))
        ]
