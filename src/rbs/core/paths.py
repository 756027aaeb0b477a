# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.14
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/core/paths.py

"""
Mapping between native filesystem paths and repository keys.

A repository key is ``<category>/<encoded-remainder>``; it addresses one
restic repository below ``<repo_base>/<host>/`` in the bucket.

The encoding is lossy: a literal underscore and a path separator both become
``_``, so ``/etc/my_app`` and ``/etc/my/app`` share the key
``system/etc_my_app``. ``decode`` is a display heuristic only and must never
be used to recover the original path for anything but presentation.
"""

from enum import Enum
from typing import Final

HOME_DIR: Final = "/home"
DOCKER_VOLUMES_DIR: Final = "/mnt/docker-data/volumes"

# Entries of the docker volumes directory that are not volumes
DOCKER_BACKING_FS_BLOCK_DEV: Final = "backingFsBlockDev"
DOCKER_METADATA_DB: Final = "metadata.db"


class Category(str, Enum):
    """Repository category, named after the first segment of its key."""
    USER_HOME = "user_home"
    CONTAINER_VOLUME = "docker_volume"
    SYSTEM = "system"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def from_repo_key(cls, repo_key: str) -> "Category":
        """Classify a repository key by its first segment."""
        head = repo_key.split("/", 1)[0]
        try:
            return cls(head)
        except ValueError:
            return cls.SYSTEM


_LABELS = {
    Category.USER_HOME: "User Home",
    Category.CONTAINER_VOLUME: "Docker Volumes",
    Category.SYSTEM: "System",
}

_TAGS = {
    Category.USER_HOME: "user-path",
    Category.CONTAINER_VOLUME: "docker-volume",
    Category.SYSTEM: "system-path",
}


def _root_prefix(root: str) -> str:
    return root.rstrip("/") + "/"


def _segments(path: str) -> list[str]:
    return [part for part in path.split("/") if part]


def classify(native_path: str, volumes_root: str = DOCKER_VOLUMES_DIR) -> Category:
    """Determine the category of a native path.

    The bare roots (``/home``, ``/home/``, the volumes root with or without a
    trailing slash) are System: they are not real backup targets.
    """
    path = str(native_path)
    for root, category in ((HOME_DIR, Category.USER_HOME), (volumes_root, Category.CONTAINER_VOLUME)):
        prefix = _root_prefix(root)
        if path.startswith(prefix) and _segments(path[len(prefix):]):
            return category
    return Category.SYSTEM


def encode(native_path: str, volumes_root: str = DOCKER_VOLUMES_DIR) -> str:
    """Encode a native path into its repository key.

    Examples:
        /home/tim                      -> user_home/tim
        /home/tim/my/deep/path         -> user_home/tim/my_deep_path
        /mnt/docker-data/volumes/myapp -> docker_volume/myapp
        /etc/nginx                     -> system/etc_nginx
    """
    path = str(native_path)
    category = classify(path, volumes_root)

    if category is Category.USER_HOME:
        user, *rest = _segments(path[len(_root_prefix(HOME_DIR)):])
        if not rest:
            return f"{Category.USER_HOME.value}/{user}"
        return f"{Category.USER_HOME.value}/{user}/{'_'.join(rest)}"

    if category is Category.CONTAINER_VOLUME:
        volume_parts = _segments(path[len(_root_prefix(volumes_root)):])
        return f"{Category.CONTAINER_VOLUME.value}/{'_'.join(volume_parts)}"

    system_parts = _segments(path)
    if not system_parts:
        return Category.SYSTEM.value
    return f"{Category.SYSTEM.value}/{'_'.join(system_parts)}"


def decode(segment: str) -> str:
    """Best-effort inverse of the flattening applied by encode.

    More than one underscore means a flattened multi-level path and every
    underscore becomes a slash; zero or one underscore is taken as a literal
    name (``my_file`` stays ``my_file``). Spaces are kept verbatim.
    """
    if segment.count("_") > 1:
        return segment.replace("_", "/")
    return segment


def backup_tag(native_path: str, volumes_root: str = DOCKER_VOLUMES_DIR) -> str:
    """Snapshot tag handed to the backup engine for this path."""
    return _TAGS[classify(native_path, volumes_root)]


def is_docker_volume_entry(name: str) -> bool:
    """True for entries of the volumes directory that are actual volumes."""
    return name not in (DOCKER_BACKING_FS_BLOCK_DEV, DOCKER_METADATA_DB)
