# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.19
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/core/selection.py

"""
Restore-target selection over discovered candidates.

Every function takes the candidates plus optional pre-selected values and a
Chooser. Pre-selected values short-circuit the prompt, so the same code path
serves interactive and scripted restores.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Protocol, Sequence

from loguru import logger

from rbs.core.paths import Category
from rbs.core.snapshots import RepositorySnapshots
from rbs.core.windows import summarize_windows
from rbs.system.exceptions import ConfigError


class Chooser(Protocol):
    """Asks the operator to pick among options."""

    def choose(self, prompt: str, options: Sequence[str], default: int = 0) -> int:
        """Return the index of the chosen option."""
        ...

    def choose_many(self, prompt: str, options: Sequence[str]) -> list[int]:
        """Return the indices of the chosen options (possibly empty)."""
        ...

    def confirm(self, prompt: str, default: bool = False) -> bool:
        ...


class RestoreScope(str, Enum):
    ALL = "all"
    USER_HOME = "user_home"
    CONTAINER_VOLUME = "docker_volume"
    SYSTEM = "system"
    CUSTOM = "custom"
    SINGLE = "single"

    @property
    def label(self) -> str:
        return _SCOPE_LABELS[self]

    @property
    def category(self) -> Optional[Category]:
        try:
            return Category(self.value)
        except ValueError:
            return None


_SCOPE_LABELS = {
    RestoreScope.ALL: "All repositories",
    RestoreScope.USER_HOME: "User Home",
    RestoreScope.CONTAINER_VOLUME: "Docker Volumes",
    RestoreScope.SYSTEM: "System",
    RestoreScope.CUSTOM: "Custom selection",
    RestoreScope.SINGLE: "Individual repository",
}

_CATEGORY_ORDER = {category: position for position, category in enumerate(Category)}


def sort_repositories(repos: Sequence[RepositorySnapshots]) -> list[RepositorySnapshots]:
    """Category order first, then path."""
    return sorted(repos, key=lambda r: (_CATEGORY_ORDER[r.info.category], r.info.native_path))


def repository_label(repo: RepositorySnapshots) -> str:
    return f"{repo.info.native_path} ({repo.count} snapshots)"


def parse_timestamp(text: str) -> datetime:
    """Parse an operator-supplied ISO 8601 timestamp; naive times are UTC.

    Raises:
        ConfigError: If the text is not a valid timestamp
    """
    value = text.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise ConfigError(f"Invalid timestamp '{text}': expected ISO 8601, e.g. 2026-09-19T10:30") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def select_host(
    hosts: Sequence[str],
    current_host: str,
    chooser: Chooser,
    preselected: Optional[str] = None,
) -> str:
    """Pick the host to restore from; the current host is the default.

    Raises:
        ConfigError: If there is nothing to choose from
    """
    if preselected:
        if hosts and preselected not in hosts:
            logger.warning(f"Host {preselected} not found in backup repository")
        return preselected
    if not hosts:
        raise ConfigError("No hosts found in backup repository")

    options = list(hosts)
    default = options.index(current_host) if current_host in options else 0
    return options[chooser.choose("Select host to restore from", options, default=default)]


def select_repositories(
    candidates: Sequence[RepositorySnapshots],
    chooser: Chooser,
    path: Optional[str] = None,
    scope: Optional[RestoreScope] = None,
) -> list[RepositorySnapshots]:
    """Narrow the candidates down to the repositories to restore.

    An explicit path wins over scope. Without either, the operator picks a
    scope first; custom and single scopes then prompt for repositories.

    Raises:
        ConfigError: If the selection ends up empty
    """
    ordered = sort_repositories(candidates)
    if not ordered:
        raise ConfigError("No repositories with snapshots found")

    if path:
        wanted = path.rstrip("/") or "/"
        selected = [
            r for r in ordered
            if r.info.native_path == wanted or any(s.native_path == wanted for s in r.snapshots)
        ]
        if not selected:
            raise ConfigError(f"No backups found for {wanted}")
        return selected

    if scope is None:
        scopes = list(RestoreScope)
        scope = scopes[chooser.choose("What would you like to restore?", [s.label for s in scopes])]

    labels = [repository_label(r) for r in ordered]
    if scope is RestoreScope.ALL:
        selected = ordered
    elif scope is RestoreScope.CUSTOM:
        selected = [ordered[i] for i in chooser.choose_many("Select repositories to restore", labels)]
    elif scope is RestoreScope.SINGLE:
        selected = [ordered[chooser.choose("Select repository to restore", labels)]]
    else:
        selected = [r for r in ordered if r.info.category is scope.category]

    if not selected:
        raise ConfigError(f"No repositories selected for scope '{scope.label}'")
    return selected


def select_window(
    repos: Sequence[RepositorySnapshots],
    chooser: Chooser,
    timestamp: Optional[str] = None,
) -> datetime:
    """Pick the restore target time.

    Returns:
        An explicit timestamp as given, otherwise the start of the chosen
        five-minute window (newest window by default)

    Raises:
        ConfigError: If there are no snapshots or the timestamp is invalid
    """
    if timestamp:
        return parse_timestamp(timestamp)

    summaries = summarize_windows(s.timestamp for r in repos for s in r.snapshots)
    if not summaries:
        raise ConfigError("No snapshots available for the selected repositories")

    index = chooser.choose("Select restore point", [w.label for w in summaries], default=0)
    return summaries[index].start
