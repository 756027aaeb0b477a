# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.14
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/system/exceptions.py

"""
RBS-specific exception classes.

Collaborator failures (restic, aws) are turned into these exceptions by
rbs.core.error_classifier. Callers decide between aborting and skipping a
repository with is_fatal().
"""


class RBSError(Exception):
    """Base exception for all RBS-specific errors."""
    pass


class ConfigError(RBSError):
    """Raised when there are configuration validation or loading errors."""
    pass


# === TRANSPORT AND COLLABORATOR ERRORS ===

class TransportError(RBSError):
    """Base class for failures reported by the backup engine or object store.

    Attributes:
        fatal: True when the failure invalidates every later call in the same
            operation (bad credentials, unreachable endpoint).
        context: Repository URL, bucket path or command the failure belongs to.
    """

    fatal = False

    def __init__(self, message: str, context: str = None):
        self.context = context
        super().__init__(message)


class AuthenticationError(TransportError):
    """Invalid credentials or access denied."""

    fatal = True

    def __init__(self, message: str = "Authentication failed: invalid credentials or access denied", **kwargs):
        super().__init__(message, **kwargs)


class NetworkError(TransportError):
    """The repository endpoint cannot be reached."""

    fatal = True

    def __init__(self, message: str = "Network error: cannot connect to repository", **kwargs):
        super().__init__(message, **kwargs)


class RepositoryNotFoundError(TransportError):
    """The addressed repository does not exist (yet)."""

    def __init__(self, context: str):
        super().__init__(f"Repository not found: {context}", context=context)


class CommandFailedError(TransportError):
    """Any other collaborator failure; carries the raw diagnostic text."""

    def __init__(self, raw_text: str, context: str = None):
        self.raw_text = raw_text
        super().__init__(f"Command execution failed: {raw_text.strip()}", context=context)


class ToolNotFoundError(TransportError):
    """The restic or aws executable could not be started."""

    fatal = True

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"Command not found or execution error: failed to execute {tool}")


# === BATCH OUTCOMES ===

class BatchFailedError(RBSError):
    """A backup or restore batch finished without a single success."""

    def __init__(self, message: str, skipped: int = 0):
        self.skipped = skipped
        super().__init__(message)


def is_fatal(error: BaseException) -> bool:
    """Return True when error must abort a whole multi-repository operation."""
    return isinstance(error, TransportError) and error.fatal
