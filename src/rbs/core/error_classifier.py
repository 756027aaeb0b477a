# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.15
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/core/error_classifier.py

"""
Classify restic / aws diagnostic output into error kinds.

Neither tool reports structured error codes, so classification is a
case-insensitive substring match over stderr. The rules live in one table;
callers only ever see ErrorKind or the matching exception class.
"""

from dataclasses import dataclass
from enum import Enum

from rbs.system.exceptions import (
    RBSError,
    AuthenticationError,
    NetworkError,
    RepositoryNotFoundError,
    CommandFailedError,
)


class ErrorKind(str, Enum):
    AUTHENTICATION_FAILED = "authentication_failed"
    NETWORK_ERROR = "network_error"
    REPOSITORY_NOT_FOUND = "repository_not_found"
    COMMAND_FAILED = "command_failed"


@dataclass(frozen=True)
class ClassificationRule:
    """Map diagnostic tokens to an error kind.

    With require_all=False any token matches; with require_all=True every
    token must be present.
    """
    kind: ErrorKind
    tokens: tuple[str, ...]
    require_all: bool = False

    def matches(self, text: str) -> bool:
        if self.require_all:
            return all(token in text for token in self.tokens)
        return any(token in text for token in self.tokens)


# Evaluated in order; first match wins
CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        ErrorKind.AUTHENTICATION_FAILED,
        ("access denied", "invalid credentials", "authorization", "forbidden", "access key", "secret key"),
    ),
    ClassificationRule(
        ErrorKind.NETWORK_ERROR,
        ("network", "connection", "timeout", "unreachable", "dns"),
    ),
    ClassificationRule(
        ErrorKind.REPOSITORY_NOT_FOUND,
        ("repository", "not found"),
        require_all=True,
    ),
)


def classify_error(diagnostic_text: str, rules: tuple[ClassificationRule, ...] = CLASSIFICATION_RULES) -> ErrorKind:
    """Return the kind of failure described by a tool's diagnostic output."""
    lowered = (diagnostic_text or "").lower()
    for rule in rules:
        if rule.matches(lowered):
            return rule.kind
    return ErrorKind.COMMAND_FAILED


def error_from_diagnostic(diagnostic_text: str, context: str) -> RBSError:
    """Build the exception matching a tool's diagnostic output.

    Args:
        diagnostic_text: stderr of the failed command
        context: repository URL or bucket path the command addressed

    Returns:
        Exception instance ready to raise
    """
    kind = classify_error(diagnostic_text)
    if kind is ErrorKind.AUTHENTICATION_FAILED:
        return AuthenticationError(context=context)
    if kind is ErrorKind.NETWORK_ERROR:
        return NetworkError(context=context)
    if kind is ErrorKind.REPOSITORY_NOT_FOUND:
        return RepositoryNotFoundError(context)
    return CommandFailedError(diagnostic_text, context=context)
