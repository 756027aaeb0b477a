# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.15
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/system/execution.py

"""
Subprocess execution for the external tools (restic, aws).

Credentials reach the tools through an ExecutionContext that becomes the
child's environment. The parent process environment is never modified.
"""

import os
import subprocess
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from loguru import logger

from rbs.system.exceptions import NetworkError, ToolNotFoundError

# Values of these variables are masked in debug logs
SENSITIVE_ENV_VARS = frozenset({
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "RESTIC_PASSWORD",
})


@dataclass(frozen=True)
class ExecutionContext:
    """Environment passed explicitly to every collaborator invocation."""
    env: Mapping[str, str] = field(default_factory=dict)

    def environment(self) -> dict[str, str]:
        """Child process environment: inherited variables plus the context."""
        merged = dict(os.environ)
        merged.update(self.env)
        return merged

    def describe(self) -> dict[str, str]:
        return {
            key: ("***" if key in SENSITIVE_ENV_VARS else value)
            for key, value in self.env.items()
        }


class CommandExecutor:
    """Thin wrapper around subprocess.run used by the storage adapters."""

    @staticmethod
    def run_local(
        cmd: Sequence[str],
        context: Optional[ExecutionContext] = None,
        timeout: Optional[float] = None,
    ) -> subprocess.CompletedProcess:
        """Run a command and capture its output as text.

        Args:
            cmd: Command and arguments
            context: Execution context providing the child environment
            timeout: Seconds before the command is killed

        Returns:
            CompletedProcess; a non-zero return code is left to the caller

        Raises:
            ToolNotFoundError: If the executable cannot be started
            NetworkError: If the command exceeds timeout
        """
        context = context or ExecutionContext()
        logger.debug(f"Executing: {' '.join(cmd)} (env: {context.describe()})")
        try:
            result = subprocess.run(
                list(cmd),
                capture_output=True,
                text=True,
                env=context.environment(),
                timeout=timeout,
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(cmd[0]) from e
        except subprocess.TimeoutExpired as e:
            raise NetworkError(f"Network error: {cmd[0]} timed out after {timeout}s", context=cmd[0]) from e
        logger.debug(f"{cmd[0]} exited with {result.returncode}")
        return result
