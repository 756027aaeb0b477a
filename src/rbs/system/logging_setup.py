# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/system/logging_setup.py

import socket
import sys
from pathlib import Path

from loguru import logger

from rbs.config.manager import configured_local_log
from rbs.system.exceptions import ConfigError


def console_level(debug: bool = False, verbose: bool = False) -> str:
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    return "WARNING"


def setup_logging(debug: bool = False, verbose: bool = False) -> None:
    """Setup loguru logging for the entire application.

    Configures:
    - Console output: WARNING+ by default, INFO+ with --verbose, DEBUG+ with --debug
    - File output: DEBUG+ if local_log is configured in user config
    """
    logger.remove()

    logger.add(
        sys.stderr,
        level=console_level(debug, verbose),
        format="<level>{level}</level>: {message}",
        colorize=True
    )

    try:
        local_log = configured_local_log()
        if local_log:
            log_dir = Path(local_log)
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"rbs-{socket.gethostname()}.log"

            logger.add(
                log_file,
                level="DEBUG",
                format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
                rotation="10 MB",
                retention="30 days",
                compression="gz"
            )
            logger.debug(f"File logging enabled: {log_file}")

    except (OSError, ConfigError) as e:
        # Don't fail the entire application if logging setup fails
        logger.warning(f"Failed to setup file logging: {e}")
