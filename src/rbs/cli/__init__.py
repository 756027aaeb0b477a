# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.22
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/cli/__init__.py

"""Command Line Interface package for RBS."""

from .main import cli_main as main, app

__all__ = ['main', 'app']
