# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.22
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/cli/commands/__init__.py

"""
Command handlers for RBS CLI operations.

This package contains the business logic for all CLI commands,
separated from the CLI interface layer. Commands are organized by type:

- info: Read-only information commands (list, size, hosts, validate-config)
- actions: State-changing commands (run, restore, init)
"""
