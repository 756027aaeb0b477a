# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.16
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/storage/__init__.py

"""
Storage layer for RBS - adapters for the external collaborators.

This package provides:
- protocols: the interfaces the core consumes
- s3: object-store listing through the aws CLI
- restic: the backup engine, one repository per path
- factory: wiring both from a loaded configuration
"""
