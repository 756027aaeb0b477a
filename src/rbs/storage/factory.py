# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.16
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/storage/factory.py

"""Construct the collaborators for a loaded configuration."""

from loguru import logger

from rbs.config.manager import BackupConfig
from rbs.core.discovery import RepositoryDiscovery
from rbs.core.snapshots import SnapshotIndex
from rbs.storage.restic import ResticEngine
from rbs.storage.s3 import AwsCliLister
from rbs.system.exceptions import AuthenticationError, NetworkError


def create_lister(config: BackupConfig) -> AwsCliLister:
    return AwsCliLister(
        bucket=config.s3_bucket(),
        endpoint=config.s3_endpoint(),
        context=config.execution_context(),
    )


def create_engine(config: BackupConfig, host: str) -> ResticEngine:
    return ResticEngine(config, host)


def create_discovery(config: BackupConfig) -> RepositoryDiscovery:
    return RepositoryDiscovery(
        create_lister(config),
        base_path=config.s3_base_path(),
        volumes_root=config.docker_volumes_root,
    )


def create_snapshot_index(config: BackupConfig, host: str) -> SnapshotIndex:
    return SnapshotIndex(create_engine(config, host))


def validate_credentials(config: BackupConfig) -> None:
    """Check that the bucket can be listed with the configured credentials.

    Raises:
        AuthenticationError, NetworkError, TransportError: classified failure
    """
    logger.info("Validating credentials...")
    try:
        create_lister(config).check_access()
    except AuthenticationError:
        logger.error("Credential validation failed: S3 credentials are invalid or access is denied")
        raise
    except NetworkError:
        logger.error(f"Network connection failed: cannot reach {config.s3_endpoint()}")
        raise
    logger.info("Credentials validated successfully")
