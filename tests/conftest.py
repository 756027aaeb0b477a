# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.23
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# tests/conftest.py

"""
Shared test fixtures for the rbs test suite.
Keeps every test away from the real config locations and environment.
"""

import pytest
from loguru import logger

from rbs.config.manager import BackupConfig, ENV_OVERRIDES
from rbs.core.discovery import RepositoryDiscovery
from rbs.core.snapshots import SnapshotIndex

from fixtures.fakes import FakeEngine, FakeLister, raw_snapshot

BASE = "restic"
HOST = "web1"


@pytest.fixture(autouse=True)
def isolated_config_env(tmp_path, monkeypatch):
    """No real config file or credential variable may leak into a test."""
    for env_var in ENV_OVERRIDES:
        monkeypatch.delenv(env_var, raising=False)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.delenv("RBS_CONFIG_HOME", raising=False)
    return home


@pytest.fixture
def config_env(monkeypatch):
    """Complete configuration supplied through the environment."""
    values = {
        "RESTIC_PASSWORD": "pw",
        "RESTIC_REPO_BASE": "s3:https://s3.example.com/backups/restic",
        "AWS_ACCESS_KEY_ID": "AKIDEXAMPLE",
        "AWS_SECRET_ACCESS_KEY": "secret",
        "BACKUP_HOSTNAME": HOST,
    }
    for key, value in values.items():
        monkeypatch.setenv(key, value)
    return values


@pytest.fixture
def backup_config(tmp_path):
    return BackupConfig(
        restic_password="pw",
        restic_repo_base="s3:https://s3.example.com/backups/restic",
        aws_access_key_id="AKIDEXAMPLE",
        aws_secret_access_key="secret",
        hostname=HOST,
        restore_destination=tmp_path / "restore",
    )


@pytest.fixture
def bucket_tree():
    """Prefix tree of one host covering every discovery branch."""
    host = f"{BASE}/{HOST}"
    return {
        BASE: [HOST, "db1"],
        f"{host}/user_home": ["tim"],
        f"{host}/user_home/tim": ["docs", "my_deep_path"],
        f"{host}/docker_volume": ["myapp"],
        f"{host}/docker_volume/myapp": ["data", "index", "keys", "snapshots", "locks", "real-app"],
        f"{host}/system": ["etc_nginx_conf.d"],
    }


@pytest.fixture
def bucket_snapshots():
    """Snapshot listings for the repositories of bucket_tree."""
    return {
        "user_home/tim/docs": [
            raw_snapshot("aaaa0001", "2024-01-15T10:31:12.123456789Z", "/home/tim/docs"),
            raw_snapshot("aaaa0002", "2024-01-16T10:31:40Z", "/home/tim/docs"),
        ],
        "docker_volume/myapp": [
            raw_snapshot("bbbb0001", "2024-01-15T10:32:05Z", "/mnt/docker-data/volumes/myapp"),
        ],
        "system/etc_nginx_conf.d": [
            raw_snapshot("cccc0001", "2024-01-16T10:33:00+00:00", "/etc/nginx/conf.d"),
        ],
    }


@pytest.fixture
def fake_lister(bucket_tree):
    return FakeLister(bucket_tree)


@pytest.fixture
def fake_engine(bucket_snapshots):
    return FakeEngine(bucket_snapshots)


@pytest.fixture
def discovery(fake_lister):
    return RepositoryDiscovery(fake_lister, base_path=BASE)


@pytest.fixture
def snapshot_index(fake_engine):
    return SnapshotIndex(fake_engine)


@pytest.fixture
def log_messages():
    """Messages logged through loguru while the test runs."""
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
