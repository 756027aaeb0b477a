# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.24
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# tests/test_restic_engine.py

import subprocess
from unittest.mock import patch

import orjson
import pytest

from rbs.storage.restic import ResticEngine
from rbs.system.exceptions import AuthenticationError, CommandFailedError, NetworkError, RepositoryNotFoundError

REPO = "s3:https://s3.example.com/backups/restic/web1/system/etc_nginx"


def completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def engine(backup_config):
    return ResticEngine(backup_config, "web1")


@pytest.fixture
def run_local():
    with patch("rbs.storage.restic.ce.run_local") as mock_run:
        yield mock_run


class TestCommands:
    def test_repo_url(self, engine):
        assert engine.repo_url("system/etc_nginx") == REPO

    def test_credentials_passed_as_context(self, engine, run_local):
        run_local.return_value = completed(stdout="[]")
        engine.list_snapshots("system/etc_nginx")

        cmd = run_local.call_args.args[0]
        context = run_local.call_args.kwargs["context"]
        assert cmd[:3] == ["restic", "--repo", REPO]
        assert context.env["RESTIC_PASSWORD"] == "pw"
        assert context.env["AWS_ACCESS_KEY_ID"] == "AKIDEXAMPLE"

    def test_create_snapshot(self, engine, run_local):
        run_local.return_value = completed(stdout="snapshot 1a2b3c4d saved\n")

        output = engine.create_snapshot("system/etc_nginx", "/etc/nginx", "web1", "system-path")

        assert "snapshot 1a2b3c4d saved" in output
        assert run_local.call_args.args[0][3:] == ["backup", "/etc/nginx", "--host", "web1", "--tag", "system-path"]

    def test_partial_backup_keeps_both_streams(self, engine, run_local):
        run_local.return_value = completed(
            returncode=3,
            stdout="snapshot 1a2b3c4d saved\n",
            stderr="Warning: at least one source file could not be read\n",
        )
        output = engine.create_snapshot("system/etc_nginx", "/etc/nginx", "web1", "system-path")
        assert "snapshot 1a2b3c4d saved" in output
        assert "could not be read" in output

    def test_restore(self, engine, run_local):
        run_local.return_value = completed()
        engine.restore("system/etc_nginx", "1a2b3c4d", "/etc/nginx", "/tmp/restic/interactive")
        assert run_local.call_args.args[0][3:] == [
            "restore", "1a2b3c4d", "--path", "/etc/nginx", "--target", "/tmp/restic/interactive",
        ]


class TestListSnapshots:
    def test_parses_json(self, engine, run_local):
        records = [{"short_id": "1a2b3c4d", "time": "2024-01-15T10:30:00Z", "paths": ["/etc/nginx"]}]
        run_local.return_value = completed(stdout=orjson.dumps(records).decode())

        assert engine.list_snapshots("system/etc_nginx") == records

    def test_path_filter(self, engine, run_local):
        run_local.return_value = completed(stdout="[]")
        engine.list_snapshots("system/etc_nginx", path_filter="/etc/nginx")
        assert run_local.call_args.args[0][3:] == ["snapshots", "--json", "--path", "/etc/nginx"]

    @pytest.mark.parametrize("stdout", ["not json", '{"a": 1}', ""])
    def test_unusable_output(self, engine, run_local, stdout):
        run_local.return_value = completed(stdout=stdout)
        assert engine.list_snapshots("system/etc_nginx") == []

    def test_non_dict_entries_dropped(self, engine, run_local):
        run_local.return_value = completed(stdout='[{"short_id": "a"}, 3, "x"]')
        assert engine.list_snapshots("system/etc_nginx") == [{"short_id": "a"}]


class TestErrors:
    @pytest.mark.parametrize("stderr, error_type", [
        ("Fatal: Access Denied", AuthenticationError),
        ("dial tcp: connection refused", NetworkError),
        ("Fatal: repository not found", RepositoryNotFoundError),
        ("Fatal: unable to create lock", CommandFailedError),
    ])
    def test_failures_are_classified(self, engine, run_local, stderr, error_type):
        run_local.return_value = completed(returncode=1, stderr=stderr)
        with pytest.raises(error_type):
            engine.list_snapshots("system/etc_nginx")

    def test_failure_without_stderr(self, engine, run_local):
        run_local.return_value = completed(returncode=1)
        with pytest.raises(CommandFailedError, match="restic snapshots exited with 1"):
            engine.list_snapshots("system/etc_nginx")


class TestRepositoryLifecycle:
    def test_repo_exists(self, engine, run_local):
        run_local.return_value = completed(stdout="[]")
        assert engine.repo_exists("system/etc_nginx") is True

    def test_missing_repository_is_absent(self, engine, run_local):
        run_local.return_value = completed(
            returncode=1,
            stderr="Fatal: unable to open config file: Stat: The specified key does not exist.\n"
                   "Is there a repository at the following location?",
        )
        assert engine.repo_exists("system/etc_nginx") is False

    def test_fatal_error_is_not_absence(self, engine, run_local):
        run_local.return_value = completed(returncode=1, stderr="Access Denied")
        with pytest.raises(AuthenticationError):
            engine.repo_exists("system/etc_nginx")

    def test_init_if_absent_initializes(self, engine, run_local):
        run_local.side_effect = [completed(returncode=1, stderr="Is there a repository?"), completed()]
        engine.init_if_absent("system/etc_nginx")

        assert run_local.call_count == 2
        assert run_local.call_args.args[0][3:] == ["init"]

    def test_init_if_absent_skips_existing(self, engine, run_local):
        run_local.return_value = completed(stdout="[]")
        engine.init_if_absent("system/etc_nginx")
        assert run_local.call_count == 1


class TestTotalSize:
    def test_total_size(self, engine, run_local):
        run_local.return_value = completed(stdout='{"total_size": 1048576, "total_file_count": 12}')

        assert engine.total_size("system/etc_nginx", "/etc/nginx") == 1048576
        assert run_local.call_args.args[0][3:] == [
            "stats", "latest", "--mode", "raw-data", "--json", "--path", "/etc/nginx",
        ]

    @pytest.mark.parametrize("stdout", ["oops", "{}", '{"total_size": "big"}', "[]"])
    def test_unusable_stats(self, engine, run_local, stdout):
        run_local.return_value = completed(stdout=stdout)
        assert engine.total_size("system/etc_nginx", "/etc/nginx") == 0
