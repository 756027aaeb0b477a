# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.24
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# tests/test_backup.py

from pathlib import Path

import pytest

from rbs.core.backup import (
    BackupSummary,
    SkippedPath,
    backup_path,
    collect_backup_paths,
    detect_docker_volumes,
    parse_snapshot_id,
    run_backup,
)
from rbs.core.paths import encode
from rbs.system.exceptions import (
    AuthenticationError,
    BatchFailedError,
    CommandFailedError,
    NetworkError,
)

from fixtures.fakes import FakeEngine


@pytest.fixture
def volumes_root(tmp_path):
    root = tmp_path / "volumes"
    for name in ("myapp", "postgres_data"):
        (root / name).mkdir(parents=True)
    (root / "backingFsBlockDev").touch()
    (root / "metadata.db").touch()
    return str(root)


@pytest.fixture
def source_dirs(tmp_path):
    dirs = []
    for name in ("etc", "srv"):
        path = tmp_path / "src" / name
        path.mkdir(parents=True)
        (path / "file.txt").write_text(name)
        dirs.append(str(path))
    return dirs


class TestDockerVolumes:
    def test_detects_volumes_only(self, volumes_root):
        assert detect_docker_volumes(volumes_root) == [
            f"{volumes_root}/myapp",
            f"{volumes_root}/postgres_data",
        ]

    def test_missing_root(self, tmp_path):
        assert detect_docker_volumes(str(tmp_path / "absent")) == []


class TestCollectBackupPaths:
    def test_order_and_deduplication(self, volumes_root):
        paths = collect_backup_paths(
            [Path("/etc/nginx"), Path("/home/tim")],
            extra=["/etc/nginx/", "/srv/data"],
            volumes_root=volumes_root,
        )
        assert paths == [
            "/etc/nginx",
            "/home/tim",
            "/srv/data",
            f"{volumes_root}/myapp",
            f"{volumes_root}/postgres_data",
        ]

    def test_without_volumes(self, volumes_root):
        paths = collect_backup_paths([Path("/etc")], volumes_root=volumes_root, include_docker_volumes=False)
        assert paths == ["/etc"]


class TestParseSnapshotId:
    def test_saved_line(self):
        assert parse_snapshot_id("Files: 3 new\nsnapshot 1a2b3c4d saved\n") == "1a2b3c4d"

    def test_no_saved_line(self):
        assert parse_snapshot_id("Fatal: nothing\n") is None


class TestBackupPath:
    def test_initializes_and_tags(self, volumes_root):
        engine = FakeEngine()
        native = f"{volumes_root}/myapp"

        result = backup_path(engine, native, "web1", volumes_root)

        assert result.repo_key == "docker_volume/myapp"
        assert result.snapshot_id == "1a2b3c4d"
        assert not result.incomplete
        assert engine.initialized == {"docker_volume/myapp"}
        assert engine.backups == [("docker_volume/myapp", native, "web1", "docker-volume")]

    def test_partial_read_is_success_with_warning(self, log_messages):
        engine = FakeEngine(backup_output=(
            "error: open /etc/shadow: permission denied\n"
            "snapshot 1a2b3c4d saved\n"
            "Warning: at least one source file could not be read\n"
        ))

        result = backup_path(engine, "/etc", "web1")

        assert result.incomplete
        assert result.repo_key == "system/etc"
        assert any("could not be read" in m for m in log_messages)

    def test_missing_snapshot_id(self):
        engine = FakeEngine(backup_output="Fatal: unable to save snapshot\n")
        with pytest.raises(CommandFailedError):
            backup_path(engine, "/etc", "web1")


class TestRunBackup:
    def test_all_paths_backed_up(self, source_dirs):
        engine = FakeEngine()
        updates = []

        summary = run_backup(engine, source_dirs, "web1", progress=lambda done, total: updates.append((done, total)))

        assert [r.native_path for r in summary.succeeded] == source_dirs
        assert summary.skipped == []
        assert not summary.failed
        assert updates == [(1, 2), (2, 2)]
        assert [b[3] for b in engine.backups] == ["system-path", "system-path"]

    def test_missing_path_is_skipped(self, source_dirs, tmp_path):
        engine = FakeEngine()
        missing = str(tmp_path / "gone")

        summary = run_backup(engine, [missing] + source_dirs, "web1")

        assert summary.skipped == [SkippedPath(missing, "path does not exist")]
        assert len(summary.succeeded) == 2
        assert summary.partial
        assert encode(missing) not in engine.initialized

    def test_recoverable_failure_continues(self, source_dirs):
        engine = FakeEngine(errors={encode(source_dirs[0]): CommandFailedError("unable to create lock")})

        summary = run_backup(engine, source_dirs, "web1")

        assert [s.native_path for s in summary.skipped] == [source_dirs[0]]
        assert "unable to create lock" in summary.skipped[0].reason
        assert [r.native_path for r in summary.succeeded] == [source_dirs[1]]

    @pytest.mark.parametrize("error", [AuthenticationError("Access Denied"), NetworkError("connection refused")])
    def test_fatal_failure_aborts(self, source_dirs, error):
        engine = FakeEngine(errors={encode(source_dirs[0]): error})

        with pytest.raises(type(error)):
            run_backup(engine, source_dirs, "web1")
        assert engine.backups == []

    def test_every_path_failing(self, tmp_path):
        summary = run_backup(FakeEngine(), [str(tmp_path / "a"), str(tmp_path / "b")], "web1")

        assert summary.failed
        with pytest.raises(BatchFailedError, match="All 2 backups failed") as exc_info:
            summary.raise_for_failure()
        assert exc_info.value.skipped == 2

    def test_empty_run_is_not_a_failure(self):
        summary = run_backup(FakeEngine(), [], "web1")
        assert summary == BackupSummary()
        summary.raise_for_failure()
