# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.23
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# tests/test_paths.py

import pytest

from rbs.core.paths import (
    Category,
    backup_tag,
    classify,
    decode,
    encode,
    is_docker_volume_entry,
)


class TestClassify:
    @pytest.mark.parametrize("path, expected", [
        ("/home/tim", Category.USER_HOME),
        ("/home/tim/docs", Category.USER_HOME),
        ("/home", Category.SYSTEM),
        ("/home/", Category.SYSTEM),
        ("/homework/tim", Category.SYSTEM),
        ("/mnt/docker-data/volumes/myapp", Category.CONTAINER_VOLUME),
        ("/mnt/docker-data/volumes", Category.SYSTEM),
        ("/mnt/docker-data/volumes/", Category.SYSTEM),
        ("/etc/nginx", Category.SYSTEM),
        ("/", Category.SYSTEM),
    ])
    def test_classify_boundaries(self, path, expected):
        assert classify(path) == expected

    def test_custom_volumes_root(self):
        root = "/var/lib/docker/volumes"
        assert classify("/var/lib/docker/volumes/app", volumes_root=root) == Category.CONTAINER_VOLUME
        assert classify("/mnt/docker-data/volumes/app", volumes_root=root) == Category.SYSTEM


class TestEncode:
    @pytest.mark.parametrize("path, expected", [
        ("/home/tim", "user_home/tim"),
        ("/home/tim/", "user_home/tim"),
        ("/home/tim/my/deep/path", "user_home/tim/my_deep_path"),
        ("/home/tim/My Documents", "user_home/tim/My Documents"),
        ("/mnt/docker-data/volumes/myapp", "docker_volume/myapp"),
        ("/mnt/docker-data/volumes/myapp/_data", "docker_volume/myapp__data"),
        ("/etc/nginx", "system/etc_nginx"),
        ("/var/lib/postgresql/data", "system/var_lib_postgresql_data"),
    ])
    def test_encode_examples(self, path, expected):
        assert encode(path) == expected

    def test_bare_roots_encode_under_system(self):
        assert encode("/home") == "system/home"
        assert encode("/home/") == "system/home"
        assert encode("/mnt/docker-data/volumes") == "system/mnt_docker-data_volumes"

    def test_root_and_empty_path(self):
        assert encode("/") == "system"
        assert encode("") == "system"

    def test_encoding_is_lossy(self):
        assert encode("/etc/my_app") == encode("/etc/my/app") == "system/etc_my_app"

    @pytest.mark.parametrize("path", [
        "/home", "/home/", "/home/tim", "/home/tim/a/b",
        "/mnt/docker-data/volumes", "/mnt/docker-data/volumes/x/y",
        "/etc", "/", "/opt/app data",
    ])
    def test_encode_agrees_with_classify(self, path):
        key = encode(path)
        assert Category.from_repo_key(key) == classify(path)
        assert encode(path) == key

    def test_custom_volumes_root(self):
        assert encode("/srv/volumes/app", volumes_root="/srv/volumes") == "docker_volume/app"


class TestDecode:
    @pytest.mark.parametrize("segment, expected", [
        ("single", "single"),
        ("my_file", "my_file"),
        ("my_deep_path", "my/deep/path"),
        ("etc_nginx_conf.d", "etc/nginx/conf.d"),
        ("My Documents", "My Documents"),
        ("", ""),
    ])
    def test_decode(self, segment, expected):
        assert decode(segment) == expected


class TestCategory:
    def test_from_repo_key(self):
        assert Category.from_repo_key("user_home/tim") == Category.USER_HOME
        assert Category.from_repo_key("docker_volume/app/nested") == Category.CONTAINER_VOLUME
        assert Category.from_repo_key("system") == Category.SYSTEM
        assert Category.from_repo_key("unknown/x") == Category.SYSTEM

    def test_labels(self):
        assert [c.label for c in Category] == ["User Home", "Docker Volumes", "System"]


class TestBackupTags:
    def test_tags_follow_category(self):
        assert backup_tag("/home/tim") == "user-path"
        assert backup_tag("/mnt/docker-data/volumes/app") == "docker-volume"
        assert backup_tag("/etc") == "system-path"

    def test_docker_volume_entries(self):
        assert is_docker_volume_entry("myapp")
        assert not is_docker_volume_entry("backingFsBlockDev")
        assert not is_docker_volume_entry("metadata.db")
