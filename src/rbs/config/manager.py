# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.09.15
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/rbs/config/manager.py

from __future__ import annotations

import os
import socket
from pathlib import Path
from typing import Optional, Final

import yaml
from loguru import logger
from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator

from rbs.core.paths import DOCKER_VOLUMES_DIR
from rbs.system.exceptions import ConfigError
from rbs.system.execution import ExecutionContext


# ---- Constants ----

USER_CFG: Final = "rbs.yml"
DEFAULT_RESTORE_DESTINATION: Final = Path("/tmp/restic/interactive")

# Environment variables that override config file values
ENV_OVERRIDES: Final[dict[str, str]] = {
    "RESTIC_PASSWORD": "restic_password",
    "RESTIC_REPO_BASE": "restic_repo_base",
    "AWS_ACCESS_KEY_ID": "aws_access_key_id",
    "AWS_SECRET_ACCESS_KEY": "aws_secret_access_key",
    "AWS_DEFAULT_REGION": "aws_default_region",
    "AWS_S3_ENDPOINT": "aws_s3_endpoint",
    "BACKUP_PATHS": "backup_paths",
    "BACKUP_HOSTNAME": "hostname",
}

# Credential fields that must not appear in the system-wide config
SECRET_FIELDS: Final[frozenset[str]] = frozenset({
    "restic_password",
    "aws_access_key_id",
    "aws_secret_access_key",
})

SAMPLE_CONFIG: Final = """\
# rbs configuration
# Fill in your actual values below. Every value can also be supplied through
# the environment variable named in the comment.

# Restic repository password (RESTIC_PASSWORD)
restic_password: your_restic_password_here

# S3/R2 repository base URL (RESTIC_REPO_BASE)
restic_repo_base: s3:https://your-account.r2.cloudflarestorage.com/your-bucket/restic

# S3 credentials (AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY)
aws_access_key_id: your_access_key_here
aws_secret_access_key: your_secret_key_here
aws_default_region: auto
aws_s3_endpoint: https://your-account.r2.cloudflarestorage.com

# Paths to back up (BACKUP_PATHS, comma-separated)
backup_paths:
  - /home/user/important_data

# Optional: custom hostname, defaults to the system hostname (BACKUP_HOSTNAME)
# hostname: my-custom-hostname

# Optional: directory for debug log files
# local_log: /var/log/rbs
"""


def _get_user_config_search_paths() -> tuple[Path, ...]:
    """Get config file search paths (ordered by priority: lowest to highest).

    Evaluated at call time so tests can redirect the environment variables.
    """
    candidates = [
        Path("/etc/rbs") / USER_CFG,  # System defaults
        Path.home() / ".config" / "rbs" / USER_CFG,  # User config
    ]
    if os.getenv("XDG_CONFIG_HOME"):
        candidates.append(Path(os.environ["XDG_CONFIG_HOME"]) / "rbs" / USER_CFG)  # XDG override
    if os.getenv("RBS_CONFIG_HOME"):
        candidates.append(Path(os.environ["RBS_CONFIG_HOME"]) / USER_CFG)  # Explicit override (highest priority)
    return tuple(candidates)


def default_user_config_path() -> Path:
    """Where `rbs init` writes the sample config."""
    explicit = os.getenv("RBS_CONFIG_HOME")
    if explicit:
        return Path(explicit) / USER_CFG
    return Path.home() / ".config" / "rbs" / USER_CFG


def _validate_system_config(config_data: dict, config_path: Path) -> dict:
    """Reject credentials in the system-wide defaults file."""
    if not str(config_path).startswith("/etc/rbs/"):
        return config_data

    found_secrets = SECRET_FIELDS.intersection(config_data.keys())
    if found_secrets:
        fields_str = ", ".join(sorted(found_secrets))
        logger.error(
            f"System config {config_path} contains credentials: {fields_str}. "
            f"Credentials belong in user configs or the environment."
        )
        raise ConfigError(f"System config contains credentials: {fields_str}")

    return config_data


def _load_merged_config_data(candidates: tuple[Path, ...]) -> tuple[dict, list[str]]:
    """Load and merge config data from candidate paths.

    Returns:
        Merged configuration data and the list of files it came from
    """
    merged_data = {}
    found_configs = []

    for candidate in candidates:
        if candidate.exists():
            try:
                with candidate.open("r", encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config from {candidate}: {e}")
                continue

            data = _validate_system_config(data, candidate)
            merged_data.update(data)  # Later configs override earlier ones
            found_configs.append(str(candidate))
            logger.debug(f"Loaded config from {candidate}")

    return merged_data, found_configs


def _environment_overrides() -> dict:
    overrides = {}
    for env_var, field_name in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value is None or value == "":
            continue
        if field_name == "backup_paths":
            overrides[field_name] = [p.strip() for p in value.split(",") if p.strip()]
        else:
            overrides[field_name] = value
    return overrides


def _split_repo_base(repo_base: str) -> tuple[Optional[str], list[str]]:
    """Split ``s3:<endpoint>/<bucket>/<base path>`` into endpoint and path parts.

    Both ``s3:https://host/bucket/path`` and restic's scheme-less
    ``s3:host/bucket/path`` are accepted.
    """
    if not repo_base.startswith("s3:"):
        return None, []
    location = repo_base[len("s3:"):]
    scheme = ""
    if "://" in location:
        scheme, location = location.split("://", 1)
        scheme = f"{scheme}://"
    host, _, path = location.partition("/")
    endpoint = f"{scheme or 'https://'}{host}" if host else None
    return endpoint, [part for part in path.split("/") if part]


# ---- Main Config ----

class BackupConfig(BaseModel):
    """Configuration for the backup service."""
    restic_password: SecretStr
    restic_repo_base: str
    aws_access_key_id: SecretStr
    aws_secret_access_key: SecretStr
    aws_default_region: str = "auto"
    aws_s3_endpoint: Optional[str] = None

    backup_paths: list[Path] = Field(default_factory=list)
    hostname: str = Field(default_factory=socket.gethostname)

    docker_volumes_root: str = DOCKER_VOLUMES_DIR
    restore_destination: Path = DEFAULT_RESTORE_DESTINATION
    max_parallel_lookups: int = Field(default=8, ge=1)

    # Optional logging configuration
    local_log: Optional[Path] = None

    @field_validator("restic_repo_base")
    @classmethod
    def validate_repo_base(cls, value: str) -> str:
        value = value.rstrip("/")
        if not value:
            raise ValueError("restic_repo_base must not be empty")
        return value

    @field_validator("docker_volumes_root")
    @classmethod
    def validate_volumes_root(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("docker_volumes_root must be an absolute path")
        return value.rstrip("/") or "/"

    @classmethod
    def load(cls) -> "BackupConfig":
        """Load config files and environment overrides.

        Raises:
            ConfigError: If nothing is configured or validation fails
        """
        merged_data, found_configs = _load_merged_config_data(_get_user_config_search_paths())
        overrides = _environment_overrides()
        if not found_configs and not overrides:
            logger.error("No config found in /etc/rbs/, ~/.config/rbs/, XDG_CONFIG_HOME, RBS_CONFIG_HOME or the environment")
            raise ConfigError(f"No {USER_CFG} found in any standard location and no RESTIC_*/AWS_* variables set")

        merged_data.update(overrides)
        if found_configs:
            logger.debug(f"Merged config from: {', '.join(found_configs)}")
        if overrides:
            logger.debug(f"Environment overrides: {', '.join(sorted(overrides))}")

        try:
            return cls.model_validate(merged_data)
        except ValidationError as e:
            raise ConfigError(str(e)) from e

    # ---- S3 location ----

    def s3_endpoint(self) -> str:
        """Endpoint URL for aws commands."""
        if self.aws_s3_endpoint:
            return self.aws_s3_endpoint
        endpoint, _ = _split_repo_base(self.restic_repo_base)
        if endpoint is None:
            raise ConfigError(f"Could not extract S3 endpoint from repo base: {self.restic_repo_base}")
        return endpoint

    def s3_bucket(self) -> str:
        """Bucket name: first path segment after the endpoint."""
        _, parts = _split_repo_base(self.restic_repo_base)
        if not parts:
            raise ConfigError(f"Could not extract bucket name from repo base: {self.restic_repo_base}")
        return parts[0]

    def s3_base_path(self) -> str:
        """Path inside the bucket below which host directories live."""
        _, parts = _split_repo_base(self.restic_repo_base)
        return "/".join(parts[1:])

    def repo_url(self, host: str, repo_key: str) -> str:
        """Full restic repository URL for a repository key of a host."""
        return f"{self.restic_repo_base}/{host}/{repo_key}"

    def execution_context(self) -> ExecutionContext:
        """Credentials and endpoint passed to every restic/aws invocation."""
        env = {
            "AWS_ACCESS_KEY_ID": self.aws_access_key_id.get_secret_value(),
            "AWS_SECRET_ACCESS_KEY": self.aws_secret_access_key.get_secret_value(),
            "AWS_DEFAULT_REGION": self.aws_default_region,
            "RESTIC_PASSWORD": self.restic_password.get_secret_value(),
        }
        if self.aws_s3_endpoint:
            env["AWS_S3_ENDPOINT"] = self.aws_s3_endpoint
        return ExecutionContext(env=env)


def configured_local_log() -> Optional[Path]:
    """The ``local_log`` directory from the config files, without full validation.

    Logging is set up before (and independently of) credential validation.
    """
    merged_data, _ = _load_merged_config_data(_get_user_config_search_paths())
    local_log = merged_data.get("local_log")
    return Path(local_log) if local_log else None


def write_sample_config(path: Path) -> bool:
    """Write the sample config unless a file already exists.

    Returns:
        True if the file was written, False if it already existed
    """
    if path.exists():
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(SAMPLE_CONFIG, encoding="utf-8")
    return True


# ---- Validation Function ----

def validate_config() -> list[str]:
    """Return a list of validation errors. Empty list means config is valid."""
    errors = []

    try:
        cfg = BackupConfig.load()
    except ConfigError as e:
        errors.append(f"Error loading config: {e}")
        return errors

    try:
        cfg.s3_bucket()
        cfg.s3_endpoint()
    except ConfigError as e:
        errors.append(str(e))

    if cfg.local_log and not cfg.local_log.is_absolute():
        errors.append(f"local_log path must be absolute: {cfg.local_log}")

    for path in cfg.backup_paths:
        if not path.is_absolute():
            errors.append(f"Backup path must be absolute: {path}")

    return errors


# done.
