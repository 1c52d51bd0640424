"""TOML configuration loading and validation.

Handles config file discovery, parsing, legacy-field migration and
validation with helpful error messages.
"""

import tomllib
from pathlib import Path
from typing import Any

from .schema import (
    DEFAULT_DAILY,
    DEFAULT_GCD_TOKEN,
    DEFAULT_WEEKLY,
    BackupConfig,
    Config,
    ConnectionConfig,
    ForgejoConfig,
    RepositoryConfig,
    RetentionConfig,
    StorageConfig,
)


class ConfigError(Exception):
    """Configuration loading or validation error."""

    pass


# Config file search paths in priority order
CONFIG_PATHS = [
    Path.home() / ".config" / "duplicaci" / "config.toml",
    Path("/etc/duplicaci/config.toml"),
]


def find_config_file(explicit_path: str | None = None) -> Path | None:
    """Find configuration file.

    Args:
        explicit_path: Explicitly specified config path (highest priority)

    Returns:
        Path to config file, or None if not found
    """
    if explicit_path:
        path = Path(explicit_path)
        if path.exists():
            return path
        raise ConfigError(f"Config file not found: {explicit_path}")

    for path in CONFIG_PATHS:
        if path.exists():
            return path

    return None


def _parse_retention(data: dict[str, Any], apply_defaults: bool) -> RetentionConfig:
    """Parse retention configuration from dict."""
    retention = RetentionConfig(
        daily=data.get("daily", 0),
        weekly=data.get("weekly", 0),
        monthly=data.get("monthly", 0),
        days=data.get("days", 0),
        weeks=data.get("weeks", 0),
    )
    # Only fill in counts when the legacy day ranges are not used
    if apply_defaults and not retention.is_legacy:
        retention.daily = retention.daily or DEFAULT_DAILY
        retention.weekly = retention.weekly or DEFAULT_WEEKLY
    return retention


def _parse_backup(data: dict[str, Any], index: int) -> BackupConfig:
    """Parse backup configuration from dict."""
    name = data.get("name", "")
    if not name:
        raise ConfigError(f"backups[{index}]: name is required")

    destinations = data.get("destinations", [])
    if not destinations:
        raise ConfigError(
            f"backups[{index}] ({name}): at least one destination is required"
        )

    return BackupConfig(
        name=name,
        path=data.get("path", ""),
        cache_dir=data.get("cache_dir", ""),
        destinations=list(destinations),
        retention=_parse_retention(data.get("retention", {}), apply_defaults=True),
        threads=data.get("threads", 0) or 1,
    )


def _parse_storage(data: dict[str, Any]) -> StorageConfig:
    """Parse per-storage configuration from dict."""
    retention = None
    if "retention" in data:
        retention = _parse_retention(data["retention"], apply_defaults=False)
    return StorageConfig(
        retention=retention,
        password_env=data.get("password_env", ""),
    )


def _parse_connection(data: dict[str, Any]) -> ConnectionConfig:
    """Parse connection configuration from dict."""
    return ConnectionConfig(
        host=data.get("host", ""),
        container=data.get("container", ""),
        runtime=data.get("runtime", "docker"),
        duplicacy_path=data.get("duplicacy_path", ""),
        gcd_token=data.get("gcd_token", "") or DEFAULT_GCD_TOKEN,
        stats_path=data.get("stats_path", ""),
    )


def _parse_forgejo(data: dict[str, Any]) -> ForgejoConfig:
    """Parse Forgejo notification configuration from dict."""
    return ForgejoConfig(
        url=data.get("url", ""),
        repo=data.get("repo", ""),
        token=data.get("token", ""),
        token_env=data.get("token_env", ""),
        assignee=data.get("assignee", ""),
    )


def _parse_repository(data: dict[str, Any]) -> RepositoryConfig:
    """Parse a legacy repository definition from dict."""
    if "id" not in data:
        raise ConfigError("Repository missing required 'id' field")
    return RepositoryConfig(
        id=data["id"],
        path=data.get("path", ""),
        storage=list(data.get("storage", [])),
        backup_options=data.get("backup_options", ""),
        prune=data.get("prune", False),
        prune_options=data.get("prune_options", ""),
        check=data.get("check", False),
    )


def _migrate_legacy(data: dict[str, Any], config: Config) -> list[str]:
    """Move legacy [ssh] and [docker] settings into [connection]."""
    warnings = []
    ssh = data.get("ssh", {})
    docker = data.get("docker", {})

    if ssh:
        warnings.append("[ssh] is deprecated, use [connection] host instead")
        if not config.connection.host:
            config.connection.host = ssh.get("host", "")
        config.ssh_password_env = ssh.get("password_env", "")

    if docker:
        warnings.append("[docker] is deprecated, use [connection] container instead")
        if not config.connection.container:
            config.connection.container = docker.get("container", "")

    if config.repositories:
        warnings.append("[[repositories]] is deprecated, use [[backups]] instead")

    return warnings


def _validate_config(config: Config) -> list[str]:
    """Validate configuration and return list of warnings."""
    if not config.backups and not config.repositories:
        raise ConfigError("no backups defined")

    warnings = []

    names = [b.name for b in config.backups]
    if len(names) != len(set(names)):
        warnings.append("Duplicate backup names detected")

    for backup in config.backups:
        if len(backup.destinations) != len(set(backup.destinations)):
            warnings.append(f"Backup '{backup.name}' has duplicate destinations")

    known = set(config.all_storages())
    for name in config.storages:
        if name not in known:
            warnings.append(
                f"Storage '{name}' is configured but not used by any backup"
            )

    return warnings


def load_config(path: Path | str) -> tuple[Config, list[str]]:
    """Load and validate configuration from TOML file.

    Args:
        path: Path to configuration file

    Returns:
        Tuple of (Config object, list of warnings)

    Raises:
        ConfigError: If config is invalid or cannot be parsed
    """
    path = Path(path)

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML syntax: {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read config file: {e}")

    config = Config(
        connection=_parse_connection(data.get("connection", {})),
        backups=[
            _parse_backup(b, i) for i, b in enumerate(data.get("backups", []))
        ],
        storages={
            name: _parse_storage(s or {})
            for name, s in data.get("storages", {}).items()
        },
        maintenance=list(data.get("maintenance", [])),
        forgejo=_parse_forgejo(data.get("notifications", {}).get("forgejo", {})),
        repositories=[_parse_repository(r) for r in data.get("repositories", [])],
    )

    warnings = _migrate_legacy(data, config)
    warnings.extend(_validate_config(config))

    return config, warnings


def generate_example_config() -> str:
    """Generate example configuration file content."""
    return """# duplicaci configuration
# See documentation for full options

[connection]
host = "root@192.168.1.100"     # omit to run locally
container = "Duplicacy"          # omit to run duplicacy directly
# runtime = "docker"
# duplicacy_path = "/config/bin/duplicacy_linux_x64_3.2.5"
# gcd_token = "/config/gcd-token.json"
# stats_path = "/config/stats/storages"

# Server appdata backup
[[backups]]
name = "server_appdata"
path = "/mnt/appdata"
cache_dir = "/cache/localhost/0"
destinations = ["NASBackup", "GoogleDrive"]
threads = 4

[backups.retention]
daily = 7           # Keep one revision per day for 7 days
weekly = 4          # Then one per week for 4 weeks
monthly = 6         # Then one per month for 6 months

# Storage-wide retention prunes every repository with -a
# [storages.GoogleDrive.retention]
# daily = 14
# weekly = 8

# Per-storage encryption password
# [storages.GoogleDrive]
# password_env = "GDRIVE_PASSWORD"

# Storages that are only pruned and checked
# maintenance = ["OffsiteArchive"]

# Open an issue when a run fails
# [notifications.forgejo]
# url = "https://git.example.com"
# repo = "user/repo"
# token_env = "FORGEJO_TOKEN"
# assignee = "user"
"""
