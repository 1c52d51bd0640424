"""Configuration schema definitions using dataclasses.

Defines the structure for TOML configuration with sensible defaults.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

DEFAULT_GCD_TOKEN = "/config/gcd-token.json"
DEFAULT_DAILY = 7
DEFAULT_WEEKLY = 4
LEGACY_DEFAULT_DAYS = 14
LEGACY_DEFAULT_WEEKS = 180


@dataclass
class RetentionConfig:
    """Backup retention policy.

    Attributes:
        daily: Number of daily revisions to keep
        weekly: Number of weekly revisions to keep
        monthly: Number of monthly revisions to keep (0 = disabled)
        days: Legacy: keep daily revisions for N days
        weeks: Legacy: keep weekly revisions for N days
    """

    daily: int = 0
    weekly: int = 0
    monthly: int = 0
    days: int = 0
    weeks: int = 0

    @property
    def is_legacy(self) -> bool:
        return self.days > 0 or self.weeks > 0

    def to_prune_options(self, include_all: bool = True) -> list[str]:
        """Convert the policy to duplicacy prune ``-keep`` arguments.

        Args:
            include_all: Append ``-a`` to prune every repository in the storage

        Returns:
            List of prune arguments
        """
        if self.is_legacy:
            days = self.days or LEGACY_DEFAULT_DAYS
            weeks = self.weeks or LEGACY_DEFAULT_WEEKS
            options = ["-keep", f"0:{weeks}", "-keep", f"7:{days}", "-keep", "1:1"]
        else:
            daily = self.daily or DEFAULT_DAILY
            weekly = self.weekly or DEFAULT_WEEKLY
            # daily: days 1..daily, weekly: the following weekly*7 days,
            # monthly: the following monthly*30 days
            daily_end = daily
            weekly_end = daily_end + weekly * 7
            options = []
            if self.monthly > 0:
                monthly_end = weekly_end + self.monthly * 30
                options += ["-keep", f"0:{monthly_end}", "-keep", f"30:{weekly_end}"]
            else:
                options += ["-keep", f"0:{weekly_end}"]
            options += ["-keep", f"7:{daily_end}", "-keep", "1:1"]

        if include_all:
            options.append("-a")
        return options


@dataclass
class ConnectionConfig:
    """Where duplicacy runs.

    Attributes:
        host: SSH host (user@host), empty for local
        container: Container running the Duplicacy Web UI
        runtime: Container runtime executable
        duplicacy_path: Explicit duplicacy binary path (auto-discovered if unset)
        gcd_token: Google Drive token file path
        stats_path: Directory holding the Web UI <storage>.stats files
    """

    host: str = ""
    container: str = ""
    runtime: str = "docker"
    duplicacy_path: str = ""
    gcd_token: str = DEFAULT_GCD_TOKEN
    stats_path: str = ""


@dataclass
class BackupConfig:
    """One duplicacy repository and where it is backed up to.

    Attributes:
        name: Duplicacy repository (snapshot) id
        path: Source path to back up
        cache_dir: Web GUI cache directory to run duplicacy from
        destinations: Storage names to back up to
        retention: Retention policy for this repository
        threads: Number of upload threads
    """

    name: str
    path: str = ""
    cache_dir: str = ""
    destinations: list[str] = field(default_factory=list)
    retention: RetentionConfig = field(default_factory=RetentionConfig)
    threads: int = 1

    @property
    def working_dir(self) -> str:
        return self.cache_dir or self.path


@dataclass
class StorageConfig:
    """Per-storage settings.

    Attributes:
        retention: Storage-wide retention; prunes all repositories with -a
        password_env: Environment variable holding this storage's password
    """

    retention: Optional[RetentionConfig] = None
    password_env: str = ""


@dataclass
class ForgejoConfig:
    """Forgejo issue notification settings."""

    url: str = ""
    repo: str = ""
    token: str = ""
    token_env: str = ""
    assignee: str = ""

    @property
    def enabled(self) -> bool:
        return bool(self.url and self.repo)

    def get_token(self) -> str:
        """Return the token, then the ``token_env`` variable, then FORGEJO_TOKEN."""
        if self.token:
            return self.token
        if self.token_env:
            return os.environ.get(self.token_env, "")
        return os.environ.get("FORGEJO_TOKEN", "")


@dataclass
class RepositoryConfig:
    """Legacy repository definition."""

    id: str
    path: str = ""
    storage: list[str] = field(default_factory=list)
    backup_options: str = ""
    prune: bool = False
    prune_options: str = ""
    check: bool = False


@dataclass
class Config:
    """Root configuration object.

    Attributes:
        connection: Connection settings shared by every operation
        backups: Backup definitions
        storages: Per-storage settings keyed by storage name
        maintenance: Storages that are only pruned and checked
        forgejo: Failure notification settings
        ssh_password_env: Legacy: environment variable holding the ssh password
        repositories: Legacy repository definitions
    """

    connection: ConnectionConfig = field(default_factory=ConnectionConfig)
    backups: list[BackupConfig] = field(default_factory=list)
    storages: dict[str, StorageConfig] = field(default_factory=dict)
    maintenance: list[str] = field(default_factory=list)
    forgejo: ForgejoConfig = field(default_factory=ForgejoConfig)
    ssh_password_env: str = ""
    repositories: list[RepositoryConfig] = field(default_factory=list)

    def all_storages(self) -> list[str]:
        """Backup destinations then maintenance storages, without duplicates."""
        storages: list[str] = []
        for name in [d for b in self.backups for d in b.destinations] + self.maintenance:
            if name not in storages:
                storages.append(name)
        return storages

    def storage_retention(self, storage: str) -> Optional[RetentionConfig]:
        """Storage-wide retention, if one is configured."""
        storage_config = self.storages.get(storage)
        if storage_config is None:
            return None
        return storage_config.retention

    def backup_retention(self, name: str) -> RetentionConfig:
        for backup in self.backups:
            if backup.name == name:
                return backup.retention
        return RetentionConfig(daily=DEFAULT_DAILY, weekly=DEFAULT_WEEKLY)

    def backups_for_storage(self, storage: str) -> list[str]:
        return [b.name for b in self.backups if storage in b.destinations]

    def storage_passwords(self) -> dict[str, str]:
        """Per-storage passwords read from their ``password_env`` variables."""
        passwords = {}
        for name, storage_config in self.storages.items():
            if storage_config.password_env:
                value = os.environ.get(storage_config.password_env, "")
                if value:
                    passwords[name] = value
        return passwords
