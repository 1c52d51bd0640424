"""Execution context: where and how a duplicacy command runs."""

from dataclasses import dataclass, field
from typing import Mapping

DEFAULT_RUNTIME = "docker"


@dataclass(frozen=True)
class ExecutionContext:
    """Immutable description of the layers wrapped around one invocation.

    Attributes:
        binary_path: Explicit duplicacy binary path (empty = discover)
        repo_path: Repository directory to cd into
        cache_dir: Web GUI cache directory, takes precedence over repo_path
        container: Container name; enables container mode
        container_runtime: Container runtime executable
        ssh_host: Remote host (user@host); enables remote mode
        ssh_password: Password injected through sshpass
        storage_password: Default storage encryption password
        storage_passwords: Per-storage passwords keyed by storage name
        gcd_token: Google Drive token file path
        dry_run: Report commands without running them
        verbose: Log every composed command
    """

    binary_path: str = ""
    repo_path: str = ""
    cache_dir: str = ""
    container: str = ""
    container_runtime: str = DEFAULT_RUNTIME
    ssh_host: str = ""
    ssh_password: str = ""
    storage_password: str = ""
    storage_passwords: Mapping[str, str] = field(default_factory=dict)
    gcd_token: str = ""
    dry_run: bool = False
    verbose: bool = False

    @property
    def working_directory(self) -> str:
        """Directory to change into before running, cache dir first."""
        return self.cache_dir or self.repo_path

    def resolve_password(self, storage: str = "") -> str:
        """Return the password for a storage, falling back to the default."""
        if storage and storage in self.storage_passwords:
            return self.storage_passwords[storage]
        return self.storage_password

    def secrets(self) -> list[str]:
        """All non-empty secret values held by this context."""
        values = [self.ssh_password, self.storage_password]
        values.extend(self.storage_passwords.values())
        return [v for v in values if v]
