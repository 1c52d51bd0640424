"""Shared CLI utilities and argument parsers."""

import argparse
import logging
import os

from rich.table import Table

from ..__logger__ import get_console
from ..config import Config, ConfigError, find_config_file, load_config
from ..executor import ExecutionContext
from ..notifier import ForgejoNotifier, NotifierError
from ..stats import DayStats, format_bytes

logger = logging.getLogger(__name__)


def add_verbosity_args(parser: argparse.ArgumentParser) -> None:
    """Add verbosity-related arguments to a parser."""
    group = parser.add_argument_group("Output options")
    group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output (print every command)",
    )
    group.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )
    group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output",
    )


def add_dry_run_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        help="Print commands without executing them",
    )


def add_connection_args(parser: argparse.ArgumentParser) -> None:
    """Add arguments describing where duplicacy runs."""
    group = parser.add_argument_group("Connection options")
    group.add_argument(
        "--docker-container",
        metavar="NAME",
        help="Run inside this container",
    )
    group.add_argument(
        "--container-runtime",
        metavar="EXE",
        help="Container runtime executable (default: docker)",
    )
    group.add_argument(
        "--ssh-host",
        metavar="USER@HOST",
        help="SSH to this host before running",
    )
    group.add_argument(
        "--ssh-password",
        metavar="PASSWORD",
        help="SSH password (or SSH_PASSWORD env)",
    )
    group.add_argument(
        "--storage-password",
        metavar="PASSWORD",
        help="Storage encryption password (or DUPLICACY_PASSWORD env)",
    )
    group.add_argument(
        "--gcd-token",
        metavar="FILE",
        help="Google Drive token file path (for gcd:// storages)",
    )
    group.add_argument(
        "--duplicacy-path",
        metavar="PATH",
        help="Path to the duplicacy binary (default: auto-discover)",
    )


def add_repository_args(parser: argparse.ArgumentParser, required=False) -> None:
    """Add repository selection arguments."""
    parser.add_argument(
        "-r",
        "--repository",
        required=required,
        help="Repository ID",
    )
    parser.add_argument(
        "-p",
        "--repo-path",
        metavar="PATH",
        help="Path to repository (cd here before running duplicacy)",
    )
    parser.add_argument(
        "--cache-dir",
        metavar="PATH",
        help="Duplicacy Web GUI cache directory (e.g., /cache/localhost/0)",
    )
    parser.add_argument(
        "-s",
        "--storage",
        dest="storages",
        metavar="NAME",
        action="append",
        default=[],
        help="Storage backend (repeatable)",
    )


def get_log_level(args: argparse.Namespace) -> str:
    """Determine log level from parsed arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        Log level string (DEBUG, INFO, WARNING, ERROR)
    """
    if getattr(args, "debug", False):
        return "DEBUG"
    elif getattr(args, "quiet", False):
        return "WARNING"
    else:
        return "INFO"


def load_optional_config(args: argparse.Namespace) -> Config | None:
    """Load the config named by --config, if any.

    Raises:
        ConfigError: If the named file is missing or invalid
    """
    explicit = getattr(args, "config", None)
    if not explicit:
        return None
    config_path = find_config_file(explicit)
    if config_path is None:
        raise ConfigError(f"Config file not found: {explicit}")
    config, warnings = load_config(config_path)
    for warning in warnings:
        logger.warning("Config: %s", warning)
    return config


def build_context(
    args: argparse.Namespace, config: Config | None = None
) -> ExecutionContext:
    """Build an execution context from flags, config and environment.

    Flags win over the config file, which wins over the environment.
    """
    connection = config.connection if config else None

    ssh_password = getattr(args, "ssh_password", None) or ""
    if not ssh_password and config and config.ssh_password_env:
        ssh_password = os.environ.get(config.ssh_password_env, "")
    ssh_password = ssh_password or os.environ.get("SSH_PASSWORD", "")

    storage_password = getattr(args, "storage_password", None) or os.environ.get(
        "DUPLICACY_PASSWORD", ""
    )

    def pick(flag, attr):
        value = getattr(args, flag, None)
        if value:
            return value
        return getattr(connection, attr) if connection else ""

    return ExecutionContext(
        binary_path=pick("duplicacy_path", "duplicacy_path"),
        repo_path=getattr(args, "repo_path", None) or "",
        cache_dir=getattr(args, "cache_dir", None) or "",
        container=pick("docker_container", "container"),
        container_runtime=pick("container_runtime", "runtime") or "docker",
        ssh_host=pick("ssh_host", "host"),
        ssh_password=ssh_password,
        storage_password=storage_password,
        storage_passwords=config.storage_passwords() if config else {},
        gcd_token=pick("gcd_token", "gcd_token"),
        dry_run=getattr(args, "dry_run", False),
        verbose=getattr(args, "verbose", False),
    )


def print_stats_summary(storage: str, day_stats: DayStats) -> None:
    """Print parsed check statistics as a table."""
    table = Table(title=f"Storage Stats Summary: {storage}")
    table.add_column("Repository")
    table.add_column("Revisions", justify="right")
    table.add_column("Total size", justify="right")
    table.add_column("Unique size", justify="right")
    table.add_column("Chunks", justify="right")

    for name, repo in sorted(day_stats.repositories.items()):
        table.add_row(
            name,
            str(repo.revisions),
            format_bytes(repo.total_size),
            format_bytes(repo.unique_size),
            str(repo.total_chunks),
        )

    console = get_console()
    console.print(table)
    console.print(
        f"Total size: {format_bytes(day_stats.total_size)}, "
        f"total chunks: {day_stats.total_chunks}, "
        f"repositories: {len(day_stats.repositories)}"
    )


def send_failure_notification(
    url: str, repo: str, token: str, assignee: str, title: str, body: str
) -> bool:
    """Open or update a Forgejo issue; failures are logged, not raised."""
    if not (url and repo and token):
        logger.warning(
            "Forgejo notification requires a URL, a repository and a token"
        )
        return False
    notifier = ForgejoNotifier(url, repo, token, assignee=assignee or None)
    try:
        notifier.create_or_update_issue(title, body)
    except NotifierError as e:
        logger.warning("Failed to create issue: %s", e)
        return False
    return True
