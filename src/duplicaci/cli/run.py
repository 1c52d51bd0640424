"""Run command: execute every backup, prune and check from the config."""

import argparse
import logging
from dataclasses import replace

from ..__logger__ import create_logger
from ..config import (
    BackupConfig,
    Config,
    ConfigError,
    RetentionConfig,
    find_config_file,
    load_config,
)
from ..config.schema import DEFAULT_DAILY, DEFAULT_WEEKLY
from ..executor import (
    BinaryLocator,
    CommandRunner,
    ExecutionContext,
    Executor,
    ExecutorError,
)
from ..stats import StatsWriter
from ..stats.writer import DEFAULT_STATS_PATH
from .check import check_storage
from .common import build_context, get_log_level, send_failure_notification

logger = logging.getLogger(__name__)

RULE = "=" * 42


def _heading(title: str) -> None:
    logger.info(RULE)
    logger.info(title)
    logger.info(RULE)


class RunResult:
    """Errors collected across the phases of one run."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.failed_backups: list[str] = []

    def add(self, message: str) -> None:
        self.errors.append(message)
        logger.error(message)


class ExecutorFactory:
    """Executors for one run that share a runner and a binary locator."""

    def __init__(self, base: ExecutionContext) -> None:
        self.base = base
        self.runner = CommandRunner(dry_run=base.dry_run, verbose=base.verbose)
        self.locator = BinaryLocator(base, self.runner)

    def for_dir(self, working_dir: str) -> Executor:
        context = replace(self.base, cache_dir=working_dir)
        return Executor(context, runner=self.runner, locator=self.locator)


def run_backups(config: Config, factory: ExecutorFactory, result: RunResult) -> None:
    """Phase 1: back up every repository to each of its destinations."""
    for backup in config.backups:
        logger.info("==> Backing up '%s'", backup.name)
        executor = factory.for_dir(backup.working_dir)
        failed = False

        for dest in backup.destinations:
            logger.info("    -> %s", dest)
            backup_args = ["backup", "-storage", dest]
            if backup.threads > 1:
                backup_args += ["-threads", str(backup.threads)]
            try:
                executor.run(*backup_args, storage=dest)
            except ExecutorError as e:
                result.add(f"{backup.name} -> {dest}: {e}")
                failed = True
                continue
            logger.info("       OK")

        if failed:
            result.failed_backups.append(backup.name)


def prune_jobs(config: Config, storage: str) -> list[tuple[str, list[str]]]:
    """Describe the prune invocations for one storage as (label, args) pairs.

    A storage-wide retention prunes every repository with ``-a``; otherwise
    each repository backed up to the storage is pruned with its own
    retention, and maintenance-only storages fall back to the default one.
    """
    retention = config.storage_retention(storage)
    if retention is not None:
        return [
            (
                f"'{storage}' (all repositories)",
                ["prune", "-storage", storage, *retention.to_prune_options()],
            )
        ]

    backups = config.backups_for_storage(storage)
    if not backups:
        default = RetentionConfig(daily=DEFAULT_DAILY, weekly=DEFAULT_WEEKLY)
        return [
            (
                f"'{storage}' (maintenance, default retention)",
                ["prune", "-storage", storage, *default.to_prune_options()],
            )
        ]

    jobs = []
    for name in backups:
        options = config.backup_retention(name).to_prune_options(include_all=False)
        jobs.append(
            (
                f"'{storage}' (repository: {name})",
                ["prune", "-storage", storage, "-id", name, *options],
            )
        )
    return jobs


def run_prunes(config: Config, executor: Executor, result: RunResult) -> None:
    """Phase 2: prune every storage."""
    for storage in config.all_storages():
        for label, prune_args in prune_jobs(config, storage):
            logger.info("==> Pruning %s", label)
            try:
                executor.run(*prune_args, storage=storage)
            except ExecutorError as e:
                target = storage
                if "-id" in prune_args:
                    target = f"{storage}/{prune_args[prune_args.index('-id') + 1]}"
                result.add(f"prune {target}: {e}")
                continue
            logger.info("    OK")


def run_checks(
    config: Config, executor: Executor, writer: StatsWriter | None, result: RunResult
) -> None:
    """Phase 3: check every storage and record its statistics."""
    for storage in config.all_storages():
        logger.info("==> Checking '%s'", storage)
        error = check_storage(executor, storage, writer)
        if error is not None:
            result.errors.append(f"check {storage}: {error}")


def maintenance_dir(backups: list[BackupConfig]) -> str:
    """Working directory for prune and check: the first backup's."""
    if not backups:
        return ""
    return backups[0].working_dir


def notify_failure(config: Config, result: RunResult) -> None:
    forgejo = config.forgejo
    if not forgejo.enabled:
        return
    token = forgejo.get_token()
    if not token:
        return

    if result.failed_backups:
        title = f"[duplicaci] {', '.join(result.failed_backups)}: backup failed"
    else:
        title = "[duplicaci] maintenance failed"

    body = "## Backup Run Failed\n\n"
    if result.failed_backups:
        body += f"**Failed backups:** {', '.join(result.failed_backups)}\n\n"
    body += "### Errors\n\n"
    body += "".join(f"- {e}\n" for e in result.errors)

    send_failure_notification(
        forgejo.url, forgejo.repo, token, forgejo.assignee, title, body
    )


def run_all(config: Config, base: ExecutionContext) -> RunResult:
    """Run the backup, prune and check phases for a loaded config."""
    result = RunResult()
    factory = ExecutorFactory(base)

    _heading("Phase 1: Backups")
    run_backups(config, factory, result)

    maintenance = factory.for_dir(maintenance_dir(config.backups))

    _heading("Phase 2: Prune")
    run_prunes(config, maintenance, result)

    writer = None
    if base.container or config.connection.stats_path:
        writer = StatsWriter(
            base,
            maintenance.runner,
            stats_path=config.connection.stats_path or DEFAULT_STATS_PATH,
        )

    _heading("Phase 3: Check")
    run_checks(config, maintenance, writer, result)

    return result


def execute_run(args: argparse.Namespace) -> int:
    """Execute the run command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    create_logger(get_log_level(args))

    try:
        config_path = find_config_file(getattr(args, "config", None))
        if config_path is None:
            logger.error("No configuration file found.")
            logger.error("Create one with: duplicaci config init")
            return 1

        logger.info("Loading configuration from: %s", config_path)
        config, warnings = load_config(config_path)

        for warning in warnings:
            logger.warning("Config: %s", warning)

    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return 1

    result = run_all(config, build_context(args, config))

    _heading("Summary")
    if not result.errors:
        logger.info("All operations completed successfully")
        return 0

    logger.error("%d error(s) occurred:", len(result.errors))
    for error in result.errors:
        logger.error("  - %s", error)

    notify_failure(config, result)
    return 1
