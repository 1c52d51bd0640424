"""Backup command: back up one repository to one or more storages."""

import argparse
import logging
import os
import shlex

from ..__logger__ import create_logger
from ..config import ConfigError
from ..executor import Executor, ExecutorError
from .common import (
    build_context,
    get_log_level,
    load_optional_config,
    send_failure_notification,
)

logger = logging.getLogger(__name__)

DEFAULT_PRUNE_OPTIONS = "-keep 0:180 -keep 7:14 -keep 1:1 -a"


def execute_backup(args: argparse.Namespace) -> int:
    """Execute the backup command.

    Backs up to every storage, then optionally checks and prunes them
    when all backups succeeded.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    create_logger(get_log_level(args))

    try:
        config = load_optional_config(args)
    except ConfigError as e:
        logger.error("Failed to load config: %s", e)
        return 1

    if not args.repository:
        logger.error("--repository is required")
        return 1
    if not args.storages:
        logger.error("at least one --storage is required")
        return 1

    executor = Executor(build_context(args, config))
    errors: list[str] = []

    for storage in args.storages:
        logger.info("==> Backing up repository '%s' to storage '%s'", args.repository, storage)
        backup_args = ["backup", "-storage", storage]
        if args.backup_options:
            backup_args += shlex.split(args.backup_options)
        try:
            executor.run(*backup_args, storage=storage)
        except ExecutorError as e:
            errors.append(f"backup to {storage} failed: {e}")
            logger.error("backup to %s failed: %s", storage, e)
            continue
        logger.info("    Backup to '%s' completed successfully", storage)

    # backup -> check -> prune
    if args.check and not errors:
        for storage in args.storages:
            logger.info("==> Checking storage '%s'", storage)
            try:
                executor.run("check", "-storage", storage, storage=storage)
            except ExecutorError as e:
                errors.append(f"check on {storage} failed: {e}")
                logger.error("check on %s failed: %s", storage, e)

    if args.prune and not errors:
        for storage in args.storages:
            logger.info("==> Pruning storage '%s'", storage)
            prune_args = ["prune", "-storage", storage, *shlex.split(args.prune_options)]
            try:
                executor.run(*prune_args, storage=storage)
            except ExecutorError as e:
                errors.append(f"prune on {storage} failed: {e}")
                logger.error("prune on %s failed: %s", storage, e)

    if errors:
        if args.create_issues:
            _notify(args, config, errors)
        logger.error("backup completed with %d error(s)", len(errors))
        return 1

    logger.info("==> All operations completed successfully")
    return 0


def _notify(args: argparse.Namespace, config, errors: list[str]) -> None:
    forgejo = config.forgejo if config else None
    url = args.forgejo_url or (forgejo.url if forgejo else "")
    repo = args.forgejo_repo or (forgejo.repo if forgejo else "")
    token = args.forgejo_token or (forgejo.get_token() if forgejo else "")
    token = token or os.environ.get("FORGEJO_TOKEN", "")
    assignee = args.assignee or (forgejo.assignee if forgejo else "")

    title = f"[duplicaci] {args.repository}: backup failed"
    body = (
        "## Backup Failure\n\n"
        f"**Repository:** {args.repository}\n"
        f"**Storages:** {', '.join(args.storages)}\n\n"
        "### Errors\n\n"
    )
    body += "".join(f"- {e}\n" for e in errors)
    send_failure_notification(url, repo, token, assignee, title, body)
