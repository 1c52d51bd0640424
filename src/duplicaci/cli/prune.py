"""Prune command: remove old revisions according to retention options."""

import argparse
import logging
import shlex

from ..__logger__ import create_logger
from ..config import ConfigError
from ..executor import Executor, ExecutorError
from .common import build_context, get_log_level, load_optional_config

logger = logging.getLogger(__name__)


def execute_prune(args: argparse.Namespace) -> int:
    """Execute the prune command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    create_logger(get_log_level(args))

    if not args.storages:
        logger.error("at least one --storage is required")
        return 1

    try:
        config = load_optional_config(args)
    except ConfigError as e:
        logger.error("Failed to load config: %s", e)
        return 1

    executor = Executor(build_context(args, config))
    has_errors = False

    for storage in args.storages:
        logger.info("==> Pruning storage '%s'", storage)
        prune_args = ["prune", "-storage", storage]
        if args.repository:
            prune_args += ["-id", args.repository]
        prune_args += shlex.split(args.prune_options)
        try:
            executor.run(*prune_args, storage=storage)
        except ExecutorError as e:
            logger.error("prune on %s failed: %s", storage, e)
            has_errors = True
            continue
        logger.info("    Prune on '%s' completed successfully", storage)

    if has_errors:
        logger.error("prune completed with errors")
        return 1

    logger.info("==> All prune operations completed successfully")
    return 0
