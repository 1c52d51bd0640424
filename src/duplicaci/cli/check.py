"""Check command: verify storages and record their statistics."""

import argparse
import logging

from ..__logger__ import create_logger, get_console
from ..config import ConfigError
from ..executor import Executor, ExecutorError
from ..stats import StatsParseError, StatsWriteError, StatsWriter, parse_check_output
from ..stats.writer import DEFAULT_STATS_PATH
from .common import (
    build_context,
    get_log_level,
    load_optional_config,
    print_stats_summary,
)

logger = logging.getLogger(__name__)


def check_storage(
    executor: Executor, storage: str, writer: StatsWriter | None
) -> str | None:
    """Run ``check -tabular`` on one storage and optionally record its stats.

    Returns:
        The error message if the check itself failed; stats problems only warn
    """
    try:
        output = executor.capture(
            "check", "-tabular", "-storage", storage, storage=storage
        )
    except ExecutorError as e:
        partial = getattr(e, "stdout", "")
        if partial:
            get_console().out(partial.rstrip("\n"), highlight=False)
        logger.error("check on %s failed: %s", storage, e)
        return str(e)

    if output:
        get_console().out(output.rstrip("\n"), highlight=False)
    logger.info("    Check on '%s' completed successfully", storage)

    if writer is None or not output:
        return None

    try:
        day_stats = parse_check_output(output)
    except StatsParseError as e:
        logger.warning("failed to parse check output for stats: %s", e)
        return None

    print_stats_summary(storage, day_stats)

    try:
        writer.update_storage_stats(storage, day_stats)
    except StatsWriteError as e:
        logger.warning("failed to update stats: %s", e)
    else:
        logger.info("    Updated Duplicacy Web UI stats for '%s'", storage)
    return None


def execute_check(args: argparse.Namespace) -> int:
    """Execute the check command.

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

    context = build_context(args, config)
    executor = Executor(context)

    writer = None
    if args.update_stats:
        stats_path = args.stats_path or (config.connection.stats_path if config else "")
        writer = StatsWriter(
            context, executor.runner, stats_path=stats_path or DEFAULT_STATS_PATH
        )

    has_errors = False
    for storage in args.storages:
        logger.info("==> Checking storage '%s'", storage)
        if check_storage(executor, storage, writer) is not None:
            has_errors = True

    if has_errors:
        logger.error("check completed with errors")
        return 1

    logger.info("==> All checks completed successfully")
    return 0
