"""CLI dispatcher: argument parsing and subcommand routing."""

import argparse
import sys
from typing import Callable

from .backup import DEFAULT_PRUNE_OPTIONS
from .common import (
    add_connection_args,
    add_dry_run_arg,
    add_repository_args,
    add_verbosity_args,
)


def create_subcommand_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="duplicaci",
        description=(
            "Run Duplicacy backups from CI/CD pipelines, locally, over SSH "
            "or inside Docker containers"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    add_verbosity_args(parser)

    parser.add_argument(
        "-V",
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        help="Path to configuration file",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands (use 'command --help' for details)",
    )

    # backup command
    backup_parser = subparsers.add_parser(
        "backup",
        help="Back up a repository",
        description=(
            "Back up one repository to one or more storages, optionally "
            "followed by check and prune"
        ),
    )
    add_dry_run_arg(backup_parser)
    add_repository_args(backup_parser)
    backup_parser.add_argument(
        "--backup-options",
        metavar="OPTS",
        default="",
        help="Additional backup options (e.g., '-threads 4')",
    )
    backup_parser.add_argument(
        "--check",
        action="store_true",
        help="Run check after backup",
    )
    backup_parser.add_argument(
        "--prune",
        action="store_true",
        help="Run prune after backup",
    )
    backup_parser.add_argument(
        "--prune-options",
        metavar="OPTS",
        default=DEFAULT_PRUNE_OPTIONS,
        help=f"Prune retention options (default: '{DEFAULT_PRUNE_OPTIONS}')",
    )
    add_connection_args(backup_parser)
    notify = backup_parser.add_argument_group("Notification options")
    notify.add_argument(
        "--create-issues",
        action="store_true",
        help="Create a Forgejo issue on failure",
    )
    notify.add_argument("--forgejo-url", metavar="URL", help="Forgejo server URL")
    notify.add_argument(
        "--forgejo-repo", metavar="OWNER/REPO", help="Repository for issues"
    )
    notify.add_argument(
        "--forgejo-token",
        metavar="TOKEN",
        help="Forgejo API token (or FORGEJO_TOKEN env)",
    )
    notify.add_argument("--assignee", metavar="USER", help="Assign issues to this user")

    # prune command
    prune_parser = subparsers.add_parser(
        "prune",
        help="Prune old revisions",
        description="Remove old backup revisions according to retention options",
    )
    add_dry_run_arg(prune_parser)
    add_repository_args(prune_parser)
    prune_parser.add_argument(
        "--prune-options",
        metavar="OPTS",
        default=DEFAULT_PRUNE_OPTIONS,
        help=f"Prune retention options (default: '{DEFAULT_PRUNE_OPTIONS}')",
    )
    add_connection_args(prune_parser)

    # check command
    check_parser = subparsers.add_parser(
        "check",
        help="Check backup integrity",
        description="Verify storages and optionally update the Web UI statistics",
    )
    add_dry_run_arg(check_parser)
    add_repository_args(check_parser)
    check_parser.add_argument(
        "--update-stats",
        action="store_true",
        help="Update Duplicacy Web UI stats after check",
    )
    check_parser.add_argument(
        "--stats-path",
        metavar="DIR",
        help="Directory holding the Web UI stats files (default: /config/stats/storages)",
    )
    add_connection_args(check_parser)

    # run command
    run_parser = subparsers.add_parser(
        "run",
        help="Run everything defined in the config",
        description="Back up, prune and check according to the configuration",
    )
    add_dry_run_arg(run_parser)
    add_connection_args(run_parser)

    # config command with subcommands
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Validate or initialize configuration",
    )
    config_subs = config_parser.add_subparsers(dest="config_action")

    config_subs.add_parser(
        "validate",
        help="Validate configuration file",
    )

    init_parser = config_subs.add_parser(
        "init",
        help="Generate example configuration",
    )
    init_parser.add_argument(
        "-o",
        "--output",
        metavar="FILE",
        help="Output file (default: stdout)",
    )

    return parser


def run_subcommand(args: argparse.Namespace) -> int:
    """Run the specified subcommand.

    Args:
        args: Parsed arguments

    Returns:
        Exit code
    """
    from .. import __version__

    if args.version:
        print(f"duplicaci {__version__}")
        return 0

    if not args.command:
        print("No command specified. Use --help for usage information.")
        return 1

    handlers: dict[str, Callable] = {
        "backup": cmd_backup,
        "prune": cmd_prune,
        "check": cmd_check,
        "run": cmd_run,
        "config": cmd_config,
    }

    handler = handlers.get(args.command)
    if handler:
        return handler(args)
    else:
        print(f"Unknown command: {args.command}")
        return 1


def cmd_backup(args: argparse.Namespace) -> int:
    """Execute backup command."""
    from .backup import execute_backup

    return execute_backup(args)


def cmd_prune(args: argparse.Namespace) -> int:
    """Execute prune command."""
    from .prune import execute_prune

    return execute_prune(args)


def cmd_check(args: argparse.Namespace) -> int:
    """Execute check command."""
    from .check import execute_check

    return execute_check(args)


def cmd_run(args: argparse.Namespace) -> int:
    """Execute run command."""
    from .run import execute_run

    return execute_run(args)


def cmd_config(args: argparse.Namespace) -> int:
    """Execute config command."""
    from .config_cmd import execute_config

    return execute_config(args)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for duplicaci CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_subcommand_parser()
    args = parser.parse_args(argv)

    return run_subcommand(args)
