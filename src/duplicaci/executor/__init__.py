"""Locate, compose and run duplicacy commands.

Commands can run locally, inside a container, over ssh, or inside a
container on a remote host.
"""

from .compose import (
    compose_command,
    escape_double_quoted,
    escape_single_quoted,
    wrap_container,
    wrap_remote,
)
from .context import ExecutionContext
from .errors import (
    BinaryNotFoundError,
    CommandError,
    CommandExitError,
    CommandLaunchError,
    DiscoveryError,
    ExecutorError,
)
from .executor import Executor
from .locator import BinaryLocator
from .redact import REDACTED, display_command, redact
from .runner import CommandRunner

__all__ = [
    "BinaryLocator",
    "BinaryNotFoundError",
    "CommandError",
    "CommandExitError",
    "CommandLaunchError",
    "CommandRunner",
    "DiscoveryError",
    "ExecutionContext",
    "Executor",
    "ExecutorError",
    "REDACTED",
    "compose_command",
    "display_command",
    "escape_double_quoted",
    "escape_single_quoted",
    "redact",
    "wrap_container",
    "wrap_remote",
]
