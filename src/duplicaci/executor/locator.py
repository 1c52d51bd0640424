"""Locate the duplicacy binary, once per locator."""

import logging
import threading

from .compose import wrap_container, wrap_remote
from .context import ExecutionContext
from .errors import BinaryNotFoundError, CommandError, DiscoveryError
from .redact import display_command
from .runner import CommandRunner

logger = logging.getLogger(__name__)

DEFAULT_BINARY = "duplicacy"
# The Web GUI downloads the CLI to /config/bin/duplicacy_linux_x64_<version>
CONTAINER_BIN_DIR = "/config/bin"
DISCOVERY_COMMAND = f"ls {CONTAINER_BIN_DIR}/duplicacy_linux_x64_* 2>/dev/null | head -1"


class BinaryLocator:
    """Resolve the path of the duplicacy CLI.

    The outcome of the first call, success or failure, is cached and
    returned by every later call without discovering again.
    """

    def __init__(self, context: ExecutionContext, runner: CommandRunner | None = None):
        self.context = context
        self.runner = runner or CommandRunner(verbose=context.verbose)
        self._lock = threading.Lock()
        self._resolved = False
        self._path = ""
        self._error: DiscoveryError | None = None

    def resolve(self) -> str:
        """Return the binary path, raising the cached discovery error if any."""
        with self._lock:
            if not self._resolved:
                try:
                    self._path = self._discover()
                except DiscoveryError as e:
                    self._error = e
                self._resolved = True

        if self._error is not None:
            raise self._error
        return self._path

    def discovery_command(self) -> str:
        command = wrap_container(DISCOVERY_COMMAND, self.context, needs_shell=True)
        return wrap_remote(command, self.context)

    def _discover(self) -> str:
        if self.context.binary_path:
            return self.context.binary_path

        if not self.context.container:
            return DEFAULT_BINARY

        # No inspection side effects during a dry run
        if self.context.dry_run:
            return DEFAULT_BINARY

        try:
            command = self.discovery_command()
            output = self.runner.capture(
                command, display=display_command(command, self.context)
            )
        except CommandError as e:
            raise DiscoveryError(f"failed to discover duplicacy path: {e}") from e

        path = output.strip()
        if not path:
            raise BinaryNotFoundError(
                f"duplicacy CLI not found in {CONTAINER_BIN_DIR}/"
            )

        if self.context.verbose:
            logger.info("Discovered duplicacy at: %s", path)
        return path
