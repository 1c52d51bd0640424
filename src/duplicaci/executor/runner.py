"""Run composed command strings through a local shell."""

import logging
import subprocess

from .errors import CommandExitError, CommandLaunchError

logger = logging.getLogger(__name__)

SHELL = "bash"

# Exit status a POSIX shell uses when the command is not on the search path
COMMAND_NOT_FOUND = 127


class CommandRunner:
    """Execute one shell command at a time, blocking until it exits.

    In dry-run mode commands are only reported: ``run`` returns and
    ``capture`` returns an empty string.
    """

    def __init__(self, dry_run=False, verbose=False, shell=SHELL) -> None:
        self.dry_run = dry_run
        self.verbose = verbose
        self.shell = shell

    def report(self, command: str, display: str | None = None) -> None:
        """Log a command when running verbosely or in dry-run mode."""
        if self.dry_run:
            logger.info("[DRY-RUN] Command: %s", display or command)
        elif self.verbose:
            logger.info("Command: %s", display or command)
        else:
            logger.debug("Command: %s", display or command)

    def run(self, command: str, display: str | None = None) -> None:
        """Run ``command`` with its output streamed to our stdout/stderr."""
        self.report(command, display)
        if self.dry_run:
            return

        try:
            proc = subprocess.run([self.shell, "-c", command], check=False)
        except OSError as e:
            raise CommandLaunchError(
                f"failed to launch {self.shell}: {e}", command=display or command
            ) from e

        self._check(proc.returncode, display or command)

    def capture(self, command: str, display: str | None = None) -> str:
        """Run ``command`` and return its standard output.

        Standard error is kept out of the terminal and only surfaces in
        the error raised on failure.
        """
        self.report(command, display)
        if self.dry_run:
            return ""

        try:
            proc = subprocess.run(
                [self.shell, "-c", command],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                check=False,
            )
        except OSError as e:
            raise CommandLaunchError(
                f"failed to launch {self.shell}: {e}", command=display or command
            ) from e

        self._check(proc.returncode, display or command, proc.stdout, proc.stderr)
        return proc.stdout

    @staticmethod
    def _check(returncode, command, stdout="", stderr=None) -> None:
        if returncode == 0:
            return

        message = f"command exited with code {returncode}"
        if stderr:
            message = f"{message}: {stderr.strip()}"

        error_class = CommandExitError
        if returncode == COMMAND_NOT_FOUND:
            error_class = CommandLaunchError
            message = f"command not found ({message})"

        raise error_class(
            message,
            command=command,
            returncode=returncode,
            stdout=stdout or "",
            stderr=stderr or "",
        )
