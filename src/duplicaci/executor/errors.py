"""Exceptions raised while locating and running the duplicacy CLI."""


class ExecutorError(Exception):
    """Base class for executor errors."""

    pass


class DiscoveryError(ExecutorError):
    """The duplicacy binary could not be discovered inside the container."""

    pass


class BinaryNotFoundError(DiscoveryError):
    """Discovery ran but found no duplicacy binary."""

    pass


class CommandError(ExecutorError):
    """A composed command could not be run to a successful end."""

    def __init__(self, message, command="", returncode=None, stdout="", stderr=""):
        super().__init__(message)
        self.command = command
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class CommandExitError(CommandError):
    """The command ran and returned a non-zero exit code."""

    pass


class CommandLaunchError(CommandError):
    """The command could not be started at all."""

    pass
