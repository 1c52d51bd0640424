"""Run duplicacy through the configured execution context."""

from .compose import compose_command
from .context import ExecutionContext
from .locator import BinaryLocator
from .redact import display_command
from .runner import CommandRunner


class Executor:
    """Resolve, compose and run duplicacy commands for one context."""

    def __init__(
        self,
        context: ExecutionContext,
        runner: CommandRunner | None = None,
        locator: BinaryLocator | None = None,
    ) -> None:
        self.context = context
        self.runner = runner or CommandRunner(
            dry_run=context.dry_run, verbose=context.verbose
        )
        self.locator = locator or BinaryLocator(context, self.runner)

    def build(self, *args: str, storage: str = "") -> str:
        """Compose the command for ``args`` without running it."""
        binary = self.locator.resolve()
        return compose_command(self.context, binary, args, storage=storage)

    def display(self, command: str) -> str:
        return display_command(command, self.context)

    def run(self, *args: str, storage: str = "") -> None:
        """Run duplicacy with output streamed to the terminal."""
        command = self.build(*args, storage=storage)
        self.runner.run(command, display=self.display(command))

    def capture(self, *args: str, storage: str = "") -> str:
        """Run duplicacy and return its standard output."""
        command = self.build(*args, storage=storage)
        return self.runner.capture(command, display=self.display(command))
