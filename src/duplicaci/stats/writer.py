"""Update the per-storage statistics files read by the Duplicacy Web UI."""

import json
import logging
from pathlib import Path

from filelock import FileLock

from ..executor import (
    CommandRunner,
    ExecutionContext,
    display_command,
    wrap_container,
    wrap_remote,
)
from ..executor.errors import CommandError
from .models import DayStats, StorageStats, stats_from_dict, stats_to_dict
from .parser import today_date

logger = logging.getLogger(__name__)

DEFAULT_STATS_PATH = "/config/stats/storages"
HEREDOC_MARKER = "STATSEOF"


class StatsWriteError(Exception):
    """The statistics archive could not be written."""

    pass


class StatsWriter:
    """Read-modify-write the ``<storage>.stats`` archive of a storage.

    With a container or a remote host the archive lives there and is read
    and written through shell commands; otherwise it is a local file.
    """

    def __init__(
        self,
        context: ExecutionContext,
        runner: CommandRunner | None = None,
        stats_path: str = DEFAULT_STATS_PATH,
    ) -> None:
        self.context = context
        self.runner = runner or CommandRunner(
            dry_run=context.dry_run, verbose=context.verbose
        )
        self.stats_path = stats_path

    @property
    def is_local(self) -> bool:
        return not (self.context.container or self.context.ssh_host)

    def stats_file(self, storage: str) -> str:
        return f"{self.stats_path.rstrip('/')}/{storage}.stats"

    def update_storage_stats(
        self, storage: str, day_stats: DayStats, day: str | None = None
    ) -> None:
        """Add or replace the entry for ``day`` (default today).

        A dry run does not execute the remote read either, so its preview
        holds only the new entry.
        """
        path = self.stats_file(storage)
        day = day or today_date()

        if self.is_local and not self.runner.dry_run:
            try:
                Path(path).parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StatsWriteError(f"failed to create {Path(path).parent}: {e}") from e
            with FileLock(f"{path}.lock"):
                stats = self.read_stats_file(path)
                stats[day] = day_stats
                self.write_stats_file(path, stats)
            return

        stats = self.read_stats_file(path)
        stats[day] = day_stats
        self.write_stats_file(path, stats)

    def read_stats_file(self, path: str) -> StorageStats:
        """Read an archive, starting fresh when it is missing or invalid."""
        logger.debug("Reading stats: %s", path)

        if self.is_local:
            try:
                content = Path(path).read_text(encoding="utf-8")
            except FileNotFoundError:
                return {}
            except OSError as e:
                logger.warning("Cannot read stats file %s: %s", path, e)
                return {}
        else:
            command = self.shell_command(f"cat {path} 2>/dev/null || echo '{{}}'")
            try:
                content = self.runner.capture(command, display=self.display(command))
            except CommandError as e:
                logger.warning("Failed to read stats file %s: %s", path, e)
                return {}

        try:
            data = json.loads(content or "{}")
        except json.JSONDecodeError:
            logger.warning("Ignoring unparsable stats file: %s", path)
            return {}
        if not isinstance(data, dict):
            return {}
        return stats_from_dict(data)

    def write_stats_file(self, path: str, stats: StorageStats) -> None:
        # indented to match what the Web UI writes
        content = json.dumps(stats_to_dict(stats), indent=4)

        if self.runner.dry_run:
            logger.info("[DRY-RUN] Would write to %s:\n%s", path, content)
            return

        logger.debug("Writing stats: %s", path)
        if self.is_local:
            try:
                Path(path).write_text(content + "\n", encoding="utf-8")
            except OSError as e:
                raise StatsWriteError(f"failed to write stats file: {e}") from e
            return

        command = self.shell_command(
            f"cat > {path} << '{HEREDOC_MARKER}'\n{content}\n{HEREDOC_MARKER}"
        )
        try:
            self.runner.run(command, display=self.display(command))
        except CommandError as e:
            raise StatsWriteError(f"failed to write stats file: {e}") from e

    def display(self, command: str) -> str:
        return display_command(command, self.context)

    def shell_command(self, command: str) -> str:
        """Wrap a shell snippet for the container and remote host."""
        command = wrap_container(command, self.context, needs_shell=True)
        return wrap_remote(command, self.context)
