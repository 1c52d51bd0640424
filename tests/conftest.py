"""Pytest configuration and shared fixtures."""

import os
import stat

import pytest

from duplicaci.executor import CommandRunner, ExecutionContext

SAMPLE_CHECK_OUTPUT = """\
Repository set to /mnt/moxy_unraid_appDataBackup
Storage set to /mnt/remotes/10.30.88.1_DuplicacyBackups
2025-12-29 01:00:18.421 INFO STORAGE_SET Storage set to gcd://My Drive@moxy-duplicacy-backup
2025-12-29 01:00:19.894 INFO SNAPSHOT_CHECK Listing all chunks
2025-12-29 01:02:45.064 INFO SNAPSHOT_CHECK 2 snapshots and 48 revisions
2025-12-29 01:02:45.064 INFO SNAPSHOT_CHECK Total chunk size is 4,617M in 975 chunks
2025-12-29 01:02:45.068 INFO SNAPSHOT_CHECK All chunks referenced by snapshot mikrotik_config_backup at revision 1 exist
2025-12-29 01:02:45.070 INFO SNAPSHOT_CHECK All chunks referenced by snapshot unraid_appdata_backup at revision 1 exist
2025-12-29 01:02:45.167 INFO SNAPSHOT_CHECK
                  snap | rev |                          | files |  bytes | chunks |    bytes | uniq |    bytes | new |    bytes |
 unraid_appdata_backup |   1 | @ 2025-10-13 20:34 -hash |    28 | 3,384M |    195 | 991,477K |   32 | 164,900K | 195 | 991,477K |
 unraid_appdata_backup |   8 | @ 2025-10-20 01:01       |    56 | 5,926M |    197 |   1,041M |   32 | 228,619K |  34 | 240,165K |
 unraid_appdata_backup | all |                          |       |        |    883 |   4,608M |  883 |   4,608M |     |          |

                   snap | rev |                          | files | bytes | chunks |  bytes | uniq |  bytes | new | bytes |
 mikrotik_config_backup |   1 | @ 2025-10-13 20:36 -hash |     9 |  826K |      4 |   672K |    4 |   672K |   4 |  672K |
 mikrotik_config_backup |   8 | @ 2025-10-20 01:01       |     8 |  532K |      4 |   377K |    4 |   377K |   4 |  377K |
 mikrotik_config_backup | all |                          |       |       |     92 | 8,853K |   92 | 8,853K |     |       |
"""

# Stand-ins for the tools wrapped around duplicacy. Each drops its own
# options and runs the rest locally, so composed commands can be executed.
FAKE_TOOLS = {
    # docker exec <container> <command...>
    "docker": 'shift 2\nexec "$@"\n',
    # ssh -o X -o Y <host> <command>
    "ssh": 'shift 5\nexec sh -c "$1"\n',
    # sshpass -p <password> ssh ...
    "sshpass": 'shift 2\nexec "$@"\n',
    # prints its arguments and the password variables it was given
    "duplicacy": (
        'printf "args=%s\\n" "$*"\n'
        'printf "password=%s\\n" "$DUPLICACY_PASSWORD"\n'
        'printf "storage_password=%s\\n" "$DUPLICACY_OFFSITE_NAS_PASSWORD"\n'
        'printf "pwd=%s\\n" "$(pwd)"\n'
    ),
}


@pytest.fixture
def sample_check_output():
    """Return ``duplicacy check -tabular`` output for two repositories."""
    return SAMPLE_CHECK_OUTPUT


@pytest.fixture
def fake_bin(tmp_path, monkeypatch):
    """Put fake docker, ssh, sshpass and duplicacy executables first on PATH."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    for name, body in FAKE_TOOLS.items():
        script = bin_dir / name
        script.write_text("#!/bin/sh\n" + body)
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    monkeypatch.delenv("DUPLICACY_PASSWORD", raising=False)
    monkeypatch.delenv("DUPLICACY_OFFSITE_NAS_PASSWORD", raising=False)
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    return bin_dir


@pytest.fixture
def runner():
    """A runner that really executes commands."""
    return CommandRunner()


@pytest.fixture
def container_context():
    """Context for a container on a remote host with credentials."""
    return ExecutionContext(
        container="Duplicacy",
        ssh_host="root@192.168.1.100",
        ssh_password="secret123",
        storage_password="hunter2",
        cache_dir="/cache/localhost/0",
    )


@pytest.fixture
def sample_config_toml():
    """Return a sample valid TOML configuration string."""
    return """
maintenance = ["OffsiteArchive"]

[connection]
host = "root@192.168.1.100"
container = "Duplicacy"

[[backups]]
name = "server_appdata"
path = "/mnt/appdata"
cache_dir = "/cache/localhost/0"
destinations = ["NASBackup", "GoogleDrive"]
threads = 4

[backups.retention]
daily = 7
weekly = 4
monthly = 6

[[backups]]
name = "mikrotik_config"
path = "/mnt/mikrotik"
destinations = ["NASBackup"]

[storages.GoogleDrive.retention]
daily = 14
weekly = 8

[storages.NASBackup]
password_env = "NAS_PASSWORD"

[notifications.forgejo]
url = "https://git.example.com"
repo = "ops/backups"
token_env = "TEST_FORGEJO_TOKEN"
assignee = "admin"
"""


@pytest.fixture
def config_file(tmp_path, sample_config_toml):
    """Write the sample config to a file and return its path."""
    config_path = tmp_path / "config.toml"
    config_path.write_text(sample_config_toml)
    return config_path


@pytest.fixture
def recording_executor():
    """An Executor stand-in that records invocations instead of running them.

    Set ``failures`` to ``{(command, storage), ...}`` to make those
    invocations raise, and ``output`` to what ``capture`` returns.
    """
    from duplicaci.executor import CommandExitError

    class RecordingExecutor:
        calls: list = []
        failures: set = set()
        output = ""

        def __init__(self, context, runner=None, locator=None):
            self.context = context
            self.runner = runner

        def run(self, *args, storage=""):
            self._record(args, storage)

        def capture(self, *args, storage=""):
            self._record(args, storage)
            return self.output

        def _record(self, args, storage):
            self.calls.append((self.context.working_directory, args))
            if (args[0], storage) in self.failures:
                raise CommandExitError("command exited with code 1", returncode=1)

    RecordingExecutor.calls = []
    RecordingExecutor.failures = set()
    return RecordingExecutor
