"""Tests for duplicacy binary discovery."""

import logging
import threading
import time
from unittest.mock import Mock

import pytest

from duplicaci.executor import (
    BinaryLocator,
    BinaryNotFoundError,
    CommandExitError,
    CommandRunner,
    DiscoveryError,
    ExecutionContext,
)
from duplicaci.executor.locator import DISCOVERY_COMMAND

DISCOVERED = "/config/bin/duplicacy_linux_x64_3.2.5"


@pytest.fixture
def mock_runner():
    runner = Mock()
    runner.capture.return_value = DISCOVERED + "\n"
    return runner


class TestResolve:
    """Tests for BinaryLocator.resolve."""

    def test_explicit_path(self, mock_runner):
        """Test an explicit path is returned without discovery."""
        context = ExecutionContext(binary_path="/opt/duplicacy", container="Duplicacy")
        assert BinaryLocator(context, mock_runner).resolve() == "/opt/duplicacy"
        mock_runner.capture.assert_not_called()

    def test_default_without_container(self, mock_runner):
        """Test the PATH name is used without a container."""
        locator = BinaryLocator(ExecutionContext(ssh_host="root@host"), mock_runner)
        assert locator.resolve() == "duplicacy"
        mock_runner.capture.assert_not_called()

    def test_default_in_dry_run(self, mock_runner):
        """Test dry runs do not inspect the container."""
        context = ExecutionContext(container="Duplicacy", dry_run=True)
        assert BinaryLocator(context, mock_runner).resolve() == "duplicacy"
        mock_runner.capture.assert_not_called()

    def test_discovers_in_container(self, mock_runner):
        """Test the discovered path is trimmed and returned."""
        locator = BinaryLocator(ExecutionContext(container="Duplicacy"), mock_runner)
        assert locator.resolve() == DISCOVERED
        mock_runner.capture.assert_called_once()
        assert mock_runner.capture.call_args[0][0] == locator.discovery_command()

    def test_discovery_is_cached(self, mock_runner):
        """Test discovery runs only once per locator."""
        locator = BinaryLocator(ExecutionContext(container="Duplicacy"), mock_runner)
        assert locator.resolve() == DISCOVERED
        assert locator.resolve() == DISCOVERED
        assert mock_runner.capture.call_count == 1

    def test_not_found(self, mock_runner):
        """Test empty discovery output is a not-found error."""
        mock_runner.capture.return_value = "\n"
        locator = BinaryLocator(ExecutionContext(container="Duplicacy"), mock_runner)
        with pytest.raises(BinaryNotFoundError, match="/config/bin/"):
            locator.resolve()

    def test_command_failure(self, mock_runner):
        """Test a failed discovery command is a discovery error."""
        mock_runner.capture.side_effect = CommandExitError(
            "command exited with code 255", returncode=255
        )
        locator = BinaryLocator(ExecutionContext(container="Duplicacy"), mock_runner)
        with pytest.raises(DiscoveryError, match="failed to discover duplicacy path"):
            locator.resolve()

    def test_failure_is_cached(self, mock_runner):
        """Test a failure is returned again without running discovery again."""
        mock_runner.capture.return_value = ""
        locator = BinaryLocator(ExecutionContext(container="Duplicacy"), mock_runner)
        with pytest.raises(BinaryNotFoundError) as first:
            locator.resolve()
        with pytest.raises(BinaryNotFoundError) as second:
            locator.resolve()
        assert first.value is second.value
        assert mock_runner.capture.call_count == 1

    def test_concurrent_callers_discover_once(self):
        """Test concurrent first calls share a single discovery."""
        runner = Mock()

        def slow_capture(command, display=None):
            time.sleep(0.05)
            return DISCOVERED

        runner.capture.side_effect = slow_capture
        locator = BinaryLocator(ExecutionContext(container="Duplicacy"), runner)
        results = []
        threads = [
            threading.Thread(target=lambda: results.append(locator.resolve()))
            for _ in range(5)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == [DISCOVERED] * 5
        assert runner.capture.call_count == 1


class TestDiscoveryCommand:
    """Tests for the discovery command."""

    def test_in_container(self):
        """Test discovery runs through a shell in the container."""
        locator = BinaryLocator(ExecutionContext(container="Duplicacy"), Mock())
        assert locator.discovery_command() == (
            f"docker exec Duplicacy sh -c '{DISCOVERY_COMMAND}'"
        )

    def test_on_remote_host(self):
        """Test discovery is wrapped for the remote host."""
        context = ExecutionContext(container="Duplicacy", ssh_host="root@host")
        command = BinaryLocator(context, Mock()).discovery_command()
        assert command.startswith("ssh -o StrictHostKeyChecking=no")
        assert "root@host 'docker exec Duplicacy sh -c " in command

    def test_runs_through_shells(self, fake_bin, runner):
        """Test the discovery command finds nothing outside a real container."""
        locator = BinaryLocator(ExecutionContext(container="Duplicacy"), runner)
        with pytest.raises(BinaryNotFoundError):
            locator.resolve()


class TestDiscoveryLogging:
    """Tests for how discovery commands are logged."""

    def test_ssh_password_is_redacted(self, fake_bin, caplog):
        """Test the logged discovery command hides the ssh password."""
        context = ExecutionContext(
            container="Duplicacy",
            ssh_host="root@host",
            ssh_password="hunter2",
            verbose=True,
        )
        locator = BinaryLocator(context, CommandRunner(verbose=True))
        with caplog.at_level(logging.INFO):
            with pytest.raises(BinaryNotFoundError):
                locator.resolve()

        assert "duplicacy_linux_x64_" in caplog.text
        assert "sshpass -p '***REDACTED***'" in caplog.text
        assert "hunter2" not in caplog.text

    def test_display_passed_to_runner(self, mock_runner):
        """Test the runner receives the redacted form of the command."""
        context = ExecutionContext(
            container="Duplicacy", ssh_host="root@host", ssh_password="hunter2"
        )
        BinaryLocator(context, mock_runner).resolve()
        command = mock_runner.capture.call_args[0][0]
        display = mock_runner.capture.call_args[1]["display"]
        assert "hunter2" in command
        assert "hunter2" not in display
