"""Tests for subprocess helpers."""

import subprocess
import sys
from unittest.mock import MagicMock, patch

import pytest

from osoptimize.process import (
    CommandResult,
    CommandTimeout,
    command_exists,
    run_command,
    run_with_timeout,
)


class TestCommandResult:
    def test_success(self):
        assert CommandResult(stdout="", stderr="", returncode=0).success
        assert not CommandResult(stdout="", stderr="", returncode=1).success


class TestCommandExists:
    def test_existing(self):
        with patch("osoptimize.process.shutil.which", return_value="/usr/bin/du"):
            assert command_exists("du") is True

    def test_missing(self):
        with patch("osoptimize.process.shutil.which", return_value=None):
            assert command_exists("docker") is False


class TestRunCommand:
    def test_captures_output(self):
        completed = subprocess.CompletedProcess(["echo"], 0, stdout="hi\n", stderr="")
        with patch("osoptimize.process.subprocess.run", return_value=completed) as mock_run:
            result = run_command(["echo", "hi"], timeout=5)

        assert result.stdout == "hi\n"
        assert result.success
        assert mock_run.call_args.kwargs["timeout"] == 5
        assert mock_run.call_args.kwargs["capture_output"] is True


class TestRunWithTimeout:
    def test_returns_result(self):
        result = run_with_timeout([sys.executable, "-c", "print('ok')"], timeout=30)
        assert result.success
        assert result.stdout.strip() == "ok"

    def test_terminates_slow_command(self):
        with pytest.raises(CommandTimeout) as exc_info:
            run_with_timeout([sys.executable, "-c", "import time; time.sleep(30)"], timeout=0.5)
        assert exc_info.value.timeout == 0.5

    def test_kills_when_terminate_ignored(self):
        proc = MagicMock()
        proc.communicate.side_effect = [
            subprocess.TimeoutExpired(["x"], 1),
            subprocess.TimeoutExpired(["x"], 2),
            ("", ""),
        ]
        with patch("osoptimize.process.subprocess.Popen", return_value=proc):
            with pytest.raises(CommandTimeout):
                run_with_timeout(["docker", "volume", "prune", "-f"], timeout=1)

        proc.terminate.assert_called_once()
        proc.kill.assert_called_once()

    def test_timeout_is_runtime_error(self):
        assert issubclass(CommandTimeout, RuntimeError)
