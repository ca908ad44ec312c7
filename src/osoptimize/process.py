"""Subprocess helpers for the external tools cleanup relies on (du, docker, osascript)."""

import logging
import shutil
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Grace period between SIGTERM and SIGKILL for a timed-out child
TERMINATE_GRACE_SECONDS = 2.0


@dataclass(frozen=True)
class CommandResult:
    """Result of an external command.

    Attributes:
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        returncode: Exit code of the command.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if command executed successfully."""
        return self.returncode == 0


class CommandTimeout(RuntimeError):
    """Raised when a command outlives its time budget and has been terminated."""

    def __init__(self, args: list[str], timeout: float) -> None:
        super().__init__(f"{' '.join(args)} timed out after {timeout:g}s")
        self.command = args
        self.timeout = timeout


def command_exists(name: str) -> bool:
    """Check if a command exists in the system PATH."""
    return shutil.which(name) is not None


def run_command(args: list[str], *, timeout: float | None = 60.0) -> CommandResult:
    """
    Execute a command and capture its output.

    Args:
        args: Command and arguments to execute
        timeout: Maximum time in seconds to wait

    Returns:
        CommandResult with stdout, stderr and returncode

    Raises:
        subprocess.TimeoutExpired: If the command exceeds timeout
        FileNotFoundError: If the executable is not found
    """
    result = subprocess.run(
        args,
        capture_output=True,
        text=True,
        timeout=timeout,
    )
    return CommandResult(
        stdout=result.stdout,
        stderr=result.stderr,
        returncode=result.returncode,
    )


def run_with_timeout(args: list[str], timeout: float) -> CommandResult:
    """
    Run a command, terminating it if it exceeds `timeout` seconds.

    Termination is best effort: the child gets SIGTERM, then SIGKILL after a
    short grace period.

    Args:
        args: Command and arguments to execute
        timeout: Wall-clock budget in seconds

    Returns:
        CommandResult of the finished command

    Raises:
        CommandTimeout: If the command was terminated for running too long
        FileNotFoundError: If the executable is not found
    """
    proc = subprocess.Popen(
        args,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )
    try:
        stdout, stderr = proc.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        logger.debug("Terminating %s after %ss", args[0], timeout)
        proc.terminate()
        try:
            proc.communicate(timeout=TERMINATE_GRACE_SECONDS)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.communicate()
        raise CommandTimeout(args, timeout) from None

    return CommandResult(stdout=stdout, stderr=stderr, returncode=proc.returncode)
