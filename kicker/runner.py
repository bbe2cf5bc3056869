"""External command execution.

This module handles:
- Running external tools (git, make, yarn, capsule, docker, sh) with an
  explicit working directory
- Reporting exit status and, on request, captured output
- Checking docker-compose service status

The working directory is always passed to the child process; the process
wide current directory is never changed. There is no timeout: a hung tool
blocks the run.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from kicker.errors import EXECUTION_ERROR, CommandFailedError

logger = logging.getLogger(__name__)

# Environment added to every child process
DEFAULT_ENV = {"RUST_BACKTRACE": "full"}


@dataclass
class CommandResult:
    """Result of a command execution.

    Attributes:
        command: The command line that was executed.
        exit_code: Process exit code.
        stdout: Captured standard output (empty unless captured).
        stderr: Captured standard error (empty unless captured).
    """

    command: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class CommandRunner:
    """Runs external programs and reports their exit status.

    Subclass and override ``run`` to substitute execution (tests do this).
    """

    def run(
        self,
        cmd: Sequence[str],
        cwd: Path | None = None,
        capture_output: bool = False,
        env_override: dict[str, str] | None = None,
    ) -> CommandResult:
        """Execute a command and return its result.

        Args:
            cmd: Program and arguments.
            cwd: Working directory for the child (None = inherit).
            capture_output: Capture stdout/stderr instead of streaming them.
            env_override: Extra environment variables for the child.

        Returns:
            CommandResult with exit code and any captured output.

        Raises:
            CommandFailedError: If the program cannot be started.
        """
        args = [str(a) for a in cmd]
        cmd_str = shlex.join(args)
        logger.debug("Execute: %s (cwd=%s)", cmd_str, cwd or ".")

        env = dict(os.environ)
        env.update(DEFAULT_ENV)
        if env_override:
            env.update(env_override)

        try:
            result = subprocess.run(
                args,
                cwd=cwd,
                env=env,
                capture_output=capture_output,
                text=True,
                check=False,
            )
        except OSError as e:
            raise CommandFailedError(
                f"Failed to execute {args[0]}: {e}",
                exit_code=None,
                command=cmd_str,
                code=EXECUTION_ERROR,
            ) from e

        if result.returncode != 0:
            logger.debug("%s exited with status %d", args[0], result.returncode)

        return CommandResult(
            command=cmd_str,
            exit_code=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )

    def check(
        self,
        cmd: Sequence[str],
        cwd: Path | None = None,
        capture_output: bool = False,
        env_override: dict[str, str] | None = None,
    ) -> CommandResult:
        """Execute a command and raise if it exits non-zero.

        Raises:
            CommandFailedError: If the program fails or cannot be started.
        """
        result = self.run(
            cmd, cwd=cwd, capture_output=capture_output, env_override=env_override
        )
        if not result.success:
            message = f"Exited with status code {result.exit_code}: {result.command}"
            if result.stderr:
                message = f"{message}: {result.stderr.strip()[:500]}"
            raise CommandFailedError(
                message,
                exit_code=result.exit_code,
                command=result.command,
            )
        return result

    def run_shell(self, line: str, cwd: Path | None = None) -> CommandResult:
        """Run a one-line shell command through bash, raising on failure."""
        return self.check(["bash", "-c", line], cwd=cwd)


def check_service_status(name: str, runner: CommandRunner | None = None) -> bool:
    """Check whether a docker-compose service is up.

    Args:
        name: Service name.
        runner: Command runner (default: a new CommandRunner).

    Returns:
        True if ``docker-compose ps`` reports the service as Up.
    """
    if runner is None:
        runner = CommandRunner()

    try:
        result = runner.run(["docker-compose", "ps", name], capture_output=True)
    except CommandFailedError as e:
        logger.warning("Cannot query service %s: %s", name, e)
        return False

    if not result.success:
        logger.warning("docker-compose ps %s failed: %s", name, result.stderr.strip())
        return False

    # First line is the table header
    return any("Up" in line.split() for line in result.stdout.splitlines()[1:])


__all__ = [
    "DEFAULT_ENV",
    "CommandResult",
    "CommandRunner",
    "check_service_status",
]
