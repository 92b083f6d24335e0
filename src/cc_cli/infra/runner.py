"""Thin wrapper around :mod:`subprocess` for invoking vendor CLIs."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Sequence

from cc_cli.errors import CommandFailedError, CommandNotFoundError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CommandResult:
    """Outcome of a finished command.

    Attributes:
        args: Command line that was executed
        returncode: Process exit status
        stdout: Captured standard output (empty for interactive runs)
        stderr: Captured standard error (empty for interactive runs)
    """

    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def check(self) -> "CommandResult":
        """Raise CommandFailedError unless the command succeeded."""
        if not self.ok:
            raise CommandFailedError(self.args, self.returncode, self.stderr)
        return self


class CommandRunner:
    """Runs external commands.

    Every module that shells out takes a ``runner`` argument so tests can
    substitute a recording fake.
    """

    def which(self, tool: str) -> str | None:
        return shutil.which(tool)

    def exists(self, tool: str) -> bool:
        return self.which(tool) is not None

    def run(
        self,
        args: Sequence[str],
        *,
        input: str | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        """Run a command and capture its output.

        Args:
            args: Program and arguments
            input: Optional text fed to stdin
            timeout: Seconds before the process is killed

        Returns:
            CommandResult with captured stdout/stderr

        Raises:
            CommandNotFoundError: If the program is not installed
        """
        argv = list(args)
        logger.debug("Running: %s", " ".join(argv))
        try:
            proc = subprocess.run(
                argv,
                input=input,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise CommandNotFoundError(argv[0]) from exc
        except subprocess.TimeoutExpired as exc:
            logger.warning("Command timed out after %ss: %s", timeout, " ".join(argv))
            return CommandResult(argv, 124, "", str(exc))

        if proc.returncode != 0:
            logger.debug("Command exited %d: %s", proc.returncode, proc.stderr.strip())
        return CommandResult(argv, proc.returncode, proc.stdout, proc.stderr)

    def interactive(self, args: Sequence[str]) -> int:
        """Run a command attached to the terminal and return its exit code."""
        argv = list(args)
        logger.debug("Running interactively: %s", " ".join(argv))
        try:
            return subprocess.call(argv)
        except FileNotFoundError as exc:
            raise CommandNotFoundError(argv[0]) from exc

    def shell(self, script: str) -> int:
        """Run a shell pipeline (``curl ... | sh`` style installers)."""
        logger.debug("Running shell: %s", script)
        return subprocess.call(script, shell=True)


default_runner = CommandRunner()
