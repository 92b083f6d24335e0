"""Exception types raised by cc-cli library code.

CLI entry points catch :class:`CcCliError`, print the message (and hint, if
any) and exit with status 1. Anything else is a bug and propagates.
"""

from __future__ import annotations

from typing import Sequence


class CcCliError(Exception):
    """Base class for all expected cc-cli failures."""

    hint: str | None = None

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        if hint is not None:
            self.hint = hint


class CommandNotFoundError(CcCliError):
    """An external tool is not on PATH."""

    def __init__(self, tool: str, hint: str | None = None):
        self.tool = tool
        super().__init__(f"{tool} not found", hint)


class CommandFailedError(CcCliError):
    """An external command exited with a non-zero status."""

    def __init__(self, args: Sequence[str] | str, returncode: int, stderr: str = ""):
        self.args_list = [args] if isinstance(args, str) else list(args)
        self.returncode = returncode
        self.stderr = stderr
        cmd = " ".join(self.args_list)
        message = f"Command failed with exit code {returncode}: {cmd}"
        if stderr.strip():
            message += f"\n{stderr.strip()}"
        super().__init__(message)


class UnknownModelError(CcCliError):
    """Model name is not in the catalog."""

    def __init__(self, model: str):
        self.model = model
        super().__init__(f"Unknown model: {model}")


class InvalidPerformanceLevelError(CcCliError, ValueError):
    """Performance level is not one of basic/standard/optimal."""

    def __init__(self, level: str):
        self.level = level
        super().__init__(
            f"Invalid performance level: {level}",
            "Valid performance levels: basic, standard, optimal",
        )


class NotAuthenticatedError(CcCliError):
    """The auth status file says we are not logged in to a provider."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(
            f"Not authenticated with {provider.upper()}.",
            f"Run 'cc login --{provider}' first.",
        )


class NoInstanceDataError(CcCliError):
    """No provider has cached instance data to price against."""


class ProvisioningNotSupportedError(CcCliError):
    """Automated provisioning is only implemented for some providers."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(
            f"Provisioning on {provider} is not yet implemented.",
            f"Create the recommended instance manually in the {provider} console, "
            "then install Ollama on it and run 'ollama pull <model>'.",
        )


class UnsupportedPlatformError(CcCliError):
    """The host operating system has no install recipe."""


class InstanceNotReadyError(CcCliError):
    """A freshly created instance does not accept SSH connections yet."""


class InvalidInstanceDataError(CcCliError):
    """A cloud CLI printed something that is not the JSON listing we asked for."""

    def __init__(self, provider: str, command: Sequence[str], detail: str):
        self.provider = provider
        self.command = list(command)
        super().__init__(
            f"Unexpected output from {' '.join(self.command[:3])}: {detail}",
            f"Check that the {self.command[0]} CLI works, then run "
            f"'cc-cloud fetch-instances --provider {provider} --force'.",
        )
