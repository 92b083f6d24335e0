"""Installing Ollama and the cloud provider CLIs."""

from __future__ import annotations

import logging
import platform
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

from cc_cli import console
from cc_cli.errors import CommandFailedError, UnsupportedPlatformError
from cc_cli.infra.runner import CommandRunner, default_runner

logger = logging.getLogger(__name__)

HOMEBREW_INSTALL = '/bin/bash -c "$(curl -fsSL https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh)"'
OLLAMA_INSTALL = "curl -fsSL https://ollama.com/install.sh | sh"


def detect_os(system: Optional[str] = None) -> str:
    """Return "macos", "linux" or "unknown"."""
    system = system or platform.system()
    if system == "Darwin":
        return "macos"
    if system == "Linux":
        return "linux"
    return "unknown"


@dataclass(frozen=True)
class CliRecipe:
    """How to install one vendor CLI.

    ``linux`` holds shell lines run in order; the first failure stops the
    install. ``needs_apt`` guards recipes that rely on apt-get.
    """

    tool: str
    title: str
    brew: Tuple[str, ...]
    linux: Tuple[str, ...]
    docs_url: str = ""
    needs_apt: bool = False


RECIPES: Dict[str, CliRecipe] = {
    "jq": CliRecipe(
        tool="jq",
        title="jq (JSON processor)",
        brew=("brew", "install", "jq"),
        linux=("sudo apt-get update", "sudo apt-get install -y jq"),
        needs_apt=True,
    ),
    "gcloud": CliRecipe(
        tool="gcloud",
        title="Google Cloud SDK",
        brew=("brew", "install", "--cask", "google-cloud-sdk"),
        linux=(
            'echo "deb [signed-by=/usr/share/keyrings/cloud.google.gpg] '
            'https://packages.cloud.google.com/apt cloud-sdk main" '
            "| sudo tee -a /etc/apt/sources.list.d/google-cloud-sdk.list",
            "curl https://packages.cloud.google.com/apt/doc/apt-key.gpg "
            "| sudo gpg --dearmor -o /usr/share/keyrings/cloud.google.gpg",
            "sudo apt-get update",
            "sudo apt-get install -y google-cloud-sdk",
        ),
        docs_url="https://cloud.google.com/sdk/docs/install",
        needs_apt=True,
    ),
    "aws": CliRecipe(
        tool="aws",
        title="AWS CLI",
        brew=("brew", "install", "awscli"),
        linux=(
            'curl "https://awscli.amazonaws.com/awscli-exe-linux-x86_64.zip" -o "awscliv2.zip"',
            "unzip -q awscliv2.zip",
            "sudo ./aws/install",
            "rm -rf aws awscliv2.zip",
        ),
        docs_url="https://docs.aws.amazon.com/cli/latest/userguide/getting-started-install.html",
    ),
    "az": CliRecipe(
        tool="az",
        title="Azure CLI",
        brew=("brew", "install", "azure-cli"),
        linux=("curl -sL https://aka.ms/InstallAzureCLIDeb | sudo bash",),
        docs_url="https://docs.microsoft.com/en-us/cli/azure/install-azure-cli",
    ),
}

# cc-install-cloud-deps flag -> CLI
PROVIDER_CLIS: Dict[str, str] = {"gcp": "gcloud", "aws": "aws", "azure": "az"}


class Installer:
    """Installs tools with Homebrew on macOS and apt/official scripts on Linux."""

    def __init__(self, runner: CommandRunner = default_runner, system: Optional[str] = None):
        self.runner = runner
        self.os = detect_os(system)

    def ensure_homebrew(self) -> bool:
        if self.runner.exists("brew"):
            console.success("Homebrew is already installed.")
            return True
        console.warn("Homebrew not found. Installing...")
        return self.runner.shell(HOMEBREW_INSTALL) == 0

    def check_dependencies(self) -> None:
        """Make sure Ollama (and Homebrew on macOS) is installed.

        Raises:
            UnsupportedPlatformError: On anything but macOS or Linux
            CommandFailedError: If an install step fails
        """
        console.warn("Checking dependencies...")
        if self.os == "unknown":
            raise UnsupportedPlatformError(
                "Unsupported operating system.",
                "Please install Ollama manually from https://ollama.com",
            )

        if self.os == "macos" and not self.runner.exists("brew"):
            if not self.ensure_homebrew():
                raise CommandFailedError(HOMEBREW_INSTALL, 1)

        if not self.runner.exists("ollama"):
            console.error("Ollama is not installed. Installing...")
            if self.os == "macos":
                self._check_interactive(["brew", "install", "ollama"])
                self._check_interactive(["brew", "services", "start", "ollama"])
            else:
                code = self.runner.shell(OLLAMA_INSTALL)
                if code != 0:
                    raise CommandFailedError(OLLAMA_INSTALL, code)

        console.success("All dependencies are installed.")

    def _check_interactive(self, args: Sequence[str]) -> None:
        code = self.runner.interactive(args)
        if code != 0:
            raise CommandFailedError(args, code)

    def install_cli(self, tool: str) -> bool:
        """Install one of jq, gcloud, aws or az.

        Returns:
            True if the tool is available afterwards
        """
        recipe = RECIPES.get(tool)
        if recipe is None:
            raise ValueError(f"No install recipe for {tool}")

        console.info(f"Installing {recipe.title}...")
        if self.runner.exists(recipe.tool):
            console.success(f"{recipe.title} is already installed.")
            return True

        if not self._run_recipe(recipe):
            return False

        if self.runner.exists(recipe.tool):
            console.success(f"{recipe.title} installed successfully.")
            return True
        console.error(f"Failed to install {recipe.title}.")
        return False

    def _manual(self, recipe: CliRecipe, reason: str) -> bool:
        console.error(f"{reason} Please install {recipe.title} manually.")
        if recipe.docs_url:
            console.echo(f"Visit: {recipe.docs_url}")
        return False

    def _run_recipe(self, recipe: CliRecipe) -> bool:
        if self.os == "macos":
            if not self.ensure_homebrew():
                console.error(f"Failed to install Homebrew. Cannot continue with {recipe.title} installation.")
                return False
            console.warn("Installing via Homebrew...")
            return self.runner.interactive(recipe.brew) == 0

        if self.os == "linux":
            if recipe.needs_apt and not self.runner.exists("apt-get"):
                return self._manual(recipe, "apt not found.")
            for line in recipe.linux:
                code = self.runner.shell(line)
                if code != 0:
                    logger.error("Install step failed (%d): %s", code, line)
                    return False
            return True

        return self._manual(recipe, "Unsupported OS.")


def install_cloud_deps(
    providers: Optional[Sequence[str]],
    installer: Installer,
    prompt: Callable[[str], str] = input,
) -> bool:
    """Install jq plus the requested provider CLIs.

    Args:
        providers: Providers to install for; None asks about each one
        installer: Installer to use
        prompt: Input function for the y/n questions

    Returns:
        True if every attempted install succeeded
    """
    ok = installer.install_cli("jq")

    for provider, tool in PROVIDER_CLIS.items():
        if providers is None:
            console.echo()
            if not console.confirm(f"Install {RECIPES[tool].title}?", prompt=prompt):
                continue
        elif provider not in providers:
            continue
        ok = installer.install_cli(tool) and ok

    return ok
