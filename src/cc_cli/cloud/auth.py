"""Cloud provider authentication through the vendor CLIs.

Credentials never pass through cc-cli: each authenticator only checks
whether the vendor CLI already has an active session, launches the vendor's
own interactive login when it does not, and records the outcome in the auth
status file.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, Optional, Type

from rich import box
from rich.table import Table
from rich.text import Text

from cc_cli import console
from cc_cli.config import service as config_service
from cc_cli.config.models import PROVIDERS, AuthStatus, Provider
from cc_cli.infra.runner import CommandRunner, default_runner

logger = logging.getLogger(__name__)

Prompt = Callable[[str], str]


class ProviderAuth:
    """Base class for a provider authenticator."""

    name: Provider
    cli: str
    title: str
    install_url: str

    def __init__(self, runner: CommandRunner = default_runner, prompt: Prompt = input):
        self.runner = runner
        self.prompt = prompt

    def cli_installed(self) -> bool:
        return self.runner.exists(self.cli)

    def active_account(self) -> Optional[str]:
        """Identity of the active session, or None when not logged in."""
        raise NotImplementedError

    def _interactive_login(self) -> bool:
        raise NotImplementedError

    def _after_login(self) -> None:
        """Provider-specific follow-up such as picking a default project."""

    def _logout_command(self) -> Optional[list[str]]:
        return None

    def _details(self) -> list[tuple[str, list[str]]]:
        """Read-only (heading, command) listings shown by :meth:`verify`."""
        return []

    def login(self) -> bool:
        """Ensure an active session and record the result.

        Returns:
            True when authenticated afterwards
        """
        console.info(f"Authenticating with {self.title}...")

        if not self.cli_installed():
            console.error(f"Error: {self.cli} CLI not found. Please install it first.")
            console.echo(f"Visit: {self.install_url}")
            return False

        account = self.active_account()
        if account:
            console.success(f"Already authenticated with {self.title} as {account}")
            config_service.update_auth_status(self.name, True)
            return True

        if self._interactive_login():
            account = self.active_account()

        if not account:
            console.error(f"Failed to authenticate with {self.title}.")
            logger.warning("Login to %s failed", self.name)
            config_service.update_auth_status(self.name, False)
            return False

        console.success(f"Successfully authenticated with {self.title} as {account}")
        self._after_login()
        config_service.update_auth_status(self.name, True)
        return True

    def logout(self) -> bool:
        """End the vendor session (where the CLI supports it) and clear the flag."""
        console.info(f"Logging out of {self.title}...")
        command = self._logout_command()
        if command is None:
            console.warn(
                f"{self.cli} has no logout command; stored credentials were left in place."
            )
        elif self.cli_installed():
            result = self.runner.run(command)
            if not result.ok:
                logger.warning("%s exited %d: %s", " ".join(command), result.returncode, result.stderr.strip())
        config_service.update_auth_status(self.name, False)
        console.success(f"Marked {self.title} as not authenticated.")
        return True

    def verify(self) -> bool:
        """Check that the recorded login still matches a live vendor session.

        Prints the active account followed by a few read-only listings. Nothing
        is changed, including the auth status file.

        Returns:
            True when the CLI is installed, the status file says logged in and
            the CLI reports an active account
        """
        console.info(f"Checking {self.title} authentication...")

        if not self.cli_installed():
            console.error(f"{self.cli} CLI not installed.")
            return False

        if not config_service.is_authenticated(self.name):
            console.error(f"Not authenticated with {self.title}.")
            console.echo(f"Run 'cc login --{self.name}' to authenticate.")
            return False

        account = self.active_account()
        if not account:
            console.error(f"{self.cli} has no active session for {self.title}.")
            console.echo(f"Run 'cc login --{self.name}' to authenticate again.")
            return False

        console.success(f"Authenticated with {self.title}.")
        console.assemble("Account: ", (account, "yellow"))

        for heading, command in self._details():
            console.echo()
            console.info(f"{heading}:")
            result = self.runner.run(command)
            if result.ok:
                console.echo(result.stdout.rstrip())
            else:
                logger.warning("%s exited %d", " ".join(command), result.returncode)
                console.warn(f"Could not run {' '.join(command[:3])}: {result.stderr.strip()}")
        return True


class GcpAuth(ProviderAuth):
    name: Provider = "gcp"
    cli = "gcloud"
    title = "Google Cloud Platform"
    install_url = "https://cloud.google.com/sdk/docs/install"

    def active_account(self) -> Optional[str]:
        result = self.runner.run(
            ["gcloud", "auth", "list", "--filter=status:ACTIVE", "--format=value(account)"]
        )
        if not result.ok or "@" not in result.stdout:
            return None
        return result.stdout.strip().splitlines()[0]

    def _interactive_login(self) -> bool:
        return self.runner.interactive(["gcloud", "auth", "login"]) == 0

    def _after_login(self) -> None:
        result = self.runner.run(["gcloud", "config", "get-value", "project"])
        if result.ok and result.stdout.strip():
            return
        console.warn("No default project set. Select a default project:")
        self.runner.interactive(["gcloud", "projects", "list"])
        project_id = self.prompt("Enter project ID: ").strip()
        if project_id:
            self.runner.interactive(["gcloud", "config", "set", "project", project_id])

    def _logout_command(self) -> Optional[list[str]]:
        return ["gcloud", "auth", "revoke", "--all"]

    def _details(self) -> list[tuple[str, list[str]]]:
        result = self.runner.run(["gcloud", "config", "get-value", "project"])
        project = result.stdout.strip() if result.ok else ""
        if not project:
            console.warn("No default project set.")
            return []
        console.assemble("Project: ", (project, "yellow"))
        return [
            (
                "Project Details",
                [
                    "gcloud", "projects", "describe", project,
                    "--format=table[box](name,projectId,projectNumber,"
                    "createTime.date('%Y-%m-%d %H:%M:%S %Z'),lifecycleState)",
                ],
            ),
            (
                "Available Compute Zones",
                [
                    "gcloud", "compute", "zones", "list",
                    "--filter=region:( us-central1 us-east1 us-west1 )",
                    "--format=table[box](name,region,status)",
                ],
            ),
        ]


class AwsAuth(ProviderAuth):
    name: Provider = "aws"
    cli = "aws"
    title = "Amazon Web Services"
    install_url = "https://docs.aws.amazon.com/cli/latest/userguide/getting-started-install.html"

    def active_account(self) -> Optional[str]:
        result = self.runner.run(
            ["aws", "sts", "get-caller-identity", "--query", "Arn", "--output", "text"]
        )
        if not result.ok or not result.stdout.strip():
            return None
        return result.stdout.strip()

    def _interactive_login(self) -> bool:
        console.warn("Please enter your AWS credentials:")
        self.runner.interactive(["aws", "configure"])
        # `aws configure` exits 0 even with bad keys; caller verifies
        return True

    def _details(self) -> list[tuple[str, list[str]]]:
        return [
            (
                "Available AWS Regions",
                [
                    "aws", "ec2", "describe-regions",
                    "--query", "Regions[].{Name:RegionName,Endpoint:Endpoint}",
                    "--output", "table",
                ],
            ),
        ]


class AzureAuth(ProviderAuth):
    name: Provider = "azure"
    cli = "az"
    title = "Microsoft Azure"
    install_url = "https://docs.microsoft.com/en-us/cli/azure/install-azure-cli"

    def active_account(self) -> Optional[str]:
        result = self.runner.run(["az", "account", "show", "--query", "user.name", "-o", "tsv"])
        if not result.ok or not result.stdout.strip():
            return None
        return result.stdout.strip()

    def _interactive_login(self) -> bool:
        return self.runner.interactive(["az", "login"]) == 0

    def _after_login(self) -> None:
        result = self.runner.run(["az", "account", "list", "--query", "length([])", "-o", "tsv"])
        try:
            count = int(result.stdout.strip() or 0)
        except ValueError:
            logger.warning("Unexpected subscription count output: %r", result.stdout)
            return
        if count <= 1:
            return
        console.warn("Multiple subscriptions found. Please select a default:")
        self.runner.interactive(
            ["az", "account", "list", "--query", "[].{Name:name, ID:id, Default:isDefault}", "-o", "table"]
        )
        subscription_id = self.prompt("Enter subscription ID: ").strip()
        if subscription_id:
            self.runner.interactive(["az", "account", "set", "--subscription", subscription_id])

    def _logout_command(self) -> Optional[list[str]]:
        return ["az", "logout"]

    def _details(self) -> list[tuple[str, list[str]]]:
        return [
            ("Subscription Information", ["az", "account", "show", "--output", "table"]),
            (
                "Available Azure Locations",
                [
                    "az", "account", "list-locations",
                    "--query",
                    "[?metadata.regionType=='Physical'].{Name:name, DisplayName:displayName, "
                    "Category:metadata.regionCategory}",
                    "--output", "table",
                ],
            ),
        ]


AUTHENTICATORS: Dict[str, Type[ProviderAuth]] = {
    "gcp": GcpAuth,
    "aws": AwsAuth,
    "azure": AzureAuth,
}


def get_authenticator(
    provider: str,
    runner: CommandRunner = default_runner,
    prompt: Prompt = input,
) -> ProviderAuth:
    try:
        return AUTHENTICATORS[provider](runner=runner, prompt=prompt)
    except KeyError:
        raise ValueError(f"Unknown provider: {provider}") from None


def login_all(runner: CommandRunner = default_runner, prompt: Prompt = input) -> bool:
    """Log in to every provider; True only if all succeeded."""
    results = [get_authenticator(p, runner, prompt).login() for p in PROVIDERS]
    return all(results)


def verify_all(
    providers: Iterable[str] = PROVIDERS,
    runner: CommandRunner = default_runner,
) -> Dict[str, bool]:
    """Verify each provider in turn; one failure does not stop the rest."""
    outcome: Dict[str, bool] = {}
    for provider in providers:
        outcome[provider] = get_authenticator(provider, runner).verify()
        console.echo()
    return outcome


_STATUS_ROWS = (
    ("gcp", "Google Cloud (GCP)"),
    ("aws", "AWS"),
    ("azure", "Azure"),
)
_CLI_ROWS = (
    ("gcloud", "gcloud (GCP)"),
    ("aws", "aws"),
    ("az", "az (Azure)"),
)


def _table(title: str, header: tuple[str, str], rows: list[tuple[str, str, bool]]) -> Table:
    table = Table(title=title, title_style="blue", title_justify="left", box=box.SQUARE)
    table.add_column(header[0], min_width=18)
    table.add_column(header[1], min_width=19)
    for label, value, good in rows:
        table.add_row(label, Text(value, style="green" if good else "red"))
    return table


def show_status(
    status: Optional[AuthStatus] = None,
    runner: CommandRunner = default_runner,
) -> None:
    """Print authentication state and vendor CLI availability."""
    status = status or config_service.load_auth_status()

    rows = []
    for provider, label in _STATUS_ROWS:
        ok = status.is_authenticated(provider)  # type: ignore[arg-type]
        rows.append((label, "Authenticated" if ok else "Not Authenticated", ok))
    console.print_table(_table("Cloud Provider Authentication Status:", ("Provider", "Status"), rows))

    if status.last_login:
        console.echo(f"Last login: {status.last_login}")

    console.echo()
    cli_rows = []
    for tool, label in _CLI_ROWS:
        installed = runner.exists(tool)
        cli_rows.append((label, "Installed" if installed else "Not Installed", installed))
    console.print_table(_table("Cloud Provider CLI Status:", ("CLI", "Status"), cli_rows))
