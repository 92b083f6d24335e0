"""CLI for cloud provider authentication.

Usage:
    cc-login --all
    cc-login --gcp
    cc-login --status
    cc-login --logout azure
    cc-login --verify gcp
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Optional, Sequence

from cc_cli import console
from cc_cli.cli.common import add_log_level_argument, report_error, setup_logging
from cc_cli.cloud.auth import get_authenticator, login_all, show_status, verify_all
from cc_cli.config.models import PROVIDERS
from cc_cli.errors import CcCliError
from cc_cli.infra.runner import CommandRunner, default_runner

logger = logging.getLogger(__name__)

MENU_CHOICES = {
    "1": "all",
    "2": "gcp",
    "3": "aws",
    "4": "azure",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cc-login",
        description="Authenticate cc-cli with cloud providers (GCP, AWS, Azure)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cc-login --all         Login to all cloud providers
  cc-login --gcp         Login to GCP only
  cc-login --status      Check login status
  cc-login --logout aws  Forget the AWS login
  cc-login --verify      Check each provider's live session and account
        """,
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--all", action="store_true", help="Authenticate with all providers")
    group.add_argument("--gcp", action="store_true", help="Authenticate with Google Cloud Platform")
    group.add_argument("--aws", action="store_true", help="Authenticate with Amazon Web Services")
    group.add_argument("--azure", action="store_true", help="Authenticate with Microsoft Azure")
    group.add_argument("--status", action="store_true", help="Show authentication status for all providers")
    group.add_argument(
        "--logout",
        choices=[*PROVIDERS, "all"],
        metavar="PROVIDER",
        help="Log out of a provider (gcp, aws, azure or all)",
    )
    group.add_argument(
        "--verify",
        nargs="?",
        const="all",
        choices=[*PROVIDERS, "all"],
        metavar="PROVIDER",
        help="Verify the live session and list account details (default: all providers)",
    )
    add_log_level_argument(parser)
    return parser


def _login(target: str, runner: CommandRunner, prompt: Callable[[str], str]) -> bool:
    if target == "all":
        return login_all(runner, prompt)
    return get_authenticator(target, runner, prompt).login()


def _logout(target: str, runner: CommandRunner) -> bool:
    providers = PROVIDERS if target == "all" else (target,)
    for provider in providers:
        get_authenticator(provider, runner).logout()
    return True


def run_menu(runner: CommandRunner, prompt: Callable[[str], str]) -> int:
    """Show status and ask which provider to log in to."""
    show_status(runner=runner)

    console.echo()
    console.info("Choose an action:")
    console.echo("1) Login to all providers")
    console.echo("2) Login to GCP")
    console.echo("3) Login to AWS")
    console.echo("4) Login to Azure")
    console.echo("5) Exit")

    try:
        choice = prompt("Enter your choice (1-5): ").strip()
    except EOFError:
        choice = "5"

    if choice == "5":
        return 0
    target = MENU_CHOICES.get(choice)
    if target is None:
        console.error("Invalid choice. Exiting.")
        return 1
    return 0 if _login(target, runner, prompt) else 1


def main(
    argv: Optional[Sequence[str]] = None,
    runner: CommandRunner = default_runner,
    prompt: Callable[[str], str] = input,
) -> int:
    """Main entry point for cc-login.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        if args.status:
            show_status(runner=runner)
            return 0
        if args.logout:
            return 0 if _logout(args.logout, runner) else 1
        if args.verify:
            providers = PROVIDERS if args.verify == "all" else (args.verify,)
            outcome = verify_all(providers, runner)
            return 0 if all(outcome.values()) else 1

        for target in ("all", "gcp", "aws", "azure"):
            if getattr(args, target):
                return 0 if _login(target, runner, prompt) else 1

        return run_menu(runner, prompt)

    except KeyboardInterrupt:
        console.echo("\nInterrupted by user")
        return 130
    except (CcCliError, ValueError) as exc:
        return report_error(exc)


if __name__ == "__main__":
    sys.exit(main())
