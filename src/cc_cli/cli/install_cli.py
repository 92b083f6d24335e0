"""CLI that installs the cloud provider CLIs used by cc-login and cc-cloud."""

from __future__ import annotations

import argparse
import sys
from typing import Callable, Optional, Sequence

from cc_cli import console
from cc_cli.cli.common import add_log_level_argument, report_error, setup_logging
from cc_cli.errors import CcCliError
from cc_cli.infra.runner import CommandRunner, default_runner
from cc_cli.installer import Installer, install_cloud_deps


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cc-install-cloud-deps",
        description="Install the CLIs for GCP, AWS and Azure (jq is always installed)",
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--all", action="store_true", help="Install all cloud provider CLIs without prompting")
    group.add_argument("--gcp", action="store_true", help="Install only Google Cloud SDK")
    group.add_argument("--aws", action="store_true", help="Install only AWS CLI")
    group.add_argument("--azure", action="store_true", help="Install only Azure CLI")
    add_log_level_argument(parser)
    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    runner: CommandRunner = default_runner,
    prompt: Callable[[str], str] = input,
    system: Optional[str] = None,
) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    if args.all:
        providers: Optional[list[str]] = ["gcp", "aws", "azure"]
    else:
        providers = [p for p in ("gcp", "aws", "azure") if getattr(args, p)] or None

    console.info("CC CLI Cloud Dependencies Installer")
    console.echo("This will install the CLIs for GCP, AWS, and Azure")
    console.echo()

    try:
        ok = install_cloud_deps(providers, Installer(runner, system), prompt)
    except (CcCliError, ValueError) as exc:
        return report_error(exc)

    console.echo()
    if ok:
        console.success("Installation complete.")
        console.echo("You can now use 'cc login' to authenticate with your cloud providers.")
        return 0
    console.error("Some installations failed. See the messages above.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
