"""CLI for cloud instance sizing, pricing and provisioning.

Usage:
    cc-cloud fetch-instances
    cc-cloud find-cheapest cc-r1:8b standard
    cc-cloud find-cheapest cc-r1:70b optimal --offline
    cc-cloud provision cc-r1:8b standard --yes
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Optional, Sequence

from cc_cli import console
from cc_cli.catalog import ALL_MODELS
from cc_cli.cli.common import (
    add_log_level_argument,
    log_level_parent,
    report_error,
    setup_logging,
)
from cc_cli.cloud.compute import (
    PROVIDER_TITLES,
    CheapestResult,
    ProvisionResult,
    fetch_instances,
    find_cheapest,
    provision_instance,
)
from cc_cli.core.pricing import PROVIDER_ORDER
from cc_cli.errors import CcCliError, UnknownModelError
from cc_cli.infra.runner import CommandRunner, default_runner

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cc-cloud",
        description="Find and provision the cheapest cloud instance for a model",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cc-cloud fetch-instances
  cc-cloud find-cheapest cc-r1:8b standard
  cc-cloud find-cheapest cc-r1:70b optimal --offline
  cc-cloud provision cc-r1:8b standard
        """,
    )
    add_log_level_argument(parser)
    common = log_level_parent()
    sub = parser.add_subparsers(dest="command")

    fetch = sub.add_parser(
        "fetch-instances", parents=[common], help="Refresh cached instance listings"
    )
    fetch.add_argument("--provider", choices=PROVIDER_ORDER, help="Only fetch this provider")
    fetch.add_argument("--force", action="store_true", help="Ignore the 24h cache")

    for name, help_text in (
        ("find-cheapest", "Find the cheapest instance for a model"),
        ("provision", "Provision the cheapest instance for a model"),
    ):
        cmd = sub.add_parser(name, parents=[common], help=help_text)
        cmd.add_argument("model", help="Model name, e.g. cc-r1:8b")
        cmd.add_argument(
            "performance",
            nargs="?",
            default="standard",
            help="Performance level: basic, standard or optimal (default: standard)",
        )
        cmd.add_argument("--provider", choices=PROVIDER_ORDER, help="Only consider this provider")
        cmd.add_argument(
            "--offline",
            action="store_true",
            help="Use the built-in price tables without fetching instance data",
        )
        cmd.add_argument(
            "--quantization",
            choices=["none", "int8", "int4"],
            help="Override the model's quantization",
        )
        if name == "provision":
            cmd.add_argument("--yes", "-y", action="store_true", help="Skip the confirmation prompt")

    sub.add_parser("help", help="Show this help message")
    return parser


def print_result(result: CheapestResult) -> None:
    req = result.requirements
    for provider, offer in result.offers.items():
        console.echo()
        console.heading(f"{PROVIDER_TITLES[provider]}")
        console.echo(f"Cheapest option for {result.model} ({req.performance}): {offer.describe()}")
        console.echo(f"Location: {offer.location}")
        console.echo(f"Requirements: {req.describe()}")

    best = result.best
    console.echo()
    console.heading("========== CHEAPEST OPTION ==========")
    console.echo(f"Provider: {PROVIDER_TITLES[best.provider]}")
    console.echo(f"Instance: {best.name}")
    console.echo(f"Zone/Location: {best.location}")
    console.echo(f"Price: ~${best.hourly_price:.2f}/hour")
    console.echo(f"Suggested command: cc-cloud provision {result.model} {req.performance}")
    console.heading("=====================================")


def print_provisioned(model: str, result: ProvisionResult) -> None:
    if result.ready:
        console.success(f"Instance {result.name} is ready!")
    else:
        console.warn(
            f"Instance {result.name} was created but is not accepting SSH yet. "
            "The startup script may still be running; try connecting in a few minutes."
        )
    console.echo(f"Connect:  {result.connect_command}")
    console.echo(f"Run:      {result.connect_command} --command='ollama run {model}'")
    console.echo(f"Delete:   {result.delete_command}")


def _providers(args: argparse.Namespace) -> tuple[str, ...]:
    return (args.provider,) if args.provider else PROVIDER_ORDER


def _cheapest(args: argparse.Namespace, runner: CommandRunner) -> CheapestResult:
    try:
        return find_cheapest(
            args.model,
            args.performance,
            providers=_providers(args),
            offline=args.offline,
            quantization=args.quantization,
            runner=runner,
        )
    except UnknownModelError:
        console.echo(f"Available models: {', '.join(ALL_MODELS)}")
        raise


def cmd_fetch(args: argparse.Namespace, runner: CommandRunner) -> int:
    outcome = fetch_instances(_providers(args), runner, force=args.force)
    failed = [p for p, err in outcome.items() if err is not None]
    if len(failed) == len(outcome):
        return 1
    return 0


def cmd_find_cheapest(args: argparse.Namespace, runner: CommandRunner) -> int:
    result = _cheapest(args, runner)
    print_result(result)
    return 0


def cmd_provision(
    args: argparse.Namespace,
    runner: CommandRunner,
    prompt: Callable[[str], str],
) -> int:
    result = _cheapest(args, runner)
    print_result(result)

    best = result.best
    console.echo()
    if not args.yes and not console.confirm(
        f"Provision {best.name} on {best.provider} at ~${best.hourly_price:.2f}/hour?",
        prompt=prompt,
    ):
        console.warn("Provisioning cancelled.")
        return 0

    provisioned = provision_instance(args.model, args.performance, best, runner=runner)
    print_provisioned(args.model, provisioned)
    return 0


def main(
    argv: Optional[Sequence[str]] = None,
    runner: CommandRunner = default_runner,
    prompt: Callable[[str], str] = input,
) -> int:
    """Main entry point for cc-cloud.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.command in (None, "help"):
        parser.print_help()
        return 0

    try:
        if args.command == "fetch-instances":
            return cmd_fetch(args, runner)
        if args.command == "find-cheapest":
            return cmd_find_cheapest(args, runner)
        return cmd_provision(args, runner, prompt)

    except KeyboardInterrupt:
        console.echo("\nInterrupted by user")
        return 130
    except (CcCliError, ValueError) as exc:
        return report_error(exc)


if __name__ == "__main__":
    sys.exit(main())
