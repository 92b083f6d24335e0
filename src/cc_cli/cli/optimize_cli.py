"""CLI that writes shell tuning files for local inference.

Usage:
    cc-optimize
    cc-optimize --shell-profile ~/.zshrc
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from cc_cli import console
from cc_cli.cli.common import add_log_level_argument, report_error, setup_logging
from cc_cli.config import service as config_service
from cc_cli.optimize import add_to_shell_profile, write_optimizations

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cc-optimize",
        description="Write environment tuning files for running LLMs locally",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cc-optimize
  cc-optimize --shell-profile ~/.zshrc
  cc-optimize --threads 8 --output-dir /tmp/llm-opt
        """,
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Where to write the files (default: ~/.cc-cli/optimizations)",
    )
    parser.add_argument("--threads", type=int, default=None, help="Thread count (default: CPU count)")
    parser.add_argument(
        "--shell-profile",
        type=Path,
        default=None,
        help="Shell profile to source the environment from, e.g. ~/.zshrc",
    )
    add_log_level_argument(parser)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    opt_dir = args.output_dir or config_service.get_optimizations_dir()
    console.success("Starting LLM System Optimization...")
    console.echo("----------------------------------------")

    try:
        result = write_optimizations(opt_dir, cores=args.threads)
    except OSError as exc:
        return report_error(exc)

    if args.shell_profile is not None:
        profile = args.shell_profile.expanduser()
        if add_to_shell_profile(profile, result.environment):
            console.success(f"Added optimizations to {profile}")
        else:
            console.echo(f"{profile} already loads the optimizations.")

    console.success("Optimization Complete!")
    console.assemble("Optimizations saved to: ", (str(opt_dir), "yellow"))
    bin_dir = opt_dir / "bin"
    console.assemble("Optimized CLI available as: ", (str(bin_dir / "cc-optimized"), "yellow"))
    console.assemble("For max performance: ", (str(bin_dir / "llm-performance-mode"), "yellow"))
    console.echo("----------------------------------------")
    return 0


if __name__ == "__main__":
    sys.exit(main())
