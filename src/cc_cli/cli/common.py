"""Helpers shared by the console scripts."""

from __future__ import annotations

import argparse
import logging

from cc_cli import console
from cc_cli.errors import CcCliError

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def setup_logging(level: str = "WARNING") -> None:
    """Configure logging for the CLI.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Set specific levels for noisy libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def add_log_level_argument(parser: argparse.ArgumentParser, default: str | None = "WARNING") -> None:
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=default,
        help=f"Logging level (default: {default or 'from config'})",
    )


def log_level_parent() -> argparse.ArgumentParser:
    """Parent parser that lets subcommands take --log-level after their name.

    The option is suppressed when absent so it never overwrites a level given
    before the subcommand.
    """
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=argparse.SUPPRESS,
        help="Logging level",
    )
    return parent


def report_error(exc: Exception) -> int:
    """Print an expected failure for the user and return exit code 1."""
    logger.error("%s", exc)
    console.error(f"Error: {exc}")
    hint = getattr(exc, "hint", None) if isinstance(exc, CcCliError) else None
    if hint:
        console.warn(hint)
    return 1
