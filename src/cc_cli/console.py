"""User-facing terminal output built on :class:`rich.console.Console`.

Diagnostics go through :mod:`logging`; everything the user is meant to read
goes through these helpers. Rich drops colour by itself when stdout is not a
terminal or ``NO_COLOR`` is set.
"""

from __future__ import annotations

from typing import Optional, Tuple, Union

from rich.console import Console
from rich.table import Table
from rich.text import Text

BANNER = r"""   _____  _____
  / ____|/ ____|
 | |    | |
 | |    | |
 | |____| |____
  \_____|\_____|"""

# Styled fragment for assemble(): plain text or (text, style)
Part = Union[str, Tuple[str, str]]

_console: Optional[Console] = None


def get_console() -> Console:
    """Shared console; output text is printed verbatim, never as markup."""
    global _console
    if _console is None:
        _console = Console(highlight=False, markup=False, emoji=False, soft_wrap=True)
    return _console


def echo(text: str = "", style: Optional[str] = None) -> None:
    get_console().print(text, style=style)


def assemble(*parts: Part) -> None:
    """Print one line made of differently styled fragments."""
    get_console().print(Text.assemble(*parts))


def info(text: str) -> None:
    echo(text, "blue")


def success(text: str) -> None:
    echo(text, "green")


def warn(text: str) -> None:
    echo(text, "yellow")


def error(text: str) -> None:
    echo(text, "red")


def heading(text: str) -> None:
    echo(text, "cyan")


def print_table(table: Table) -> None:
    get_console().print(table)


def print_banner(version: str) -> None:
    echo(BANNER, "blue")
    heading(f"Version: {version}")
    echo()


def confirm(question: str, prompt=input) -> bool:
    """Ask a y/n question; anything starting with y/Y counts as yes."""
    try:
        reply = prompt(f"{question} (y/n) ")
    except EOFError:
        return False
    return reply.strip()[:1] in ("y", "Y")
