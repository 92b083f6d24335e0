"""Pytest configuration shared across the suite."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple

import pytest

from cc_cli import console
from cc_cli.config import service as config_service
from cc_cli.infra.runner import CommandResult, CommandRunner


class FakeRunner(CommandRunner):
    """Records commands and replays scripted results instead of executing them.

    Responses are matched by the longest registered argument prefix. When
    several results are queued for one prefix they are returned in order and
    the last one repeats.
    """

    def __init__(self, installed: Iterable[str] = ()):
        self.installed = set(installed)
        self.calls: List[List[str]] = []
        self.interactive_calls: List[List[str]] = []
        self.shell_calls: List[str] = []
        self._responses: Dict[Tuple[str, ...], List[CommandResult]] = {}
        self._interactive_codes: Dict[Tuple[str, ...], int] = {}
        self.shell_code = 0

    def on(self, *prefix: str, stdout: str = "", returncode: int = 0, stderr: str = "") -> "FakeRunner":
        result = CommandResult(list(prefix), returncode, stdout, stderr)
        self._responses.setdefault(prefix, []).append(result)
        return self

    def on_interactive(self, *prefix: str, returncode: int = 0) -> "FakeRunner":
        self._interactive_codes[prefix] = returncode
        return self

    @staticmethod
    def _match(args: Sequence[str], table: Dict[Tuple[str, ...], object]):
        best = None
        for prefix in table:
            if tuple(args[: len(prefix)]) == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        return best

    def which(self, tool: str) -> str | None:
        return f"/usr/bin/{tool}" if tool in self.installed else None

    def run(self, args, *, input=None, timeout=None) -> CommandResult:
        argv = list(args)
        self.calls.append(argv)
        prefix = self._match(argv, self._responses)
        if prefix is None:
            return CommandResult(argv, 0, "", "")
        queue = self._responses[prefix]
        scripted = queue.pop(0) if len(queue) > 1 else queue[0]
        return CommandResult(argv, scripted.returncode, scripted.stdout, scripted.stderr)

    def interactive(self, args) -> int:
        argv = list(args)
        self.interactive_calls.append(argv)
        prefix = self._match(argv, self._interactive_codes)
        return 0 if prefix is None else self._interactive_codes[prefix]

    def shell(self, script: str) -> int:
        self.shell_calls.append(script)
        return self.shell_code

    def ran(self, *prefix: str) -> bool:
        """Whether any captured or interactive command started with ``prefix``."""
        return any(
            tuple(call[: len(prefix)]) == prefix
            for call in self.calls + self.interactive_calls
        )


class ScriptedPrompt:
    """Stand-in for ``input`` that returns canned answers and records questions."""

    def __init__(self, *answers: str):
        self.answers = list(answers)
        self.questions: List[str] = []

    def __call__(self, question: str) -> str:
        self.questions.append(question)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)


@pytest.fixture(autouse=True)
def cli_home(tmp_path, monkeypatch):
    """Isolate all cc-cli state into a temporary directory."""
    home = tmp_path / "cc-cli"
    monkeypatch.setenv("CC_CLI_HOME", str(home))
    monkeypatch.setenv("NO_COLOR", "1")
    for var in ("CC_DEFAULT_MODEL", "CC_VERBOSE", "OLLAMA_HOST"):
        monkeypatch.delenv(var, raising=False)

    config_service._CLI_CONFIG = None
    monkeypatch.setattr(console, "_console", None)
    yield home
    config_service._CLI_CONFIG = None


@pytest.fixture
def runner():
    return FakeRunner()


def login_as(*providers: str) -> None:
    for provider in providers:
        config_service.update_auth_status(provider, True)
