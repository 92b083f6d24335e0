"""Ollama integration: HTTP API client and ``ollama`` CLI wrapper.

The HTTP side (``/api/generate`` and ``/api/tags``) is used by the model
benchmark; interactive work (pull, run, list) goes through the CLI so the
user sees Ollama's own progress output.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from cc_cli.errors import CommandFailedError
from cc_cli.infra.retry import RetryPolicy
from cc_cli.infra.runner import CommandRunner, default_runner

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:11434"
TAGS_TIMEOUT = 10


def _api_url(base_url: str, endpoint: str) -> str:
    return f"{base_url.rstrip('/')}/api/{endpoint}"


def _describe_failure(exc: requests.RequestException) -> str:
    if isinstance(exc, requests.exceptions.HTTPError) and exc.response is not None:
        return f"HTTP {exc.response.status_code}"
    return type(exc).__name__


class OllamaClient:
    """Blocking client for a local or remote Ollama server.

    Args:
        base_url: Server URL, usually taken from ``OLLAMA_HOST``.
        timeout: Per-request timeout in seconds; generation on CPU is slow.
        retry_policy: Applied to network failures (default: 2 retries, 1s base).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 600,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy(max_retries=2, base_delay=1.0)

    def generate(self, model: str, prompt: str, temperature: float = 0.0) -> str:
        """Return the full, non-streamed completion for ``prompt``.

        Raises:
            ValueError: If the body is not JSON or has no string ``response``.
            requests.RequestException: If the request still fails after retries.
        """
        body = self.retry_policy(self._post_generate)(model, prompt, temperature)

        if not isinstance(body, dict):
            raise ValueError(f"Expected dict response from Ollama, got {type(body)}")
        if "response" not in body:
            raise ValueError(f"Missing 'response' key in Ollama response for {model}")
        text = body["response"]
        if not isinstance(text, str):
            raise ValueError(f"Expected string response, got {type(text)}")
        return text

    def _post_generate(self, model: str, prompt: str, temperature: float) -> Dict[str, Any]:
        payload = {
            "model": model,
            "prompt": prompt,
            "options": {"temperature": temperature},
            "stream": False,
        }
        url = _api_url(self.base_url, "generate")
        try:
            response = requests.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.error("Ollama generate for %s failed at %s: %s", model, url, _describe_failure(exc))
            raise
        return response.json()


def _tag_names(body: Any) -> Optional[List[str]]:
    """Names from a ``/api/tags`` body, or None when the shape is wrong."""
    if not isinstance(body, dict):
        return None
    models = body.get("models")
    if not isinstance(models, list):
        return None
    return [entry["name"] for entry in models if isinstance(entry, dict) and "name" in entry]


def list_ollama_models(base_url: str) -> list[str]:
    """Names of the models pulled on the Ollama server, e.g. ``['phi:latest']``.

    An unreachable server or an unexpected body yields an empty list; callers
    treat that as "nothing installed".
    """
    url = _api_url(base_url, "tags")
    try:
        response = requests.get(url, timeout=TAGS_TIMEOUT)
        response.raise_for_status()
        body = response.json()
    except requests.RequestException as exc:
        logger.warning("Could not list models at %s: %s", url, _describe_failure(exc))
        return []
    except ValueError as exc:
        logger.warning("Invalid JSON from %s: %s", url, exc)
        return []

    names = _tag_names(body)
    if names is None:
        logger.warning("Unexpected /api/tags body from %s", url)
        return []
    logger.info("Found %d models on %s", len(names), base_url)
    return names


def model_installed(model: str, installed: Sequence[str]) -> bool:
    """Match a model name against installed tags (``phi`` matches ``phi:latest``)."""
    for name in installed:
        if name == model or name == f"{model}:latest" or name.split(":latest")[0] == model:
            return True
    return False


class OllamaCli:
    """Wrapper around the ``ollama`` command-line tool."""

    def __init__(self, runner: CommandRunner = default_runner):
        self.runner = runner

    def installed(self) -> bool:
        return self.runner.exists("ollama")

    def pull(self, model: str) -> None:
        """Download a model, streaming progress to the terminal.

        Raises:
            CommandFailedError: If ``ollama pull`` fails.
        """
        args = ["ollama", "pull", model]
        code = self.runner.interactive(args)
        if code != 0:
            raise CommandFailedError(args, code)

    def run(self, model: str, prompt: Sequence[str] = (), verbose: bool = False) -> int:
        """Run a model attached to the terminal and return the exit code."""
        args = ["ollama", "run", model]
        if verbose:
            args.append("--verbose")
        args.extend(prompt)
        return self.runner.interactive(args)

    def list_table(self) -> str:
        """Return the raw ``ollama list`` table."""
        result = self.runner.run(["ollama", "list"]).check()
        return result.stdout
