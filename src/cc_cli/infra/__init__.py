"""Infrastructure adapters: subprocess runner, retry policy and Ollama client."""

from .retry import RetryPolicy
from .runner import CommandResult, CommandRunner, default_runner
from .ollama import OllamaCli, OllamaClient, list_ollama_models

__all__ = [
    "RetryPolicy",
    "CommandResult",
    "CommandRunner",
    "default_runner",
    "OllamaCli",
    "OllamaClient",
    "list_ollama_models",
]
