"""Response-time smoke test across installed models."""

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

import requests

from cc_cli.infra.ollama import OllamaClient, list_ollama_models, model_installed

logger = logging.getLogger(__name__)

BENCHMARK_PROMPT = "What is the capital of France? Answer in one word."
CORE_MODELS = ("phi", "cc-r1:1.5b", "cc-r1:8b")
OPTIONAL_MODELS = ("mistral", "gemma:2b")


@dataclass
class BenchmarkResult:
    """Outcome of one model's test."""

    model: str
    seconds: float
    response: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def models_to_test(installed: Sequence[str]) -> List[str]:
    """Core models always, optional ones only if already pulled."""
    models = list(CORE_MODELS)
    models += [m for m in OPTIONAL_MODELS if model_installed(m, installed)]
    return models


def run_benchmark(
    client: OllamaClient,
    models: Optional[Sequence[str]] = None,
    prompt: str = BENCHMARK_PROMPT,
    clock: Callable[[], float] = time.perf_counter,
    on_result: Optional[Callable[[BenchmarkResult], None]] = None,
) -> List[BenchmarkResult]:
    """Send ``prompt`` to each model and time the round trip.

    A failing model is recorded with its error and the run continues.
    """
    if models is None:
        models = models_to_test(list_ollama_models(client.base_url))

    results = []
    for model in models:
        start = clock()
        try:
            response = client.generate(model, prompt)
            result = BenchmarkResult(model, clock() - start, response=response.strip())
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Model %s failed: %s", model, exc)
            result = BenchmarkResult(model, clock() - start, error=str(exc))
        results.append(result)
        if on_result is not None:
            on_result(result)
    return results
