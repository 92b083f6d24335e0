"""CLI that times a short prompt against several models."""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from cc_cli import console
from cc_cli.benchmark import BENCHMARK_PROMPT, BenchmarkResult, run_benchmark
from cc_cli.cli.common import add_log_level_argument, setup_logging
from cc_cli.config import service as config_service
from cc_cli.infra.ollama import OllamaClient


def print_result(result: BenchmarkResult) -> None:
    console.success(f"Model: {result.model}")
    console.echo(f"Response time: {result.seconds:.2f}s")
    if result.ok:
        console.echo(f"Response: {result.response}")
    else:
        console.error(f"Error: {result.error}")
    console.echo("----------------------------------------")


def main(argv: Optional[Sequence[str]] = None, client: Optional[OllamaClient] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="cc-test-models",
        description="Measure response time of models served by Ollama",
    )
    parser.add_argument(
        "--model",
        action="append",
        dest="models",
        help="Model to test (repeatable; default: phi, cc-r1:1.5b, cc-r1:8b plus installed extras)",
    )
    parser.add_argument("--timeout", type=int, default=600, help="Per-request timeout in seconds")
    add_log_level_argument(parser)
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    client = client or OllamaClient(base_url=config_service.get_ollama_base_url(), timeout=args.timeout)

    console.echo("Starting model response time tests...")
    console.echo(f"Test prompt: {BENCHMARK_PROMPT}")
    console.echo("----------------------------------------")

    results = run_benchmark(client, models=args.models, on_result=print_result)

    failed = [r.model for r in results if not r.ok]
    if failed:
        console.error(f"{len(failed)} model(s) failed: {', '.join(failed)}")
        return 1
    if not results:
        console.warn("No models were tested.")
        return 1
    console.success("All tests completed!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
