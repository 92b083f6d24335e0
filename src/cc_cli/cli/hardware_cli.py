"""CLI that reports local hardware and model-size advice."""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from cc_cli import console
from cc_cli.cli.common import add_log_level_argument, setup_logging
from cc_cli.core.hardware import HardwareReport, analyze, detect_hardware, format_bytes
from cc_cli.infra.runner import CommandRunner, default_runner


def print_report(report: HardwareReport) -> None:
    hw = report.hardware
    console.success("Analyzing System Hardware...")
    console.echo("----------------------------------------")
    console.assemble("CPU: ", (hw.cpu_info, "yellow"))
    console.assemble("CPU Cores: ", (str(hw.cpu_cores), "yellow"))
    console.assemble("Total Memory: ", (f"{hw.ram_gb_exact:.2f} GB", "yellow"))
    console.assemble("Available Disk Space: ", (format_bytes(hw.disk_free_bytes), "yellow"))
    console.assemble("GPU: ", (hw.gpu_info, "yellow"))

    console.echo()
    console.success("Recommendations:")
    console.echo("----------------------------------------")
    if report.limited_memory:
        console.warn("Limited memory detected.")
    console.echo(report.recommendation)

    console.echo()
    console.success("Performance Optimization Suggestions:")
    console.echo("----------------------------------------")
    for suggestion in report.suggestions:
        console.echo(f"- {suggestion}")


def main(argv: Optional[Sequence[str]] = None, runner: CommandRunner = default_runner) -> int:
    parser = argparse.ArgumentParser(
        prog="cc-analyze-hardware",
        description="Analyze this machine and suggest suitable model sizes",
    )
    add_log_level_argument(parser)
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    print_report(analyze(detect_hardware(runner)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
