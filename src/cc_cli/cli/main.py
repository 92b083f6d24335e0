"""Main ``cc`` command: run and manage local models through Ollama.

Usage:
    cc run "What is the capital of France?"
    cc run mistral "Write me a poem about clouds."
    cc pull phi
    cc set-default phi
    cc cloud find-cheapest cc-r1:8b standard
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Dict, List, Optional, Sequence

from cc_cli import __version__, console
from cc_cli.catalog import ALTERNATIVE_MODELS, CC_MODELS, RECOMMENDED_MODELS, is_known_model, looks_like_model
from cc_cli.cli import cloud_cli, login_cli
from cc_cli.cli.common import LOG_LEVELS, report_error, setup_logging
from cc_cli.config import service as config_service
from cc_cli.config.models import CliConfig
from cc_cli.core.hardware import capability_summary, detect_hardware, recommend_best_model
from cc_cli.errors import CcCliError
from cc_cli.infra.ollama import OllamaCli
from cc_cli.infra.runner import CommandRunner, default_runner
from cc_cli.installer import Installer

logger = logging.getLogger(__name__)

HELP_TEXT = """Usage:
  cc [command] [options]

Commands:
  run [model] [prompt]   Run a model with the given prompt
  install [model]        Install or update requirements
  pull [model]           Download a model
  list                   List available models
  recommend              Recommend best model for your system
  hardware               Check your system hardware
  setup                  Run first-time setup again
  set-default [model]    Set default model
  login                  Authenticate with cloud providers (GCP, AWS, Azure)
  cloud                  Find and provision cloud instances (see 'cc cloud help')
  verbose [on|off]       Enable or disable verbose mode
  version                Show version
  help                   Show this help message

Models:
  {cc_models}
  {alt_models}

Examples:
  cc run "What is the capital of France?"
  cc run mistral "Write me a poem about clouds."
  cc pull phi
  cc recommend
  cc login --gcp
"""


class CcApp:
    """Dispatches ``cc`` subcommands.

    Collaborators are injectable so tests never touch real tools.
    """

    def __init__(
        self,
        runner: CommandRunner = default_runner,
        prompt: Callable[[str], str] = input,
        installer: Optional[Installer] = None,
    ):
        self.runner = runner
        self.prompt = prompt
        self.ollama = OllamaCli(runner)
        self.installer = installer or Installer(runner)
        self.commands: Dict[str, Callable[[List[str]], int]] = {
            "install": self.cmd_install,
            "run": self.cmd_run,
            "pull": self.cmd_pull,
            "list": self.cmd_list,
            "recommend": self.cmd_recommend,
            "hardware": self.cmd_hardware,
            "setup": self.cmd_setup,
            "set-default": self.cmd_set_default,
            "login": self.cmd_login,
            "cloud": self.cmd_cloud,
            "verbose": self.cmd_verbose,
            "version": self.cmd_version,
            "help": self.cmd_help,
        }

    @property
    def config(self) -> CliConfig:
        return config_service.load_config()

    def dispatch(self, command: Optional[str], args: List[str]) -> int:
        handler = self.commands.get(command or "help")
        if handler is None:
            self.check_first_run()
            console.error(f"Unknown command: {command}")
            self.print_help()
            return 1
        return handler(args)

    # First run

    def check_first_run(self) -> None:
        if config_service.is_first_run():
            self.first_run_setup()

    def first_run_setup(self) -> None:
        console.print_banner(__version__)
        console.heading("Welcome to CC CLI! Let's set up your environment.")
        self.installer.check_dependencies()

        console.echo()
        console.heading("Analyzing your hardware...")
        hw = detect_hardware(self.runner)
        console.assemble("CPU: ", (hw.cpu_info, "yellow"))
        console.assemble("Total RAM: ", (f"{hw.ram_gb} GB", "yellow"))
        console.assemble("GPU: ", (hw.gpu_info, "yellow"))

        best = recommend_best_model(hw)
        console.echo()
        console.assemble(("Based on your hardware, the recommended model is: ", "cyan"), (best, "green"))
        if console.confirm("Would you like to download and set this model as default?", prompt=self.prompt):
            console.warn(f"Downloading and setting up {best}...")
            self.pull(best)
            self.set_default(best)
            console.success("Setup complete!")
            console.assemble("You can now use the model by running: ", ('cc run "Your prompt here"', "cyan"))
        else:
            console.warn("Skipping automatic model download.")
            console.assemble("You can manually download models later with: ", ("cc pull <model>", "cyan"))

        config_service.mark_first_run_complete()

    # Helpers

    def pull(self, model: Optional[str]) -> None:
        model = model or self.config.default_model
        console.warn(f"Downloading model: {model}")
        self.ollama.pull(model)
        console.success("Model downloaded successfully.")

    def set_default(self, model: str) -> bool:
        if not is_known_model(model):
            console.error(f"Invalid model name: {model}")
            console.warn(f"Available CC models: {' '.join(CC_MODELS)}")
            console.warn(f"Alternative recommended models: {' '.join(ALTERNATIVE_MODELS)}")
            return False
        config_service.save_config(self.config.model_copy(update={"default_model": model}))
        console.success(f"Default model set to: {model}")
        return True

    def print_help(self) -> None:
        console.echo(
            HELP_TEXT.format(cc_models=", ".join(CC_MODELS), alt_models=", ".join(ALTERNATIVE_MODELS))
        )

    def _print_models(self, title: str, models: Sequence[str]) -> None:
        console.heading(title)
        default = self.config.default_model
        for model in models:
            if model == default:
                console.success(f"  * {model} (default)")
            else:
                console.echo(f"  {model}")

    # Commands

    def cmd_install(self, args: List[str]) -> int:
        console.print_banner(__version__)
        self.installer.check_dependencies()
        self.pull(args[0] if args else None)
        return 0

    def cmd_run(self, args: List[str]) -> int:
        self.check_first_run()
        if args and looks_like_model(args[0]):
            model, prompt = args[0], args[1:]
        else:
            model, prompt = self.config.default_model, args
        console.success(f"Starting model {model}...")
        return self.ollama.run(model, prompt, verbose=self.config.verbose)

    def cmd_pull(self, args: List[str]) -> int:
        self.pull(args[0] if args else None)
        return 0

    def cmd_list(self, args: List[str]) -> int:
        self._print_models("Available CC models:", CC_MODELS)
        console.echo()
        self._print_models("Recommended alternative models (better for limited hardware):", ALTERNATIVE_MODELS)
        console.echo()
        console.heading("Currently installed models:")
        console.echo(self.ollama.list_table().rstrip())
        return 0

    def cmd_recommend(self, args: List[str]) -> int:
        console.heading("Recommended Models for Limited Hardware:")
        for model, description in RECOMMENDED_MODELS:
            console.assemble("  ", (model, "green"), f" - {description}")
        console.echo()
        console.echo("To use these models:")
        console.assemble("  ", ("cc pull phi", "yellow"), "                # Download phi model")
        console.assemble("  ", ("cc set-default phi", "yellow"), "         # Set as default")
        console.assemble("  ", ('cc run phi "Your prompt"', "yellow"), "   # Run with a specific prompt")
        return 0

    def cmd_hardware(self, args: List[str]) -> int:
        console.heading("Checking system hardware...")
        hw = detect_hardware(self.runner)
        console.assemble("CPU: ", (hw.cpu_info, "yellow"))
        console.assemble("Total RAM: ", (f"{hw.ram_gb} GB", "yellow"))
        console.assemble("GPU: ", (hw.gpu_info, "yellow"))
        console.echo()
        console.heading("Based on your hardware:")
        console.echo(f"  {capability_summary(hw.ram_gb)}")
        console.echo()
        console.assemble(("Best model for your hardware: ", "cyan"), (recommend_best_model(hw), "green"))
        return 0

    def cmd_setup(self, args: List[str]) -> int:
        config_service.reset_first_run()
        self.first_run_setup()
        return 0

    def cmd_set_default(self, args: List[str]) -> int:
        if not args:
            console.error("Usage: cc set-default <model>")
            return 1
        return 0 if self.set_default(args[0]) else 1

    def cmd_login(self, args: List[str]) -> int:
        return login_cli.main(args, runner=self.runner, prompt=self.prompt)

    def cmd_cloud(self, args: List[str]) -> int:
        return cloud_cli.main(args, runner=self.runner, prompt=self.prompt)

    def cmd_verbose(self, args: List[str]) -> int:
        setting = args[0] if args else ""
        if setting not in ("on", "off"):
            console.error("Invalid option. Use 'on' or 'off'.")
            return 1
        enabled = setting == "on"
        config_service.save_config(self.config.model_copy(update={"verbose": enabled}))
        console.success(f"Verbose mode {'enabled' if enabled else 'disabled'}.")
        return 0

    def cmd_version(self, args: List[str]) -> int:
        console.print_banner(__version__)
        return 0

    def cmd_help(self, args: List[str]) -> int:
        self.check_first_run()
        self.print_help()
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cc", add_help=False)
    parser.add_argument("--log-level", choices=LOG_LEVELS, default=None)
    parser.add_argument("command", nargs="?")
    parser.add_argument("args", nargs=argparse.REMAINDER)
    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    runner: CommandRunner = default_runner,
    prompt: Callable[[str], str] = input,
    installer: Optional[Installer] = None,
) -> int:
    """Main entry point for cc.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = build_parser().parse_args(argv)

    try:
        verbose = config_service.load_config().verbose
    except ValueError as exc:
        setup_logging(args.log_level or "WARNING")
        return report_error(exc)
    setup_logging(args.log_level or ("INFO" if verbose else "WARNING"))

    app = CcApp(runner=runner, prompt=prompt, installer=installer)
    try:
        return app.dispatch(args.command, list(args.args))
    except KeyboardInterrupt:
        console.echo("\nInterrupted by user")
        return 130
    except (CcCliError, ValueError) as exc:
        return report_error(exc)


if __name__ == "__main__":
    sys.exit(main())
