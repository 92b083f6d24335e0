"""Tests for the main ``cc`` command dispatch and exit codes."""

from unittest.mock import patch

import pytest

from cc_cli.cli import main as cc_main
from cc_cli.config import service as config_service
from cc_cli.core.hardware import HardwareInfo
from cc_cli.installer import Installer

from conftest import FakeRunner, ScriptedPrompt

GB = 1024**3


@pytest.fixture
def runner():
    return FakeRunner(installed={"ollama"})


@pytest.fixture
def setup_done():
    config_service.mark_first_run_complete()


def run_cc(argv, runner, prompt=None):
    return cc_main.main(
        argv,
        runner=runner,
        prompt=prompt or ScriptedPrompt(),
        installer=Installer(runner, system="Linux"),
    )


@pytest.mark.usefixtures("setup_done")
class TestDispatch:
    """Test suite for simple subcommands."""

    def test_version(self, runner, capsys):
        """Test that version prints the banner and version."""
        assert run_cc(["version"], runner) == 0
        assert "Version: 0.2.0" in capsys.readouterr().out

    def test_help_is_default(self, runner, capsys):
        """Test that no command shows help."""
        assert run_cc([], runner) == 0
        assert "set-default [model]" in capsys.readouterr().out

    def test_unknown_command(self, runner, capsys):
        """Test that an unknown command prints help and exits 1."""
        assert run_cc(["frobnicate"], runner) == 1

        out = capsys.readouterr().out
        assert "Unknown command: frobnicate" in out
        assert "Usage:" in out

    def test_run_with_model(self, runner):
        """Test that a leading model name is passed to ollama run."""
        assert run_cc(["run", "mistral", "Write a poem"], runner) == 0
        assert runner.interactive_calls == [["ollama", "run", "mistral", "Write a poem"]]

    def test_run_uses_default_model(self, runner):
        """Test that a prompt without a model uses the default model."""
        run_cc(["run", "What is the capital of France?"], runner)
        assert runner.interactive_calls == [["ollama", "run", "cc-r1:8b", "What is the capital of France?"]]

    def test_run_verbose(self, runner):
        """Test that the verbose setting adds --verbose."""
        config_service.save_config(config_service.load_config().model_copy(update={"verbose": True}))

        run_cc(["run", "phi", "hi"], runner)

        assert runner.interactive_calls == [["ollama", "run", "phi", "--verbose", "hi"]]

    def test_run_propagates_exit_code(self, runner):
        """Test that ollama's exit status is returned."""
        runner.on_interactive("ollama", "run", returncode=3)
        assert run_cc(["run", "phi", "hi"], runner) == 3

    def test_pull_default(self, runner):
        """Test that pull without a model pulls the default."""
        assert run_cc(["pull"], runner) == 0
        assert runner.interactive_calls == [["ollama", "pull", "cc-r1:8b"]]

    def test_pull_failure(self, runner, capsys):
        """Test that a failed pull exits 1."""
        runner.on_interactive("ollama", "pull", returncode=1)

        assert run_cc(["pull", "phi"], runner) == 1
        assert "Error:" in capsys.readouterr().out

    def test_set_default(self, runner):
        """Test that set-default persists a catalog model."""
        assert run_cc(["set-default", "phi"], runner) == 0
        assert config_service.reload_config().default_model == "phi"

    def test_set_default_invalid(self, runner, capsys):
        """Test that set-default rejects unknown models and lists valid ones."""
        assert run_cc(["set-default", "gpt-4"], runner) == 1

        out = capsys.readouterr().out
        assert "Invalid model name: gpt-4" in out
        assert "cc-r1:1.5b" in out
        assert config_service.reload_config().default_model == "cc-r1:8b"

    @pytest.mark.parametrize("setting,expected", [("on", True), ("off", False)])
    def test_verbose(self, runner, setting, expected):
        """Test that verbose on/off persists."""
        assert run_cc(["verbose", setting], runner) == 0
        assert config_service.reload_config().verbose is expected

    def test_verbose_invalid(self, runner):
        """Test that anything but on/off is an error."""
        assert run_cc(["verbose", "maybe"], runner) == 1

    def test_list_marks_default(self, runner, capsys):
        """Test that list marks the default and shows installed models."""
        runner.on("ollama", "list", stdout="NAME ID SIZE MODIFIED\nphi:latest abc 1.6GB now\n")

        assert run_cc(["list"], runner) == 0

        out = capsys.readouterr().out
        assert "* cc-r1:8b (default)" in out
        assert "phi:latest" in out

    def test_recommend(self, runner, capsys):
        """Test that recommend lists the alternative models."""
        assert run_cc(["recommend"], runner) == 0
        assert "qwen:4b" in capsys.readouterr().out

    def test_login_passthrough(self, runner, capsys):
        """Test that login delegates to cc-login."""
        assert run_cc(["login", "--status"], runner) == 0
        assert "Cloud Provider Authentication Status:" in capsys.readouterr().out

    def test_cloud_passthrough(self, runner, capsys):
        """Test that cloud delegates to cc-cloud."""
        assert run_cc(["cloud", "find-cheapest", "phi", "basic", "--offline"], runner) == 0
        assert "Standard_D2s_v5" in capsys.readouterr().out

    def test_invalid_config_file(self, runner, cli_home, capsys):
        """Test that a broken config file is reported and exits 1."""
        (cli_home / "config").write_text("default_model phi\n")
        config_service._CLI_CONFIG = None

        assert run_cc(["version"], runner) == 1
        assert "Invalid configuration file" in capsys.readouterr().out


class TestFirstRun:
    """Test suite for first-run setup."""

    def _hardware(self):
        return HardwareInfo(
            system="Linux",
            cpu_info="Test CPU",
            cpu_cores=8,
            total_ram_bytes=8 * GB,
        )

    def test_first_run_accepts_recommendation(self, runner):
        """Test that accepting setup pulls and sets the recommended model."""
        with patch.object(cc_main, "detect_hardware", return_value=self._hardware()):
            code = run_cc(["run", "hello"], runner, prompt=ScriptedPrompt("y"))

        assert code == 0
        assert ["ollama", "pull", "phi"] in runner.interactive_calls
        assert runner.interactive_calls[-1] == ["ollama", "run", "phi", "hello"]
        assert config_service.reload_config().default_model == "phi"
        assert not config_service.is_first_run()

    def test_first_run_declined(self, runner):
        """Test that declining setup still writes the marker."""
        with patch.object(cc_main, "detect_hardware", return_value=self._hardware()):
            run_cc(["help"], runner, prompt=ScriptedPrompt("n"))

        assert not runner.ran("ollama", "pull")
        assert not config_service.is_first_run()

    def test_setup_reruns(self, runner):
        """Test that setup runs again even after the marker exists."""
        config_service.mark_first_run_complete()

        with patch.object(cc_main, "detect_hardware", return_value=self._hardware()):
            assert run_cc(["setup"], runner, prompt=ScriptedPrompt("n")) == 0

    def test_hardware_leaves_first_run_pending(self, runner, capsys):
        """Test that the hardware summary does not count as first-run setup."""
        with patch.object(cc_main, "detect_hardware", return_value=self._hardware()):
            assert run_cc(["hardware"], runner) == 0

        out = capsys.readouterr().out
        assert "Best model for your hardware: phi" in out
        assert config_service.is_first_run()
        assert not runner.ran("ollama", "pull")

    def test_missing_ollama_is_installed(self, capsys):
        """Test that install runs the Ollama installer when it is missing."""
        runner = FakeRunner()

        assert run_cc(["install", "phi"], runner) == 0
        assert runner.shell_calls == ["curl -fsSL https://ollama.com/install.sh | sh"]
        assert ["ollama", "pull", "phi"] in runner.interactive_calls
