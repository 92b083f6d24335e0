"""Tests for installing Ollama and the provider CLIs."""

import pytest

from cc_cli.cli import install_cli
from cc_cli.errors import CommandFailedError, UnsupportedPlatformError
from cc_cli.installer import OLLAMA_INSTALL, RECIPES, Installer, detect_os, install_cloud_deps

from conftest import FakeRunner, ScriptedPrompt


class InstallingRunner(FakeRunner):
    """FakeRunner whose shell/interactive installs make a tool appear."""

    def __init__(self, installed=(), provides=None):
        super().__init__(installed=installed)
        self.provides = provides or {}

    def _provide(self, command: str) -> None:
        for needle, tool in self.provides.items():
            if needle in command:
                self.installed.add(tool)

    def shell(self, script: str) -> int:
        code = super().shell(script)
        if code == 0:
            self._provide(script)
        return code

    def interactive(self, args) -> int:
        code = super().interactive(args)
        if code == 0:
            self._provide(" ".join(args))
        return code


class TestDetectOs:
    """Test suite for detect_os."""

    @pytest.mark.parametrize(
        "system,expected",
        [("Darwin", "macos"), ("Linux", "linux"), ("Windows", "unknown")],
    )
    def test_mapping(self, system, expected):
        """Test platform.system() values."""
        assert detect_os(system) == expected


class TestInstallCli:
    """Test suite for Installer.install_cli."""

    def test_already_installed(self):
        """Test that an installed tool is skipped."""
        runner = FakeRunner(installed={"jq"})

        assert Installer(runner, system="Linux").install_cli("jq") is True
        assert runner.shell_calls == []

    def test_linux_apt_recipe(self):
        """Test that jq is installed with apt-get on Linux."""
        runner = InstallingRunner(installed={"apt-get"}, provides={"install -y jq": "jq"})

        assert Installer(runner, system="Linux").install_cli("jq") is True
        assert runner.shell_calls == list(RECIPES["jq"].linux)

    def test_linux_without_apt(self, capsys):
        """Test that apt-based recipes need apt-get."""
        runner = FakeRunner()

        assert Installer(runner, system="Linux").install_cli("gcloud") is False
        assert runner.shell_calls == []
        out = capsys.readouterr().out
        assert "apt not found." in out
        assert "https://cloud.google.com/sdk/docs/install" in out

    def test_failed_step_stops_recipe(self):
        """Test that the first failing shell line aborts the install."""
        runner = FakeRunner()
        runner.shell_code = 1

        assert Installer(runner, system="Linux").install_cli("aws") is False
        assert len(runner.shell_calls) == 1

    def test_macos_uses_brew(self):
        """Test Homebrew installs on macOS."""
        runner = InstallingRunner(installed={"brew"}, provides={"azure-cli": "az"})

        assert Installer(runner, system="Darwin").install_cli("az") is True
        assert runner.interactive_calls == [["brew", "install", "azure-cli"]]

    def test_unknown_tool(self):
        """Test that tools without a recipe are rejected."""
        with pytest.raises(ValueError):
            Installer(FakeRunner(), system="Linux").install_cli("terraform")


class TestCheckDependencies:
    """Test suite for Installer.check_dependencies."""

    def test_unsupported_os(self):
        """Test that unknown platforms raise with a manual-install hint."""
        with pytest.raises(UnsupportedPlatformError) as exc_info:
            Installer(FakeRunner(), system="Windows").check_dependencies()

        assert "ollama.com" in exc_info.value.hint

    def test_linux_installs_ollama(self):
        """Test that Linux runs the official install script."""
        runner = FakeRunner()

        Installer(runner, system="Linux").check_dependencies()

        assert runner.shell_calls == [OLLAMA_INSTALL]

    def test_linux_install_failure(self):
        """Test that a failing install script raises CommandFailedError."""
        runner = FakeRunner()
        runner.shell_code = 1

        with pytest.raises(CommandFailedError):
            Installer(runner, system="Linux").check_dependencies()

    def test_macos_installs_and_starts_service(self):
        """Test the Homebrew path on macOS."""
        runner = FakeRunner(installed={"brew"})

        Installer(runner, system="Darwin").check_dependencies()

        assert runner.interactive_calls == [
            ["brew", "install", "ollama"],
            ["brew", "services", "start", "ollama"],
        ]

    def test_nothing_to_do(self):
        """Test that an installed Ollama needs no commands."""
        runner = FakeRunner(installed={"ollama"})

        Installer(runner, system="Linux").check_dependencies()

        assert runner.shell_calls == []
        assert runner.interactive_calls == []


class TestInstallCloudDeps:
    """Test suite for install_cloud_deps and cc-install-cloud-deps."""

    def test_prompts_for_each_cli(self):
        """Test that with no flags each CLI is offered."""
        runner = FakeRunner(installed={"jq", "gcloud", "aws", "az"})
        prompt = ScriptedPrompt("y", "n", "y")

        assert install_cloud_deps(None, Installer(runner, system="Linux"), prompt) is True
        assert prompt.questions == [
            "Install Google Cloud SDK? (y/n) ",
            "Install AWS CLI? (y/n) ",
            "Install Azure CLI? (y/n) ",
        ]

    def test_flag_limits_providers(self, capsys):
        """Test that --aws only installs jq and the AWS CLI."""
        runner = FakeRunner(installed={"jq", "aws"})

        assert install_cli.main(["--aws"], runner=runner, system="Linux") == 0

        out = capsys.readouterr().out
        assert "AWS CLI is already installed." in out
        assert "Google Cloud SDK" not in out

    def test_failure_exits_1(self):
        """Test that a failed install makes the command fail."""
        runner = FakeRunner(installed={"jq"})

        assert install_cli.main(["--gcp"], runner=runner, system="Linux") == 1
