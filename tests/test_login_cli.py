"""Tests for the cc-login command."""

import pytest

from cc_cli.cli import login_cli
from cc_cli.config import service as config_service

from conftest import FakeRunner, ScriptedPrompt


class TestLoginCli:
    """Test suite for cc-login option handling."""

    def test_status(self, capsys):
        """Test that --status prints both tables."""
        assert login_cli.main(["--status"], runner=FakeRunner()) == 0

        out = capsys.readouterr().out
        assert "Not Authenticated" in out
        assert "Not Installed" in out

    def test_single_provider_success(self):
        """Test that --gcp logs in to GCP only."""
        runner = FakeRunner(installed={"gcloud"}).on("gcloud", "auth", "list", stdout="dev@example.com")

        assert login_cli.main(["--gcp"], runner=runner) == 0
        assert config_service.is_authenticated("gcp")

    def test_single_provider_failure(self):
        """Test that a failed login exits 1."""
        assert login_cli.main(["--azure"], runner=FakeRunner()) == 1

    def test_logout_all(self):
        """Test that --logout all clears every provider."""
        for provider in ("gcp", "aws", "azure"):
            config_service.update_auth_status(provider, True)

        assert login_cli.main(["--logout", "all"], runner=FakeRunner()) == 0

        status = config_service.load_auth_status()
        assert not (status.gcp or status.aws or status.azure)

    def test_options_are_exclusive(self):
        """Test that two provider flags are rejected by argparse."""
        with pytest.raises(SystemExit):
            login_cli.main(["--gcp", "--aws"], runner=FakeRunner())

    def test_verify_single_provider(self, capsys):
        """Test that --verify aws checks only AWS."""
        config_service.update_auth_status("aws", True)
        runner = FakeRunner(installed={"aws"})
        runner.on("aws", "sts", "get-caller-identity", stdout="arn:aws:iam::123:user/dev\n")
        runner.on("aws", "ec2", "describe-regions", stdout="| us-east-1 |\n")

        assert login_cli.main(["--verify", "aws"], runner=runner) == 0

        out = capsys.readouterr().out
        assert "Account: arn:aws:iam::123:user/dev" in out
        assert "Google Cloud Platform" not in out

    def test_verify_defaults_to_all_providers(self, capsys):
        """Test that bare --verify checks every provider and fails if any does."""
        config_service.update_auth_status("aws", True)
        runner = FakeRunner(installed={"aws"})
        runner.on("aws", "sts", "get-caller-identity", stdout="arn:aws:iam::123:user/dev\n")

        assert login_cli.main(["--verify"], runner=runner) == 1

        out = capsys.readouterr().out
        assert "Checking Google Cloud Platform authentication..." in out
        assert "Checking Microsoft Azure authentication..." in out
        assert "Authenticated with Amazon Web Services." in out


class TestMenu:
    """Test suite for the interactive menu."""

    def test_exit_choice(self):
        """Test that choice 5 exits cleanly without logging in."""
        runner = FakeRunner()
        assert login_cli.main([], runner=runner, prompt=ScriptedPrompt("5")) == 0
        assert runner.interactive_calls == []

    def test_invalid_choice(self, capsys):
        """Test that an invalid choice exits 1."""
        assert login_cli.main([], runner=FakeRunner(), prompt=ScriptedPrompt("9")) == 1
        assert "Invalid choice" in capsys.readouterr().out

    def test_provider_choice(self):
        """Test that choice 3 logs in to AWS."""
        runner = FakeRunner(installed={"aws"}).on(
            "aws", "sts", "get-caller-identity", stdout="arn:aws:iam::1:user/dev"
        )

        assert login_cli.main([], runner=runner, prompt=ScriptedPrompt("3")) == 0
        assert config_service.is_authenticated("aws")

    def test_end_of_input_exits(self):
        """Test that EOF at the prompt behaves like Exit."""
        assert login_cli.main([], runner=FakeRunner(), prompt=ScriptedPrompt()) == 0
