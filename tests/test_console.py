"""Tests for the rich-backed console helpers."""

from cc_cli import console


class TestConsole:
    """Test suite for cc_cli.console."""

    def test_brackets_are_not_markup(self, capsys):
        """Test that help-style text with brackets prints verbatim."""
        console.echo("cc [command] [options]")
        console.warn("Run 'cc login --gcp' first. [0].name")

        out = capsys.readouterr().out
        assert "cc [command] [options]\n" in out
        assert "[0].name" in out

    def test_no_color_when_captured(self, capsys):
        """Test that non-terminal output carries no escape codes."""
        console.error("Error: boom")
        console.assemble("CPU: ", ("Test CPU", "yellow"))

        out = capsys.readouterr().out
        assert out == "Error: boom\nCPU: Test CPU\n"

    def test_long_lines_are_not_wrapped(self, capsys):
        """Test that hints longer than the terminal width stay on one line."""
        text = "x" * 200
        console.echo(text)
        assert capsys.readouterr().out == text + "\n"

    def test_color_on_forced_terminal(self, capsys, monkeypatch):
        """Test that styles become ANSI colour when a terminal is forced."""
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("FORCE_COLOR", "1")
        monkeypatch.setenv("TERM", "xterm")
        monkeypatch.delenv("COLORTERM", raising=False)

        console.error("Error: boom")

        assert "\x1b[31mError: boom" in capsys.readouterr().out

    def test_confirm(self):
        """Test y/n parsing and EOF."""
        assert console.confirm("Go?", prompt=lambda _: "Yes")
        assert not console.confirm("Go?", prompt=lambda _: "n")

        def eof(_):
            raise EOFError

        assert not console.confirm("Go?", prompt=eof)
