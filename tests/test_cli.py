"""Tests for the slackmark CLI."""

import re
import sys

import pytest

from slackmark import __version__
from slackmark.cli import cli, main
from slackmark.communication import patterns
from slackmark.communication.patterns import PatternTableError


class TestConvert:

    def test_stdin(self, runner):
        result = runner.invoke(cli, ["convert"], input="**bold** and *italic*")
        assert result.exit_code == 0
        assert result.output == "*bold* and _italic_\n"

    def test_file(self, runner, tmp_path):
        path = tmp_path / "reply.md"
        path.write_text("# Title\n\n- [docs](https://docs.example.com)\n", encoding="utf-8")
        result = runner.invoke(cli, ["convert", str(path)])
        assert result.exit_code == 0
        assert result.output == "*Title*\n\n• <https://docs.example.com|docs>\n"

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["convert", str(tmp_path / "nope.md")])
        assert result.exit_code == 2

    def test_raw(self, runner):
        result = runner.invoke(cli, ["convert", "--raw"], input="**bold**")
        assert result.exit_code == 0
        assert result.output == "**bold**\n"

    def test_reveal(self, runner):
        result = runner.invoke(cli, ["convert", "--reveal"], input="<strong>武</strong>士")
        assert result.exit_code == 0
        assert result.output == "*武*<ZWSP>士\n"

    def test_conversion_disabled_by_env(self, runner, monkeypatch):
        monkeypatch.setenv("SLACKMARK_CONVERT_MARKDOWN", "false")
        result = runner.invoke(cli, ["convert"], input="**bold**")
        assert result.output == "**bold**\n"

    def test_reveal_enabled_by_env(self, runner, monkeypatch):
        monkeypatch.setenv("SLACKMARK_REVEAL_INVISIBLE", "true")
        result = runner.invoke(cli, ["convert"], input="**重要**です")
        assert result.output == "*重要*<ZWSP>です\n"

    def test_broken_pattern_table(self, runner, monkeypatch):
        def broken_build():
            raise PatternTableError("md_bold", "(", re.error("missing )"))

        monkeypatch.setattr(patterns, "_patterns", None)
        monkeypatch.setattr(patterns, "build_patterns", broken_build)

        result = runner.invoke(cli, ["convert"], input="**bold**")
        assert result.exit_code == 1


class TestPatterns:

    def test_lists_table(self, runner):
        result = runner.invoke(cli, ["patterns"])
        assert result.exit_code == 0
        assert "fenced_code" in result.output
        assert f"{len(patterns.PATTERN_SOURCES)} patterns compiled" in result.output

    def test_broken_table_exits_nonzero(self, runner, monkeypatch):
        def broken_build():
            raise PatternTableError("table", "[", re.error("unterminated character set"))

        monkeypatch.setattr(patterns, "_patterns", None)
        monkeypatch.setattr(patterns, "build_patterns", broken_build)

        result = runner.invoke(cli, ["patterns"])
        assert result.exit_code == 1


class TestGroup:

    def test_no_command_shows_help(self, runner):
        result = runner.invoke(cli, [])
        assert result.exit_code == 0
        assert "convert" in result.output
        assert "patterns" in result.output

    def test_help_command(self, runner):
        result = runner.invoke(cli, ["help"])
        assert result.exit_code == 0
        assert "slackmark convert" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_main_unknown_command(self, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["slackmark", "bogus"])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 2

    def test_main_usage_error_points_at_help(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["convert", "--no-such-flag"])
        assert exc_info.value.code == 2
        err = capsys.readouterr().err
        assert "Try 'slackmark help' for help." in err
        assert "--no-such-flag" in err

    def test_main_runs_command_from_argv(self, capsys):
        main(["patterns"])
        assert "patterns compiled" in capsys.readouterr().out
