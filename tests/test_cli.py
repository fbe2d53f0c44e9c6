"""Smoke tests for the CLI entrypoint."""

from click.testing import CliRunner

from favorite_assets.cli import cli


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "Bookmark files and folders" in result.output
    for command in ("add", "remove", "list", "group", "sort", "config"):
        assert command in result.output
