"""Tests for the lullabot-project command group."""

from lullabot_project import __version__
from lullabot_project.cli import main


class TestMainGroup:
    """Tests for the top-level `lullabot-project` group."""

    def test_version(self, cli_runner):
        result = cli_runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert f"lullabot-project, version {__version__}" in result.output

    def test_commands_registered(self, cli_runner):
        result = cli_runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        for name in ("init", "update", "config", "remove"):
            assert name in result.output

    def test_full_lifecycle(self, run_cli, workspace):
        assert run_cli(main, "init", "-t", "claude", "-p", "none", "--all-tasks").exit_code == 0
        assert (workspace / "CLAUDE.md").exists()

        assert "already up to date" in run_cli(main, "update").output
        assert run_cli(main, "remove", "-f").exit_code == 0
        assert list(workspace.iterdir()) == []
