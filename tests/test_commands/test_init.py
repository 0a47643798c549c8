"""Tests for the `lullabot-project init` command."""

from lullabot_project.commands.init import init_cmd
from lullabot_project.core.state import STATE_FILE, StateManager
from lullabot_project.core.tracking import calculate_file_hash


class TestInitCommand:
    """Tests for `lullabot-project init`."""

    def test_non_interactive(self, run_cli, workspace):
        result = run_cli(init_cmd, "-t", "claude", "-p", "none", "--tasks", "agents-md,wrapper")

        assert result.exit_code == 0, result.output
        assert "Setup complete" in result.output
        assert (workspace / "CLAUDE.md").read_text() == "# CLAUDE.md\n\n@AGENTS.md\n"

        state = StateManager(workspace).load()
        assert state.tool == "claude"
        assert state.project_type is None
        assert state.task_preferences == {"agents-md": True, "wrapper": True}
        assert [f.path for f in state.files] == ["AGENTS.md", "CLAUDE.md"]
        for tracked in state.files:
            assert tracked.original_hash == calculate_file_hash(workspace / tracked.path)

    def test_interactive(self, run_cli, workspace):
        result = run_cli(init_cmd, input="claude\nnone\ny\nn\n")

        assert result.exit_code == 0, result.output
        assert "Which tool are you using?" in result.output
        assert "Would you like to run: AGENTS.md?" in result.output
        assert (workspace / "AGENTS.md").exists()
        assert not (workspace / "CLAUDE.md").exists()
        assert StateManager(workspace).load().task_preferences == {
            "agents-md": True, "wrapper": False,
        }

    def test_dry_run_changes_nothing(self, run_cli, workspace):
        result = run_cli(init_cmd, "-t", "claude", "-p", "none", "--all-tasks", "--dry-run")

        assert result.exit_code == 0, result.output
        assert "DRY RUN" in result.output
        assert "AI Tool Wrapper" in result.output
        assert list(workspace.iterdir()) == []

    def test_project_validation_failure(self, run_cli, workspace):
        result = run_cli(init_cmd, "-t", "claude", "-p", "drupal", "--tasks", "agents-md")

        assert result.exit_code == 1
        assert "Setup failed" in result.output
        assert "Missing required file: composer.json" in result.output
        assert not (workspace / STATE_FILE).exists()

    def test_project_tasks_added(self, run_cli, workspace):
        (workspace / "composer.json").write_text('{"require": {"drupal/core": "^10"}}')
        result = run_cli(init_cmd, "-t", "claude", "-p", "drupal", "--tasks", "agents-md")

        assert result.exit_code == 0, result.output
        assert "Project validation passed" in result.output
        assert "Optional file not found: web/index.php" in result.output
        state = StateManager(workspace).load()
        assert state.project_type == "drupal"
        assert state.task_preferences == {"rules": False, "agents-md": True, "wrapper": False}

    def test_skip_validation(self, run_cli, workspace):
        result = run_cli(
            init_cmd, "-t", "claude", "-p", "drupal", "--tasks", "wrapper", "--skip-validation"
        )
        assert result.exit_code == 0, result.output
        assert (workspace / "CLAUDE.md").exists()

    def test_unknown_tool(self, run_cli):
        result = run_cli(init_cmd, "-t", "vim", "-p", "none")
        assert result.exit_code == 1
        assert "Unsupported tool: vim" in result.output

    def test_unknown_task_names_ignored(self, run_cli, workspace):
        result = run_cli(init_cmd, "-t", "claude", "-p", "none", "--tasks", "wrapper,bogus")

        assert result.exit_code == 0, result.output
        assert "bogus" in result.output
        assert StateManager(workspace).load().task_preferences == {
            "agents-md": False, "wrapper": True,
        }

    def test_failed_task_keeps_exit_code(self, run_cli, workspace):
        result = run_cli(init_cmd, "-t", "cursor", "-p", "none", "--all-tasks")

        assert result.exit_code == 0, result.output
        assert "Failed tasks: 1" in result.output
        state = StateManager(workspace).load()
        assert [f.path for f in state.files] == ["AGENTS.md"]
