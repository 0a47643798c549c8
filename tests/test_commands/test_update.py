"""Tests for the `lullabot-project update` command."""

import yaml

from lullabot_project import __version__
from lullabot_project.commands.update import is_update_needed, update_cmd
from lullabot_project.core.state import STATE_FILE, InstallationInfo, ProjectState, StateManager


def set_recorded_version(workspace, version):
    path = workspace / STATE_FILE
    data = yaml.safe_load(path.read_text())
    data["installation"]["toolVersion"] = version
    path.write_text(yaml.safe_dump(data, sort_keys=False))


class TestIsUpdateNeeded:
    """Tests for is_update_needed()."""

    def test_compares_versions(self):
        state = ProjectState(installation=InstallationInfo(tool_version="0.9.0"))
        assert is_update_needed(state, "1.0.0") is True
        assert is_update_needed(state, "0.9.0") is False


class TestUpdateCommand:
    """Tests for `lullabot-project update`."""

    def test_not_initialized(self, run_cli):
        result = run_cli(update_cmd)
        assert result.exit_code == 1
        assert "No existing configuration found" in result.output

    def test_already_up_to_date(self, run_cli, initialized):
        result = run_cli(update_cmd)
        assert result.exit_code == 0, result.output
        assert "already up to date" in result.output

    def test_version_change_reruns_recorded_tasks(self, run_cli, initialized):
        created = StateManager(initialized).load().installation.created
        set_recorded_version(initialized, "0.0.1")

        result = run_cli(update_cmd)

        assert result.exit_code == 0, result.output
        assert "Update complete" in result.output
        assert (initialized / "CLAUDE.md").exists()
        state = StateManager(initialized).load()
        assert state.installation.tool_version == __version__
        assert state.installation.created == created
        assert state.task_preferences == {"agents-md": True, "wrapper": True}

    def test_modified_file_declined(self, run_cli, initialized):
        (initialized / "CLAUDE.md").write_text("my own notes\n")

        result = run_cli(update_cmd, "--force", input="n\n")

        assert result.exit_code == 0, result.output
        assert "have been modified" in result.output
        assert "Update cancelled" in result.output
        assert (initialized / "CLAUDE.md").read_text() == "my own notes\n"

    def test_modified_file_confirmed(self, run_cli, initialized):
        (initialized / "CLAUDE.md").write_text("my own notes\n")

        result = run_cli(update_cmd, "--force", input="y\n")

        assert result.exit_code == 0, result.output
        assert (initialized / "CLAUDE.md").read_text() == "# CLAUDE.md\n\n@AGENTS.md\n"

    def test_dry_run(self, run_cli, initialized):
        (initialized / "CLAUDE.md").write_text("my own notes\n")
        before = (initialized / STATE_FILE).read_text()

        result = run_cli(update_cmd, "--force", "--dry-run")

        assert result.exit_code == 0, result.output
        assert "DRY RUN" in result.output
        assert "Modified files that would need confirmation" in result.output
        assert (initialized / STATE_FILE).read_text() == before
        assert (initialized / "CLAUDE.md").read_text() == "my own notes\n"

    def test_selection_flags_rebuild_preferences(self, run_cli, initialized):
        result = run_cli(update_cmd, "--force", "--tasks", "wrapper")

        assert result.exit_code == 0, result.output
        state = StateManager(initialized).load()
        assert state.task_preferences == {"agents-md": False, "wrapper": True}
        assert [f.path for f in state.files] == ["CLAUDE.md"]

    def test_corrupt_state(self, run_cli, workspace):
        (workspace / STATE_FILE).write_text("project: [unclosed\n")
        result = run_cli(update_cmd)
        assert result.exit_code == 1
        assert "Failed to read configuration file" in result.output

    def test_corrupt_state_recreated_with_force(self, run_cli, workspace):
        (workspace / STATE_FILE).write_text("project: [unclosed\n")

        result = run_cli(
            update_cmd, "--force", "-t", "claude", "-p", "none", "--tasks", "agents-md"
        )

        assert result.exit_code == 0, result.output
        assert "Recreating configuration" in result.output
        state = StateManager(workspace).load()
        assert state.tool == "claude"
        assert [f.path for f in state.files] == ["AGENTS.md"]
