"""Tests for lullabot_project.runner module."""

import subprocess

from lullabot_project.core.catalog import get_tasks
from lullabot_project.core.tracking import TrackedFile
from lullabot_project.runner import describe_tasks, enabled_tasks, run_tasks


class TestEnabledTasks:
    """Tests for enabled_tasks()."""

    def test_keeps_catalog_order(self):
        tasks = {"b": {}, "a": {}, "c": {}}
        assert [t for t, _ in enabled_tasks(tasks, {"a": True, "c": True, "b": False})] == ["a", "c"]


class TestRunTasks:
    """Tests for run_tasks()."""

    def test_runs_in_catalog_order(self, catalog_data, context, workspace):
        (workspace / "notes").mkdir()
        (workspace / "notes" / "n.md").write_text("# N\n")
        tasks = get_tasks("cursor", None, catalog_data)

        report = run_tasks(
            tasks, {"notes": True, "agents-md": True}, "cursor", None,
            context, show_progress=False,
        )

        assert [o.task_id for o in report.successful] == ["agents-md", "notes"]
        assert [f.path for f in report.files] == ["AGENTS.md", ".ai/cursor/n.md"]

    def test_failure_does_not_stop_run(self, catalog_data, context, workspace):
        tasks = get_tasks("cursor", None, catalog_data)
        report = run_tasks(
            tasks, {"notes": True, "agents-md": True}, "cursor", None,
            context, show_progress=False,
        )

        assert [o.task_id for o in report.failed] == ["notes"]
        assert "Source directory not found" in report.failed[0].error
        assert [o.task_id for o in report.successful] == ["agents-md"]
        assert (workspace / "AGENTS.md").exists()

    def test_disabled_tasks_not_run(self, catalog_data, context, workspace):
        tasks = get_tasks("claude", None, catalog_data)
        report = run_tasks(tasks, {"wrapper": True}, "claude", None, context, show_progress=False)

        assert [f.path for f in report.files] == ["CLAUDE.md"]
        assert not (workspace / "AGENTS.md").exists()

    def test_starts_from_context_files(self, catalog_data, context):
        context.files = [TrackedFile(".ai/rules/kept.md", "h")]
        tasks = get_tasks("claude", None, catalog_data)
        report = run_tasks(tasks, {"agents-md": True}, "claude", None, context, show_progress=False)
        assert [f.path for f in report.files] == [".ai/rules/kept.md", "AGENTS.md"]

    def test_packages_collected(self, catalog_data, context, monkeypatch):
        def fake(command, **kwargs):
            stdout = "4.5.6\n" if "--version" in command else ""
            return subprocess.CompletedProcess(command, 0, stdout=stdout, stderr="")

        monkeypatch.setattr(subprocess, "run", fake)
        tasks = {
            "pkg": {
                "id": "pkg",
                "name": "Package",
                "type": "package-install",
                "package": {"name": "pkg", "type": "npx", "install-command": "npx pkg init"},
            },
        }
        report = run_tasks(tasks, {"pkg": True}, "claude", None, context, show_progress=False)
        assert report.packages["pkg"].version == "4.5.6"


class TestDescribeTasks:
    """Tests for describe_tasks()."""

    def test_plan(self, catalog_data):
        tasks = get_tasks("claude", None, catalog_data)
        plan = describe_tasks(tasks, {"wrapper": True, "agents-md": False}, "claude", None)
        assert plan == [("AI Tool Wrapper", ["Copy claude.md -> CLAUDE.md from assets/wrappers/ to ."])]
