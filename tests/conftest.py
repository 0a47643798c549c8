"""Shared test fixtures for lullabot-project.

Provides:
- workspace: Empty project directory
- git_workspace: Project directory that is a real git repo
- remote_repo: Local git repository standing in for a remote rule library
- catalog_data: Small catalog mapping exercising every reference form
- assets_root: Installation root holding a small assets/ tree
- catalog_file: The same catalog written to disk
- settings: Settings pointing at assets_root and catalog_file
- context: TaskContext rooted at the workspace
- cli_env: Environment pointing the commands at the test catalog/assets
- cli_runner: Click CliRunner for testing CLI commands
- run_cli: Invoke a command inside the workspace with cli_env applied
- initialized: Workspace after a non-interactive init (AGENTS.md + CLAUDE.md)
"""

import os
import subprocess
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from lullabot_project.core.settings import ENV_ASSETS, ENV_CATALOG, ENV_REPO, Settings
from lullabot_project.tasks.base import TaskContext


def git(*args, cwd):
    subprocess.run(["git", *args], cwd=cwd, capture_output=True, check=True)


def init_repo(path: Path) -> Path:
    """Turn ``path`` into a git repo with one commit on ``main``."""
    git("init", cwd=path)
    git("config", "user.email", "test@test.com", cwd=path)
    git("config", "user.name", "Test User", cwd=path)
    git("add", "-A", cwd=path)
    git("commit", "-m", "Initial commit", cwd=path)
    git("branch", "-M", "main", cwd=path)
    return path


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep LULLABOT_PROJECT_* settings from the real environment out of tests."""
    for name in (ENV_ASSETS, ENV_CATALOG, ENV_REPO):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def workspace(tmp_path):
    """Create an empty project directory.

    Returns a Path to the project root.
    """
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture
def git_workspace(workspace):
    """Project directory that is a real git repo."""
    (workspace / "README.md").write_text("# Test Project\n")
    return init_repo(workspace)


@pytest.fixture
def remote_repo(tmp_path):
    """A local repository laid out like the prompt library.

    development/rules/ holds two Markdown rules, a text file and a nested
    guide; the repo is tagged ``1.0.0``.
    """
    repo = tmp_path / "prompt_library"
    rules = repo / "development" / "rules"
    (rules / "nested").mkdir(parents=True)
    (rules / "coding.md").write_text("# Coding\n")
    (rules / "testing.md").write_text("---\ntitle: Testing\n---\n# Testing\n")
    (rules / "notes.txt").write_text("notes\n")
    (rules / "nested" / "guide.md").write_text("# Guide\n")
    drupal = repo / "drupal" / "rules"
    drupal.mkdir(parents=True)
    (drupal / "drupal.md").write_text("# Drupal\n")

    init_repo(repo)
    git("tag", "1.0.0", cwd=repo)
    return repo


@pytest.fixture
def assets_root(tmp_path):
    """Installation root with a small assets/ tree."""
    root = tmp_path / "install"
    wrappers = root / "assets" / "wrappers"
    wrappers.mkdir(parents=True)
    (wrappers / "claude.md").write_text("# CLAUDE.md\n\n@AGENTS.md\n")
    (wrappers / "gemini.md").write_text("# GEMINI.md\n")
    (root / "assets" / "AGENTS.md").write_text("# Agents\n\nHand-written intro.\n")
    return root


@pytest.fixture
def catalog_data():
    """Catalog with shared, extended and inline tasks (no network access needed)."""
    return {
        "shared_tasks": {
            "agents-md": {
                "name": "AGENTS.md",
                "type": "agents-md",
                "source": "assets/AGENTS.md",
                "target": ".",
                "link-type": "markdown",
            },
            "wrapper": {
                "name": "AI Tool Wrapper",
                "type": "copy-files",
                "source": "assets/wrappers/",
                "target": ".",
            },
            "rules": {
                "name": "Project Rules",
                "type": "remote-copy-files",
                "link": "https://github.com/Lullabot/prompt_library",
                "repository": {
                    "url": "https://github.com/Lullabot/prompt_library",
                    "type": "branch",
                    "target": "main",
                },
                "source": "{project-type}/rules/",
                "target": ".ai/rules",
                "requires-project": True,
            },
        },
        "tools": {
            "claude": {
                "name": "Claude Code",
                "tasks": {
                    "rules": "@shared_tasks.rules",
                    "agents-md": {
                        "extends": "@shared_tasks.agents-md",
                        "link-type": "@",
                    },
                    "wrapper": {
                        "extends": "@shared_tasks.wrapper",
                        "items": {"claude.md": "CLAUDE.md"},
                    },
                },
            },
            "cursor": {
                "name": "Cursor",
                "tasks": {
                    "agents-md": "@shared_tasks.agents-md",
                    "notes": {
                        "name": "Notes for {tool}",
                        "type": "copy-files",
                        "source": "notes/",
                        "target": ".ai/{tool}",
                        "required": True,
                    },
                },
            },
        },
        "projects": {
            "development": {
                "name": "Development",
                "validation": {"requiredFiles": []},
                "tasks": {},
            },
            "drupal": {
                "name": "Drupal",
                "validation": {
                    "requiredFiles": ["composer.json"],
                    "requiredContent": {"composer.json": "drupal/core"},
                    "optionalFiles": ["web/index.php"],
                },
                "tasks": {
                    "agents-md": {
                        "extends": "@shared_tasks.agents-md",
                        "name": "Drupal AGENTS.md",
                    },
                },
            },
        },
    }


@pytest.fixture
def catalog_file(tmp_path, catalog_data):
    path = tmp_path / "catalog.yml"
    path.write_text(yaml.safe_dump(catalog_data, sort_keys=False))
    return path


@pytest.fixture
def settings(assets_root, catalog_file):
    """Settings pointing at the test catalog and assets."""
    return Settings(installation_root=assets_root, catalog_path=catalog_file)


@pytest.fixture
def context(workspace, settings):
    """TaskContext rooted at the workspace."""
    return TaskContext.for_project(workspace, settings=settings)


@pytest.fixture
def cli_env(monkeypatch, assets_root, catalog_file):
    """Point the commands at the test catalog and assets."""
    monkeypatch.setenv(ENV_CATALOG, str(catalog_file))
    monkeypatch.setenv(ENV_ASSETS, str(assets_root))


@pytest.fixture
def cli_runner():
    """Click CliRunner for testing CLI commands."""
    return CliRunner()


def invoke_in(runner, command, args, cwd, input=None):
    """Invoke a click command with ``cwd`` as the working directory."""
    old_cwd = os.getcwd()
    try:
        os.chdir(cwd)
        return runner.invoke(command, args, input=input)
    finally:
        os.chdir(old_cwd)


@pytest.fixture
def run_cli(cli_env, cli_runner, workspace):
    """Call ``run_cli(command, *args, input=None)`` inside the workspace."""
    def run(command, *args, input=None):
        return invoke_in(cli_runner, command, list(args), workspace, input=input)
    return run


@pytest.fixture
def initialized(cli_env, cli_runner, workspace):
    """Workspace after `init -t claude -p none --tasks agents-md,wrapper`."""
    from lullabot_project.commands.init import init_cmd

    result = invoke_in(
        cli_runner, init_cmd,
        ["-t", "claude", "-p", "none", "--tasks", "agents-md,wrapper"],
        workspace,
    )
    assert result.exit_code == 0, result.output
    return workspace
