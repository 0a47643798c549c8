"""Tests for lullabot_project.git.utils module."""

import subprocess

import pytest

from lullabot_project.git.utils import (
    ls_remote,
    run_git,
    shallow_clone,
    GitCommandError,
    GitNotInstalledError,
    GitTimeoutError,
)


class TestRunGit:
    """Tests for run_git()."""

    def test_runs_command(self, git_workspace):
        result = run_git("status", cwd=git_workspace)
        assert result.returncode == 0

    def test_check_raises_on_failure(self, git_workspace):
        with pytest.raises(GitCommandError) as exc_info:
            run_git("checkout", "nonexistent-branch", cwd=git_workspace, check=True)
        assert exc_info.value.returncode != 0

    def test_returns_stdout(self, git_workspace):
        result = run_git("rev-parse", "--git-dir", cwd=git_workspace)
        assert ".git" in result.stdout


class TestRunGitMocked:
    """Tests for run_git() with subprocess.run replaced."""

    def test_git_not_installed(self, monkeypatch):
        def missing(*args, **kwargs):
            raise FileNotFoundError("git")

        monkeypatch.setattr(subprocess, "run", missing)
        with pytest.raises(GitNotInstalledError):
            run_git("status")

    def test_timeout(self, monkeypatch):
        def slow(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, kwargs.get("timeout"))

        monkeypatch.setattr(subprocess, "run", slow)
        with pytest.raises(GitTimeoutError) as exc_info:
            run_git("clone", "x", timeout=5)
        assert exc_info.value.timeout == 5

    def test_arguments_stringified(self, monkeypatch, tmp_path):
        calls = []

        def fake(cmd, **kwargs):
            calls.append(cmd)
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        monkeypatch.setattr(subprocess, "run", fake)
        run_git("clone", tmp_path)
        assert calls == [["git", "clone", str(tmp_path)]]


class TestRemoteHelpers:
    """Tests for ls_remote() and shallow_clone() against a local repo."""

    def test_ls_remote_branch_and_tag(self, remote_repo):
        assert "refs/heads/main" in ls_remote(str(remote_repo), "branch", "main")
        assert "refs/tags/1.0.0" in ls_remote(str(remote_repo), "tag", "1.0.0")

    def test_ls_remote_missing_ref_is_empty(self, remote_repo):
        assert ls_remote(str(remote_repo), "branch", "nope") == ""

    def test_ls_remote_unreachable(self, tmp_path):
        with pytest.raises(GitCommandError):
            ls_remote(str(tmp_path / "missing"), "branch", "main")

    def test_shallow_clone(self, remote_repo, tmp_path):
        destination = shallow_clone(f"file://{remote_repo}", "main", tmp_path / "clone")
        assert (destination / "development" / "rules" / "coding.md").exists()

    def test_shallow_clone_unknown_ref(self, remote_repo, tmp_path):
        with pytest.raises(GitCommandError):
            shallow_clone(str(remote_repo), "nope", tmp_path / "clone")
