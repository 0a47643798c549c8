"""Tests for lullabot_project.git.remote module."""

import pytest

from lullabot_project.errors import TaskExecutionError
from lullabot_project.git.remote import (
    RepositoryCache,
    RepositorySpec,
    validate_repository,
)


class TestRepositorySpec:
    """Tests for RepositorySpec."""

    def test_from_dict_defaults(self):
        spec = RepositorySpec.from_dict({"url": "https://example.com/r"})
        assert spec.key == ("https://example.com/r", "branch", "main")

    def test_numeric_target(self):
        assert RepositorySpec.from_dict({"url": "u", "type": "tag", "target": 1.0}).target == "1.0"


class TestValidateRepository:
    """Tests for validate_repository()."""

    def test_existing_branch_and_tag(self, remote_repo):
        assert validate_repository(RepositorySpec(str(remote_repo), "branch", "main"))
        assert validate_repository(RepositorySpec(str(remote_repo), "tag", "1.0.0"))

    def test_missing_branch(self, remote_repo):
        with pytest.raises(TaskExecutionError, match="Branch 'nope' not found"):
            validate_repository(RepositorySpec(str(remote_repo), "branch", "nope"))

    def test_unreachable(self, tmp_path):
        with pytest.raises(TaskExecutionError, match="Repository not accessible"):
            validate_repository(RepositorySpec(str(tmp_path / "missing")))


class TestRepositoryCache:
    """Tests for RepositoryCache."""

    def test_clones_once(self, remote_repo):
        spec = RepositorySpec(str(remote_repo), "branch", "main")
        with RepositoryCache() as repositories:
            first = repositories.get_or_clone(spec)
            second = repositories.get_or_clone(spec)

            assert first == second
            assert len(repositories) == 1
            assert spec in repositories
            assert (first / "drupal" / "rules" / "drupal.md").exists()

        assert not first.exists()

    def test_failed_clone(self, remote_repo):
        repositories = RepositoryCache()
        with pytest.raises(TaskExecutionError, match="Failed to clone"):
            repositories.get_or_clone(RepositorySpec(str(remote_repo), "branch", "nope"))
        assert len(repositories) == 0

    def test_fallback_to_branch(self, remote_repo):
        with RepositoryCache() as repositories:
            path = repositories.get_or_clone_with_fallback(str(remote_repo), "9.9.9", "main")
            assert (path / "development").is_dir()
            assert RepositorySpec(str(remote_repo), "branch", "main") in repositories

    def test_tag_preferred(self, remote_repo):
        with RepositoryCache() as repositories:
            repositories.get_or_clone_with_fallback(str(remote_repo), "1.0.0", "main")
            assert RepositorySpec(str(remote_repo), "tag", "1.0.0") in repositories
