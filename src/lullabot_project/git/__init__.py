"""Git helpers for fetching remote task sources and packaged assets."""

from lullabot_project.git.utils import (
    run_git,
    ls_remote,
    shallow_clone,
    GitError,
    GitNotInstalledError,
    GitTimeoutError,
    GitCommandError,
)

from lullabot_project.git.remote import (
    RepositoryCache,
    RepositorySpec,
    validate_repository,
)

__all__ = [
    "run_git",
    "ls_remote",
    "shallow_clone",
    "GitError",
    "GitNotInstalledError",
    "GitTimeoutError",
    "GitCommandError",
    "RepositoryCache",
    "RepositorySpec",
    "validate_repository",
]
