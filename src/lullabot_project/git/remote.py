"""Temporary clones of remote repositories.

Clones are shallow and live in ``lullabot-*`` temp directories for the
duration of one command. The same ``(url, type, target)`` is only cloned
once per run; cleanup() removes everything.
"""

import logging
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

from lullabot_project.errors import TaskExecutionError
from lullabot_project.git.utils import GitError, ls_remote, shallow_clone

logger = logging.getLogger(__name__)

TEMP_PREFIX = "lullabot-"


@dataclass(frozen=True)
class RepositorySpec:
    """A branch or tag of a remote repository."""
    url: str
    type: str = "branch"
    target: str = "main"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RepositorySpec":
        return cls(
            url=data["url"],
            type=data.get("type", "branch"),
            target=str(data.get("target", "main")),
        )

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.url, self.type, self.target)

    def __str__(self) -> str:
        return f"{self.url} ({self.type} {self.target})"


def validate_repository(repo: RepositorySpec) -> bool:
    """Check the remote is reachable and the branch/tag exists.

    Raises:
        TaskExecutionError: unreachable remote or missing ref
    """
    try:
        refs = ls_remote(repo.url, repo.type, repo.target)
    except GitError as e:
        raise TaskExecutionError(f"Repository not accessible: {repo.url}. {e}")

    if not refs:
        raise TaskExecutionError(
            f"{repo.type.capitalize()} '{repo.target}' not found in repository {repo.url}"
        )
    return True


class RepositoryCache:
    """Clones keyed by (url, type, target), removed on cleanup().

    Usable as a context manager:

        with RepositoryCache() as repositories:
            path = repositories.get_or_clone(spec)
    """

    def __init__(self):
        self._clones: Dict[Tuple[str, str, str], Path] = {}

    def __len__(self) -> int:
        return len(self._clones)

    def __contains__(self, repo: RepositorySpec) -> bool:
        return repo.key in self._clones

    def get_or_clone(self, repo: RepositorySpec) -> Path:
        """Return a local checkout of ``repo``, cloning on first use.

        Raises:
            TaskExecutionError: the clone failed
        """
        if repo.key in self._clones:
            logger.debug("Reusing clone of %s", repo)
            return self._clones[repo.key]

        destination = Path(tempfile.mkdtemp(prefix=TEMP_PREFIX))
        logger.debug("Cloning %s into %s", repo, destination)
        try:
            shallow_clone(repo.url, repo.target, destination)
        except GitError as e:
            shutil.rmtree(destination, ignore_errors=True)
            raise TaskExecutionError(f"Failed to clone repository {repo}: {e}")

        self._clones[repo.key] = destination
        return destination

    def get_or_clone_with_fallback(self, url: str, tag: str, branch: str) -> Path:
        """Clone ``url`` at ``tag``, or at ``branch`` if the tag is missing."""
        try:
            return self.get_or_clone(RepositorySpec(url, "tag", tag))
        except TaskExecutionError as e:
            logger.warning("Tag %s not available (%s), falling back to branch %s", tag, e, branch)
        return self.get_or_clone(RepositorySpec(url, "branch", branch))

    def cleanup(self) -> None:
        """Remove every clone. Failures are logged, never raised."""
        for key, path in list(self._clones.items()):
            try:
                shutil.rmtree(path)
            except OSError as e:
                logger.warning("Could not remove temporary clone %s: %s", path, e)
            del self._clones[key]

    def __enter__(self) -> "RepositoryCache":
        return self

    def __exit__(self, *exc) -> None:
        self.cleanup()
