"""Shared types for the task executors.

Every executor has the same shape::

    def execute(task, tool, project_type, verbose, context) -> TaskResult

``task`` is an already-resolved mapping; ``context`` carries everything an
executor may need beyond it (project root, tracker, shared tasks, the files
installed so far, the repository cache).
"""

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, TYPE_CHECKING

from lullabot_project.core.settings import Settings
from lullabot_project.core.state import PackageInfo
from lullabot_project.core.tracking import FileTracker, TrackedFile

if TYPE_CHECKING:
    from lullabot_project.git.remote import RepositoryCache


@dataclass
class TaskContext:
    """Collaborators handed to every executor."""
    project_root: Path
    tracker: FileTracker
    settings: Settings = field(default_factory=Settings)
    shared_tasks: Dict[str, Any] = field(default_factory=dict)
    # Files installed by earlier tasks (or steps) in this run
    files: List[TrackedFile] = field(default_factory=list)
    # Files recorded by the previous run, if any
    previous_files: List[TrackedFile] = field(default_factory=list)
    repositories: Optional["RepositoryCache"] = None

    @classmethod
    def for_project(
        cls,
        project_root: Path,
        settings: Optional[Settings] = None,
        shared_tasks: Optional[Dict[str, Any]] = None,
        repositories: Optional["RepositoryCache"] = None,
        previous_files: Optional[List[TrackedFile]] = None,
    ) -> "TaskContext":
        project_root = Path(project_root)
        return cls(
            project_root=project_root,
            tracker=FileTracker(project_root),
            settings=settings or Settings(),
            shared_tasks=dict(shared_tasks or {}),
            previous_files=list(previous_files or []),
            repositories=repositories,
        )

    def with_files(self, extra: Iterable[TrackedFile]) -> "TaskContext":
        """Copy of this context that also sees ``extra`` as installed."""
        return dataclasses.replace(self, files=merge_files(self.files, extra))

    def get_repositories(self) -> "RepositoryCache":
        if self.repositories is None:
            from lullabot_project.git.remote import RepositoryCache
            self.repositories = RepositoryCache()
        return self.repositories


@dataclass
class TaskResult:
    """What an executor reports back."""
    output: str = ""
    files: List[TrackedFile] = field(default_factory=list)
    package_info: Optional[PackageInfo] = None
    step_results: List[Dict[str, Any]] = field(default_factory=list)


def merge_files(existing: Iterable[TrackedFile], extra: Iterable[TrackedFile]) -> List[TrackedFile]:
    """Combine tracked-file lists; a later entry for the same path wins."""
    merged: Dict[str, TrackedFile] = {}
    for tracked in list(existing) + list(extra):
        merged[tracked.path] = tracked
    return list(merged.values())
