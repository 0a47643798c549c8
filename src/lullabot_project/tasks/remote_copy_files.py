"""remote-copy-files: copy files out of a branch or tag of another repository.

    rules:
      type: remote-copy-files
      repository:
        url: https://github.com/Lullabot/prompt_library
        type: branch
        target: main
      source: "{project-type}/rules/"
      target: .ai/rules

Without ``items`` only the Markdown files directly inside ``source`` are
copied.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from lullabot_project.core.tracking import TrackedFile
from lullabot_project.errors import ConfigurationError, TaskExecutionError
from lullabot_project.git.remote import RepositorySpec, validate_repository
from lullabot_project.tasks.base import TaskContext, TaskResult
from lullabot_project.tasks.copy_files import (
    check_filters,
    copy_selection,
    ensure_inside,
    select_items,
)
from lullabot_project.utils.variables import substitute_variables

logger = logging.getLogger(__name__)

DEFAULT_ITEMS = ["*.md"]


def copy_files_from_remote(
    checkout: Path,
    source: str,
    target: str,
    context: TaskContext,
    verbose: bool = False,
    items: Any = None,
    filters: Optional[List[Dict[str, Any]]] = None,
) -> List[TrackedFile]:
    """Copy selected files from ``checkout/source`` into ``target``.

    An absent or empty mapping selects the top-level ``*.md`` files; an
    empty list selects nothing.

    Raises:
        TaskExecutionError: ``source`` does not exist in the checkout
    """
    source_dir = Path(checkout) / source
    if not source_dir.exists():
        raise TaskExecutionError(f"Source path not found in repository: {source}")

    if items is None or items == {}:
        selection = select_items(source_dir, DEFAULT_ITEMS, recursive=False)
    else:
        selection = select_items(source_dir, items)

    target_dir = ensure_inside(context.project_root, context.project_root / target)
    return copy_selection(source_dir, target_dir, selection, context, verbose, filters)


def execute(
    task: Dict[str, Any],
    tool: Optional[str],
    project_type: Optional[str],
    verbose: bool,
    context: TaskContext,
) -> TaskResult:
    repository = task.get("repository")
    if not isinstance(repository, dict) or not repository.get("url"):
        raise ConfigurationError(
            f"remote-copy-files task '{task.get('id', '')}' requires a repository url"
        )
    check_filters(task.get("filters"))

    repo = RepositorySpec.from_dict(repository)
    source, target = substitute_variables(
        [task.get("source") or "", task.get("target") or "."], tool, project_type
    )

    logger.debug("Validating %s", repo)
    validate_repository(repo)
    checkout = context.get_repositories().get_or_clone(repo)

    files = copy_files_from_remote(
        checkout,
        source,
        target,
        context,
        verbose=verbose,
        items=task.get("items"),
        filters=task.get("filters"),
    )
    return TaskResult(
        output=f"Copied {len(files)} file(s) from {repo.url} to {target}",
        files=files,
    )


def describe(
    task: Dict[str, Any],
    tool: Optional[str],
    project_type: Optional[str],
    context: Optional[TaskContext] = None,
) -> List[str]:
    repository = task.get("repository") or {}
    return [
        f"Copy {task.get('source') or '.'} from {repository.get('url')} "
        f"({repository.get('type', 'branch')} {repository.get('target', 'main')}) "
        f"to {task.get('target') or '.'}"
    ]
