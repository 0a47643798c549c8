"""Task executors, one module per task type.

The registry is a closed set; adding a task type means adding a module
here and an entry in TASK_TYPES.
"""

import importlib
from typing import Any, Callable, Dict, List, Optional

from lullabot_project.errors import ConfigurationError
from lullabot_project.tasks.base import TaskContext, TaskResult, merge_files

COPY_FILES = "copy-files"
REMOTE_COPY_FILES = "remote-copy-files"
PACKAGE_INSTALL = "package-install"
AGENTS_MD = "agents-md"
MULTI_STEP = "multi-step"

TASK_TYPES = {
    COPY_FILES: "lullabot_project.tasks.copy_files",
    REMOTE_COPY_FILES: "lullabot_project.tasks.remote_copy_files",
    PACKAGE_INSTALL: "lullabot_project.tasks.package_install",
    AGENTS_MD: "lullabot_project.tasks.agents_md",
    MULTI_STEP: "lullabot_project.tasks.multi_step",
}

# Task types whose ``items`` select files to copy
COPY_TASK_TYPES = (COPY_FILES, REMOTE_COPY_FILES)

Executor = Callable[[Dict[str, Any], Optional[str], Optional[str], bool, TaskContext], TaskResult]


def supported_task_types() -> List[str]:
    return list(TASK_TYPES)


def is_task_type_supported(task_type: Any) -> bool:
    return isinstance(task_type, str) and task_type in TASK_TYPES


def _get_module(task_type: str):
    if not is_task_type_supported(task_type):
        raise ConfigurationError(
            f"Unknown task type: {task_type}. "
            f"Supported types: {', '.join(TASK_TYPES)}"
        )
    return importlib.import_module(TASK_TYPES[task_type])


def get_task_executor(task_type: str) -> Executor:
    """Look up the ``execute`` function for a task type.

    Raises:
        ConfigurationError: unknown task type
    """
    return _get_module(task_type).execute


def execute_task(
    task: Dict[str, Any],
    tool: Optional[str],
    project_type: Optional[str],
    verbose: bool,
    context: TaskContext,
) -> TaskResult:
    """Dispatch a resolved task to its executor."""
    return get_task_executor(task.get("type"))(task, tool, project_type, verbose, context)


def describe_task(
    task: Dict[str, Any],
    tool: Optional[str] = None,
    project_type: Optional[str] = None,
    context: Optional[TaskContext] = None,
) -> List[str]:
    """Human-readable actions a task would take; used for dry runs."""
    return _get_module(task.get("type")).describe(task, tool, project_type, context)


__all__ = [
    "COPY_FILES",
    "REMOTE_COPY_FILES",
    "PACKAGE_INSTALL",
    "AGENTS_MD",
    "MULTI_STEP",
    "TASK_TYPES",
    "COPY_TASK_TYPES",
    "TaskContext",
    "TaskResult",
    "merge_files",
    "supported_task_types",
    "is_task_type_supported",
    "get_task_executor",
    "execute_task",
    "describe_task",
]
