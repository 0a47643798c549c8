"""Validation of task definitions and shared-task references."""

import re
from typing import Any, Dict, Mapping, Optional, Tuple

from lullabot_project.core.resolver import SHARED_TASK_REFERENCE, shared_task_name
from lullabot_project.errors import ConfigurationError
from lullabot_project.tasks import (
    COPY_TASK_TYPES,
    MULTI_STEP,
    PACKAGE_INSTALL,
    REMOTE_COPY_FILES,
    TASK_TYPES,
    is_task_type_supported,
)
from lullabot_project.utils.filters import validate_filter_config
from lullabot_project.utils.patterns import GLOB_CHARS, validate_patterns
from lullabot_project.utils.variables import validate_task_variables

URL_PATTERN = re.compile(r"^https?://.+")

REPOSITORY_TYPES = ("branch", "tag")


def validate_url(url: Any) -> bool:
    """True for http(s) URLs."""
    return isinstance(url, str) and bool(URL_PATTERN.match(url))


def validate_shared_task_reference(reference: Any) -> bool:
    """True if ``reference`` is a well-formed ``@shared_tasks.<name>``."""
    return isinstance(reference, str) and bool(SHARED_TASK_REFERENCE.match(reference))


def validate_extends_syntax(value: Any) -> bool:
    return validate_shared_task_reference(value)


def _label(task: Mapping[str, Any], task_id: Optional[str]) -> str:
    return task_id or task.get("id") or task.get("name") or "task"


def validate_items(task_type: str, items: Any) -> None:
    """Check the ``items`` selector of a copy-type task.

    A list selects files by pattern; a mapping renames plain filenames.

    Raises:
        ConfigurationError: bad pattern, wildcard in a rename key, or
            neither list nor mapping
    """
    if items is None:
        return

    if isinstance(items, list):
        try:
            validate_patterns(items)
        except ConfigurationError as e:
            raise ConfigurationError(f"Invalid pattern in {task_type} task: {e}")
        return

    if isinstance(items, dict):
        for source, target in items.items():
            if not isinstance(source, str) or not isinstance(target, str):
                raise ConfigurationError(
                    f"Invalid items in {task_type} task: object keys and values must be strings"
                )
            if any(char in source for char in GLOB_CHARS) or source.startswith("/"):
                raise ConfigurationError(
                    f"Wildcard patterns not supported in object format (renaming): {source}. "
                    f"Use array format for pattern matching."
                )
        return

    raise ConfigurationError(
        f"Invalid items in {task_type} task: must be array or object"
    )


def validate_repository_config(repository: Any) -> None:
    """Check the ``repository`` block of a remote-copy-files task."""
    if not isinstance(repository, dict):
        raise ConfigurationError("remote-copy-files task requires a 'repository' mapping")
    if not repository.get("url"):
        raise ConfigurationError("remote-copy-files repository requires a 'url'")
    if not validate_url(repository["url"]):
        raise ConfigurationError(f"Invalid repository URL: {repository['url']}")
    if repository.get("type") not in REPOSITORY_TYPES:
        raise ConfigurationError(
            f"Invalid repository type: {repository.get('type')}. "
            f"Must be one of: {', '.join(REPOSITORY_TYPES)}"
        )
    if not repository.get("target"):
        raise ConfigurationError(
            "remote-copy-files repository requires a 'target' branch or tag"
        )


def validate_package_config(package: Any) -> None:
    """Check the ``package`` block of a package-install task."""
    if not isinstance(package, dict):
        raise ConfigurationError("package-install task requires a 'package' mapping")
    if not package.get("name"):
        raise ConfigurationError("package-install package requires a 'name'")
    if not package.get("install-command"):
        raise ConfigurationError(
            f"package-install package '{package['name']}' requires an 'install-command'"
        )


def validate_task_config(task: Mapping[str, Any], task_id: Optional[str] = None) -> bool:
    """Structural checks on a single (resolved or template) task.

    Raises:
        ConfigurationError: naming the task and the problem
    """
    if not isinstance(task, Mapping):
        raise ConfigurationError(f"Task '{task_id or '?'}' must be a mapping")

    label = _label(task, task_id)
    task_type = task.get("type")
    if not task_type:
        raise ConfigurationError(f"Task '{label}' is missing a type")
    if not is_task_type_supported(task_type):
        raise ConfigurationError(
            f"Unknown task type: {task_type} (task '{label}'). "
            f"Supported types: {', '.join(TASK_TYPES)}"
        )

    if task_type in COPY_TASK_TYPES:
        validate_items(task_type, task.get("items"))

    if task_type == REMOTE_COPY_FILES:
        validate_repository_config(task.get("repository"))

    if task_type == PACKAGE_INSTALL:
        validate_package_config(task.get("package"))

    if "link" in task and task["link"] is not None and not validate_url(task["link"]):
        raise ConfigurationError(
            f"Invalid link for task '{label}': {task['link']}. Must be an http(s) URL"
        )

    if task.get("filters") is not None:
        errors = validate_filter_config(task["filters"])
        if errors:
            raise ConfigurationError(
                f"Invalid filter configuration for task '{label}': " + "; ".join(errors)
            )

    if task_type == MULTI_STEP and not isinstance(task.get("steps", []), list):
        raise ConfigurationError(f"Multi-step task '{label}' requires a 'steps' list")

    validate_task_variables(task)
    return True


def validate_step_config(step: Mapping[str, Any], step_name: str) -> bool:
    """A resolved multi-step step must be a known, non-nested task type."""
    step_type = step.get("type")
    if not step_type:
        raise ConfigurationError(f"Step '{step_name}' is missing a type")
    if not is_task_type_supported(step_type):
        raise ConfigurationError(f"Step '{step_name}' has unknown task type: {step_type}")
    if step_type == MULTI_STEP:
        raise ConfigurationError(f"Step '{step_name}' cannot be a multi-step task (nesting not allowed)")
    return True


def parse_step(step: Any, index: int) -> Tuple[str, Any]:
    """Split a single-key step mapping into ``(name, reference)``."""
    if not isinstance(step, dict) or len(step) != 1:
        raise ConfigurationError(
            f"Step {index} must be a mapping with exactly one key (the step name)"
        )
    name, reference = next(iter(step.items()))
    return str(name), reference


def validate_shared_tasks(shared_tasks: Any) -> bool:
    """Every shared task must be a complete, valid task template."""
    if shared_tasks is None:
        return True
    if not isinstance(shared_tasks, dict):
        raise ConfigurationError("shared_tasks must be a mapping")

    for name, task in shared_tasks.items():
        if not isinstance(task, dict):
            raise ConfigurationError(f"Shared task '{name}' must be a mapping")
        try:
            validate_task_config(task, name)
        except ConfigurationError as e:
            raise ConfigurationError(f"Invalid shared task '{name}': {e}")
    return True


def _check_reference(entry: Any, shared_tasks: Dict[str, Any], where: str) -> None:
    if isinstance(entry, str):
        if not validate_shared_task_reference(entry):
            raise ConfigurationError(
                f"Invalid shared task reference in {where}: {entry}"
            )
        if shared_task_name(entry) not in shared_tasks:
            raise ConfigurationError(f"Shared task not found in {where}: {entry}")
        return

    if isinstance(entry, dict):
        if "extends" in entry:
            if not validate_extends_syntax(entry["extends"]):
                raise ConfigurationError(
                    f"Invalid extends syntax in {where}: {entry['extends']}"
                )
            if shared_task_name(entry["extends"]) not in shared_tasks:
                raise ConfigurationError(
                    f"Shared task not found in {where}: {entry['extends']}"
                )
        elif not entry.get("type"):
            raise ConfigurationError(f"Task in {where} is missing a type")
        elif not is_task_type_supported(entry["type"]):
            raise ConfigurationError(f"Unknown task type in {where}: {entry['type']}")
        validate_task_variables(entry)
        return

    raise ConfigurationError(f"Invalid task configuration in {where}")


def validate_shared_task_references(catalog: Mapping[str, Any]) -> bool:
    """Check every tool/project task (and multi-step step) reference resolves."""
    shared_tasks = catalog.get("shared_tasks") or {}

    for name, template in shared_tasks.items():
        if isinstance(template, dict) and template.get("type") == MULTI_STEP:
            for index, step in enumerate(template.get("steps") or [], start=1):
                step_name, reference = parse_step(step, index)
                _check_reference(
                    reference, shared_tasks, f"shared task '{name}', step '{step_name}'"
                )

    for section, kind in (("tools", "tool"), ("projects", "project")):
        for owner, definition in (catalog.get(section) or {}).items():
            tasks = (definition or {}).get("tasks") or {}
            if not isinstance(tasks, dict):
                raise ConfigurationError(f"Tasks for {kind} '{owner}' must be a mapping")

            for task_id, entry in tasks.items():
                where = f"{kind} '{owner}', task '{task_id}'"
                _check_reference(entry, shared_tasks, where)

                steps = []
                if isinstance(entry, dict) and entry.get("type") == MULTI_STEP:
                    steps = entry.get("steps") or []
                for index, step in enumerate(steps, start=1):
                    step_name, reference = parse_step(step, index)
                    _check_reference(reference, shared_tasks, f"{where}, step '{step_name}'")

    return True
