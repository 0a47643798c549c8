"""The tool/project catalog.

The catalog is a YAML document with three sections::

    shared_tasks:   # reusable task templates, keyed by name
    tools:          # AI assistants; each has a name and tasks
    projects:       # project types; each has a name, validation and tasks

It is loaded once per command and validated eagerly, so a broken
reference fails before anything is written.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from lullabot_project.core.resolver import (
    DirectRef,
    ExtendsRef,
    lookup_shared_task,
    merge_task,
    parse_task_ref,
    resolve_task_config,
)
from lullabot_project.core.validation import (
    parse_step,
    validate_shared_task_references,
    validate_shared_tasks,
    validate_step_config,
    validate_task_config,
)
from lullabot_project.errors import ConfigurationError, ProjectValidationError
from lullabot_project.tasks import MULTI_STEP

logger = logging.getLogger(__name__)

TASK_SOURCE_TOOL = "tool"
TASK_SOURCE_PROJECT = "project"


# =============================================================================
# Loading and validation
# =============================================================================

def load_catalog(path: Path) -> Dict[str, Any]:
    """Read and validate the catalog.

    Raises:
        ConfigurationError: unreadable, unparseable or invalid catalog
    """
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load configuration: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Failed to load configuration: {path} is not a mapping")

    data.setdefault("shared_tasks", {})
    data.setdefault("tools", {})
    data.setdefault("projects", {})
    validate_catalog(data)
    logger.debug(
        "Loaded catalog %s (%d tools, %d projects, %d shared tasks)",
        path, len(data["tools"]), len(data["projects"]), len(data["shared_tasks"]),
    )
    return data


def _template(entry: Any, shared_tasks: Dict[str, Any]) -> Dict[str, Any]:
    """Merged but unsubstituted task for validation."""
    ref = parse_task_ref(entry)
    if isinstance(ref, DirectRef):
        return lookup_shared_task(ref.name, shared_tasks)
    if isinstance(ref, ExtendsRef):
        return merge_task(lookup_shared_task(ref.name, shared_tasks), ref.overrides)
    return dict(ref.definition)


def validate_catalog(catalog: Dict[str, Any]) -> bool:
    """Validate shared tasks, every reference, and every task definition.

    Raises:
        ConfigurationError: the first problem found
    """
    shared_tasks = catalog.get("shared_tasks") or {}
    validate_shared_tasks(shared_tasks)
    validate_shared_task_references(catalog)

    for section in ("tools", "projects"):
        for owner, definition in (catalog.get(section) or {}).items():
            for task_id, entry in ((definition or {}).get("tasks") or {}).items():
                task = _template(entry, shared_tasks)
                validate_task_config(task, task_id)
                if task.get("type") == MULTI_STEP:
                    for index, step in enumerate(task.get("steps") or [], start=1):
                        step_name, reference = parse_step(step, index)
                        validate_step_config(_template(reference, shared_tasks), step_name)
    return True


# =============================================================================
# Lookups
# =============================================================================

def available_tools(catalog: Dict[str, Any]) -> List[str]:
    return list((catalog.get("tools") or {}).keys())


def available_projects(catalog: Dict[str, Any]) -> List[str]:
    return list((catalog.get("projects") or {}).keys())


def get_tool_settings(tool: str, catalog: Dict[str, Any]) -> Dict[str, Any]:
    """Raises ConfigurationError for an unknown tool."""
    settings = (catalog.get("tools") or {}).get(tool)
    if settings is None:
        raise ConfigurationError(
            f"Tool configuration not found for: {tool}. "
            f"Available tools: {', '.join(available_tools(catalog))}"
        )
    return settings


def get_project_settings(project_type: str, catalog: Dict[str, Any]) -> Dict[str, Any]:
    """Raises ConfigurationError for an unknown project type."""
    settings = (catalog.get("projects") or {}).get(project_type)
    if settings is None:
        raise ConfigurationError(
            f"Project configuration not found for: {project_type}. "
            f"Available projects: {', '.join(available_projects(catalog))}"
        )
    return settings


def get_tasks(
    tool: str,
    project_type: Optional[str],
    catalog: Dict[str, Any],
) -> Dict[str, Dict[str, Any]]:
    """Resolved tasks for a tool and (optional) project type, in catalog order.

    Tool tasks come first, then project tasks. Each task carries its ``id``
    and ``taskSource``. Tasks marked ``requires-project`` are dropped when
    no project is selected.
    """
    shared_tasks = catalog.get("shared_tasks") or {}
    sources: List[Tuple[str, Dict[str, Any]]] = [
        (TASK_SOURCE_TOOL, get_tool_settings(tool, catalog).get("tasks") or {}),
    ]
    if project_type:
        sources.append(
            (TASK_SOURCE_PROJECT, get_project_settings(project_type, catalog).get("tasks") or {})
        )

    tasks: Dict[str, Dict[str, Any]] = {}
    for task_source, entries in sources:
        for task_id, entry in entries.items():
            task = resolve_task_config(entry, shared_tasks, tool, project_type)
            if task.get("requires-project") and not project_type:
                logger.debug("Skipping %s: requires a project", task_id)
                continue
            task["id"] = task_id
            task["taskSource"] = task_source
            tasks[task_id] = task
    return tasks


# =============================================================================
# Project validation
# =============================================================================

def validate_project(
    project_type: Optional[str],
    tool: str,
    catalog: Dict[str, Any],
    project_root: Optional[Path] = None,
) -> List[str]:
    """Check the project root looks like ``project_type``.

    Returns:
        Warnings about missing optional files

    Raises:
        ConfigurationError: unknown tool/project or no validation configured
        ProjectValidationError: required files or content missing
    """
    if not project_type:
        logger.debug("No project selected - skipping project validation")
        return []

    get_tool_settings(tool, catalog)
    rules = get_project_settings(project_type, catalog).get("validation")
    if rules is None:
        raise ConfigurationError(f"Project validation not configured for {project_type}")

    root = Path(project_root or Path.cwd())
    issues = []

    for name in rules.get("requiredFiles") or []:
        if not (root / name).exists():
            issues.append(f"Missing required file: {name}")

    for name, expected in (rules.get("requiredContent") or {}).items():
        path = root / name
        if not path.exists():
            issues.append(f"Cannot check content in missing file: {name}")
            continue
        if expected not in path.read_text(encoding="utf-8", errors="replace"):
            issues.append(f"Required content not found in {name}: {expected}")

    warnings = [
        f"Optional file not found: {name}"
        for name in rules.get("optionalFiles") or []
        if not (root / name).exists()
    ]

    if issues:
        raise ProjectValidationError(
            f"Project validation failed. This doesn't appear to be a valid {project_type} project.",
            issues=issues,
        )
    return warnings
