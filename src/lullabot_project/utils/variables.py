"""Placeholder substitution for task definitions.

Task definitions may mention ``{tool}`` and ``{project-type}`` anywhere in
their string values. Substitution walks lists and mappings recursively,
replaces every occurrence and never touches mapping keys.
"""

import json
import re
from typing import Any, Optional

from lullabot_project.errors import ConfigurationError

SUPPORTED_VARIABLES = ("tool", "project-type")

# Anything that looks like a placeholder, supported or not
VARIABLE_PATTERN = re.compile(r"\{([a-zA-Z][a-zA-Z0-9_-]*)\}")

TOOL_PLACEHOLDER = "{tool}"
PROJECT_PLACEHOLDER = "{project-type}"


def _serialize(task: Any) -> str:
    if isinstance(task, str):
        return task
    return json.dumps(task, default=str)


def _substitute(value: Any, tool: Optional[str], project_type: Optional[str]) -> Any:
    if isinstance(value, str):
        return (
            value
            .replace(TOOL_PLACEHOLDER, tool or "")
            .replace(PROJECT_PLACEHOLDER, project_type or "")
        )
    if isinstance(value, list):
        return [_substitute(item, tool, project_type) for item in value]
    if isinstance(value, dict):
        return {
            key: _substitute(item, tool, project_type)
            for key, item in value.items()
        }
    return value


def substitute_variables(
    task: Any,
    tool: Optional[str] = None,
    project_type: Optional[str] = None,
) -> Any:
    """Return a copy of ``task`` with placeholders replaced.

    A missing project type substitutes the empty string. A missing tool is
    an error when ``{tool}`` occurs anywhere in the task, since there is no
    sensible default for it.

    Raises:
        ConfigurationError: ``{tool}`` present but no tool given
    """
    if tool is None and TOOL_PLACEHOLDER in _serialize(task):
        raise ConfigurationError(
            "Task contains {tool} variables but no tool context is available"
        )
    return _substitute(task, tool, project_type)


def validate_task_variables(task: Any) -> bool:
    """Reject placeholders other than {tool} and {project-type}.

    Raises:
        ConfigurationError: listing every unsupported placeholder found
    """
    found = VARIABLE_PATTERN.findall(_serialize(task))
    unsupported = []
    for name in found:
        if name not in SUPPORTED_VARIABLES and name not in unsupported:
            unsupported.append(name)

    if unsupported:
        raise ConfigurationError(
            "Unsupported variables found in task: "
            + ", ".join("{%s}" % name for name in unsupported)
            + ". Supported variables: " + ", ".join(SUPPORTED_VARIABLES)
        )
    return True
