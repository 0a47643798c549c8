"""Resolve task references against the catalog's shared tasks.

A task entry under a tool or project takes one of three forms::

    rules: "@shared_tasks.rules"            # direct reference

    agents-md:                               # reference with overrides
      extends: "@shared_tasks.agents-md"
      link-type: "@"

    wrapper:                                 # inline definition
      type: copy-files
      source: assets/wrappers/
      target: .

Every form resolves to a plain task mapping with placeholders substituted.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

from lullabot_project.errors import ConfigurationError
from lullabot_project.utils.variables import substitute_variables

SHARED_TASK_PREFIX = "@shared_tasks."

SHARED_TASK_REFERENCE = re.compile(r"^@shared_tasks\.([a-zA-Z_][a-zA-Z0-9_-]*)$")


# =============================================================================
# Task references
# =============================================================================

@dataclass(frozen=True)
class DirectRef:
    """``"@shared_tasks.<name>"``"""
    name: str


@dataclass(frozen=True)
class ExtendsRef:
    """``{extends: "@shared_tasks.<name>", ...overrides}``"""
    name: str
    overrides: Dict[str, Any] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class InlineRef:
    """A complete task definition."""
    definition: Dict[str, Any] = field(default_factory=dict, hash=False)


TaskRef = Union[DirectRef, ExtendsRef, InlineRef]


def shared_task_name(reference: Any) -> Optional[str]:
    """Return the shared task name in ``reference``, or None if malformed."""
    if not isinstance(reference, str):
        return None
    match = SHARED_TASK_REFERENCE.match(reference)
    return match.group(1) if match else None


def parse_task_ref(entry: Any) -> TaskRef:
    """Classify a raw catalog entry.

    Raises:
        ConfigurationError: the entry is neither a reference nor a mapping
    """
    if isinstance(entry, str):
        name = shared_task_name(entry)
        if name is None:
            raise ConfigurationError(
                f"Invalid shared task reference: {entry}. "
                f"Expected {SHARED_TASK_PREFIX}<name>"
            )
        return DirectRef(name)

    if isinstance(entry, Mapping):
        if "extends" in entry:
            name = shared_task_name(entry["extends"])
            if name is None:
                raise ConfigurationError(
                    f"Invalid extends syntax: {entry['extends']}. "
                    f"Expected {SHARED_TASK_PREFIX}<name>"
                )
            overrides = {k: v for k, v in entry.items() if k != "extends"}
            return ExtendsRef(name, overrides)
        return InlineRef(dict(entry))

    raise ConfigurationError(f"Invalid task configuration: {entry!r}")


# =============================================================================
# Resolution
# =============================================================================

def lookup_shared_task(name: str, shared_tasks: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Fetch a shared task template by name.

    Raises:
        ConfigurationError: no such shared task
    """
    template = (shared_tasks or {}).get(name)
    if template is None:
        raise ConfigurationError(f"Shared task not found: {SHARED_TASK_PREFIX}{name}")
    return dict(template)


def merge_task(template: Mapping[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Shallow merge; override keys win and ``extends`` never survives."""
    merged = dict(template)
    merged.update(overrides)
    merged.pop("extends", None)
    return merged


def resolve_task_config(
    entry: Any,
    shared_tasks: Optional[Mapping[str, Any]],
    tool: Optional[str] = None,
    project_type: Optional[str] = None,
) -> Dict[str, Any]:
    """Turn a catalog entry into a concrete task mapping.

    Args:
        entry: Direct reference, extends mapping or inline definition
        shared_tasks: The catalog's ``shared_tasks`` section
        tool: Selected tool, for ``{tool}``
        project_type: Selected project type, for ``{project-type}``

    Raises:
        ConfigurationError: unknown shared task, malformed reference, or
            ``{tool}`` used without a tool
    """
    ref = parse_task_ref(entry)

    if isinstance(ref, DirectRef):
        task = lookup_shared_task(ref.name, shared_tasks)
    elif isinstance(ref, ExtendsRef):
        task = merge_task(lookup_shared_task(ref.name, shared_tasks), ref.overrides)
    else:
        task = dict(ref.definition)

    return substitute_variables(task, tool, project_type)
