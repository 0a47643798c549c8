"""copy-files: copy files from packaged assets or a local directory.

    wrapper:
      type: copy-files
      source: assets/wrappers/
      target: .
      items:
        claude.md: CLAUDE.md

``items`` may be omitted (copy everything), a list of patterns (copy the
matches, keeping their subpaths) or a mapping of plain filenames to new
names. Sources under ``assets/`` come from the installed package, or from
the project repository at the running version when not shipped locally.
"""

import logging
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from lullabot_project.core.tracking import TrackedFile
from lullabot_project.errors import ConfigurationError, TaskExecutionError
from lullabot_project.tasks.base import TaskContext, TaskResult
from lullabot_project.utils.filters import (
    process_content,
    should_process_file,
    validate_filter_config,
)
from lullabot_project.utils.patterns import expand_patterns, list_files
from lullabot_project.utils.variables import substitute_variables

logger = logging.getLogger(__name__)

ASSET_PREFIX = "assets/"

# (path relative to the source directory, path relative to the target directory)
Selection = List[Tuple[str, str]]


# =============================================================================
# Helpers shared with remote-copy-files and agents-md
# =============================================================================

def ensure_inside(project_root: Path, path: Path) -> Path:
    """Resolve ``path`` and refuse anything outside the project root.

    Raises:
        ConfigurationError: the path escapes the project
    """
    root = Path(project_root).resolve()
    resolved = Path(path).resolve()
    if resolved != root and root not in resolved.parents:
        raise ConfigurationError(
            f"Security violation: {path} is outside the project directory"
        )
    return resolved


def check_filters(filters: Optional[List[Dict[str, Any]]]) -> None:
    """Raises ConfigurationError if any filter is misconfigured."""
    if not filters:
        return
    errors = validate_filter_config(filters)
    if errors:
        raise ConfigurationError("Invalid filter configuration: " + "; ".join(errors))


def select_items(source_dir: Path, items: Any, recursive: bool = True) -> Selection:
    """Turn an ``items`` selector into (source, destination) pairs.

    None selects every file. A list is expanded as patterns; a mapping
    renames. Mapped entries are returned even when the source is missing
    so the caller can warn about them.
    """
    if items is None:
        return [(name, name) for name in list_files(source_dir, recursive)]
    if isinstance(items, dict):
        return [(str(src), str(dest)) for src, dest in items.items()]
    return [(name, name) for name in expand_patterns(items, source_dir, recursive)]


def copy_file(
    source: Path,
    destination: Path,
    filters: Optional[List[Dict[str, Any]]] = None,
    verbose: bool = False,
) -> None:
    """Copy one file, running content filters over text files."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    if filters and should_process_file(source):
        try:
            content = source.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            logger.warning("%s is not UTF-8 text, copied without filters: %s", source.name, e)
        else:
            outcome = process_content(content, filters)
            if verbose:
                for warning in outcome.warnings:
                    logger.warning("%s: %s", source.name, warning)
            destination.write_text(outcome.content, encoding="utf-8")
            return

    shutil.copy2(source, destination)


def copy_selection(
    source_dir: Path,
    target_dir: Path,
    selection: Selection,
    context: TaskContext,
    verbose: bool = False,
    filters: Optional[List[Dict[str, Any]]] = None,
) -> List[TrackedFile]:
    """Copy each selected file and track it.

    Missing sources are skipped (with a warning when verbose). The target
    directory is only created once something is actually copied.
    """
    tracked = []
    for source_name, target_name in selection:
        source = source_dir / source_name
        if not source.is_file():
            if verbose:
                logger.warning("Skipping %s: not found in %s", source_name, source_dir)
            continue

        destination = ensure_inside(context.project_root, target_dir / target_name)
        copy_file(source, destination, filters, verbose)
        logger.debug("Copied %s -> %s", source, destination)
        tracked.append(context.tracker.track(destination))
    return tracked


def resolve_source(source: str, context: TaskContext) -> Path:
    """Local path for a task source.

    ``assets/...`` is looked up under the installation root first, then in
    a clone of the project repository (version tag, else the fallback
    branch). Anything else is relative to the project root.
    """
    if source.startswith(ASSET_PREFIX):
        settings = context.settings
        local = Path(settings.installation_root) / source
        if local.exists():
            return local
        logger.debug("%s not packaged locally, fetching from %s", source, settings.repo_url)
        checkout = context.get_repositories().get_or_clone_with_fallback(
            settings.repo_url, settings.tool_version, settings.fallback_branch
        )
        return checkout / source

    path = Path(source)
    return path if path.is_absolute() else context.project_root / path


# =============================================================================
# Executor
# =============================================================================

def execute(
    task: Dict[str, Any],
    tool: Optional[str],
    project_type: Optional[str],
    verbose: bool,
    context: TaskContext,
) -> TaskResult:
    source = task.get("source")
    if not source:
        raise ConfigurationError(f"copy-files task '{task.get('id', '')}' requires a source")
    # Placeholders left over from an unresolved task
    source, target = substitute_variables(
        [source, task.get("target") or "."], tool, project_type
    )
    filters = task.get("filters")
    check_filters(filters)

    source_path = resolve_source(source, context)
    if not source_path.exists():
        raise TaskExecutionError(f"Source directory not found: {source}")

    target_dir = ensure_inside(context.project_root, context.project_root / target)
    items = task.get("items")

    if source_path.is_file():
        # A single-file source; a mapping may still rename it
        name = source_path.name
        renamed = items.get(name, name) if isinstance(items, dict) else name
        source_dir, selection = source_path.parent, [(name, renamed)]
    else:
        source_dir, selection = source_path, select_items(source_path, items)

    files = copy_selection(source_dir, target_dir, selection, context, verbose, filters)
    return TaskResult(
        output=f"Copied {len(files)} file(s) from {source} to {target}",
        files=files,
    )


def describe(
    task: Dict[str, Any],
    tool: Optional[str],
    project_type: Optional[str],
    context: Optional[TaskContext] = None,
) -> List[str]:
    items = task.get("items")
    if isinstance(items, dict):
        what = ", ".join(f"{src} -> {dest}" for src, dest in items.items())
    elif isinstance(items, list):
        what = ", ".join(items) or "nothing"
    else:
        what = "all files"
    return [f"Copy {what} from {task.get('source')} to {task.get('target') or '.'}"]
