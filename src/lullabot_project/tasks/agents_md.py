"""agents-md: keep a generated section in the project's AGENTS.md.

The section lists every installed file under ``.ai/`` and sits between two
HTML comments. Everything outside those comments belongs to the user and
survives repeated runs untouched.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from lullabot_project.errors import TaskExecutionError
from lullabot_project.tasks.base import TaskContext, TaskResult
from lullabot_project.tasks.copy_files import copy_selection, resolve_source

logger = logging.getLogger(__name__)

AGENTS_MD = "AGENTS.md"
AI_DIR_PREFIX = ".ai/"

SECTION_START = "<!-- Lullabot Project Start -->"
SECTION_END = "<!-- Lullabot Project End -->"

SECTION_PATTERN = re.compile(
    re.escape(SECTION_START) + r".*?" + re.escape(SECTION_END),
    re.DOTALL,
)

LINK_TYPE_AT = "@"
LINK_TYPE_MARKDOWN = "markdown"

SECTION_TEMPLATE = """{start}
## Project-Specific AI Development Files

This project includes the following AI development files. **Please read and include these files in your context when providing assistance:**

{references}

**Instructions for AI Agents:**
- Read each of the above files to understand the project's specific requirements
- Apply the guidelines, standards, and patterns defined in these files
- Reference these files when making recommendations or suggestions
- Ensure all code and suggestions align with the project's established patterns

{end}"""


def generate_comment_section(ai_files: List[str], link_type: str = LINK_TYPE_MARKDOWN) -> str:
    """Build the sentinel-wrapped section for ``ai_files``."""
    if not ai_files:
        return f"{SECTION_START}\n\n{SECTION_END}"

    if link_type == LINK_TYPE_AT:
        references = "\n".join(f"@{path}" for path in ai_files)
    else:
        references = "\n".join(f"- [{path}]({path})" for path in ai_files)

    return SECTION_TEMPLATE.format(start=SECTION_START, references=references, end=SECTION_END)


def remove_agents_md_section(content: str) -> str:
    """Strip every generated section, leaving the user's text."""
    return SECTION_PATTERN.sub("", content).strip()


def merge_agents_md_content(existing: str, section: str) -> str:
    """Replace any generated section in ``existing`` with ``section``."""
    remaining = remove_agents_md_section(existing)
    if remaining:
        return f"{remaining}\n\n{section}"
    return section


def update_agents_md_file(path: Path, ai_files: List[str], link_type: str = LINK_TYPE_MARKDOWN) -> None:
    existing = path.read_text(encoding="utf-8") if path.exists() else ""
    section = generate_comment_section(ai_files, link_type)
    path.write_text(merge_agents_md_content(existing, section), encoding="utf-8")


def collect_ai_files(paths: Iterable[str]) -> List[str]:
    """Installed paths under ``.ai/``, de-duplicated, in order."""
    seen = []
    for path in paths:
        if path.startswith(AI_DIR_PREFIX) and path not in seen:
            seen.append(path)
    return seen


def _was_installed_by_us(context: TaskContext) -> bool:
    for tracked in context.previous_files:
        if tracked.path == AGENTS_MD:
            return not tracked.pre_existing
    return False


def _install_template(task: Dict[str, Any], context: TaskContext, verbose: bool) -> None:
    """Copy the AGENTS.md template, or create an empty file if there is none."""
    agents_md = context.project_root / AGENTS_MD
    source = task.get("source")
    if source:
        try:
            source_path = resolve_source(source, context)
        except TaskExecutionError as e:
            logger.debug("No AGENTS.md template available: %s", e)
            source_path = None

        if source_path is not None and source_path.exists():
            source_dir = source_path.parent if source_path.is_file() else source_path
            name = source_path.name if source_path.is_file() else AGENTS_MD
            copied = copy_selection(
                source_dir, context.project_root, [(name, AGENTS_MD)], context, verbose
            )
            if copied:
                return

    agents_md.write_text("", encoding="utf-8")


def execute(
    task: Dict[str, Any],
    tool: Optional[str],
    project_type: Optional[str],
    verbose: bool,
    context: TaskContext,
) -> TaskResult:
    agents_md = context.project_root / AGENTS_MD
    link_type = task.get("link-type") or LINK_TYPE_MARKDOWN

    existed = agents_md.exists()
    pre_existing = existed and not _was_installed_by_us(context)
    if not existed:
        _install_template(task, context, verbose)

    ai_files = collect_ai_files(tracked.path for tracked in context.files)
    update_agents_md_file(agents_md, ai_files, link_type)
    logger.debug("Updated %s with %d reference(s)", AGENTS_MD, len(ai_files))

    tracked = context.tracker.track(agents_md, pre_existing=pre_existing)
    return TaskResult(
        output=f"Updated {AGENTS_MD} with {len(ai_files)} file reference(s)",
        files=[tracked],
    )


def describe(
    task: Dict[str, Any],
    tool: Optional[str],
    project_type: Optional[str],
    context: Optional[TaskContext] = None,
) -> List[str]:
    return [f"Update {AGENTS_MD} with references to installed {AI_DIR_PREFIX} files"]
