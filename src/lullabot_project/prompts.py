"""Interactive questions asked by the commands.

Every function takes its prompt/confirm callables as arguments (defaulting
to click's) so commands stay scriptable and tests never touch a terminal.
"""

from typing import Any, Callable, Dict, List, Optional

import click
from rich.console import Console
from rich.table import Table

from lullabot_project.core.catalog import available_projects, available_tools
from lullabot_project.core.tracking import ChangedFile
from lullabot_project.errors import ConfigurationError

console = Console()

NO_PROJECT = "none"
NO_PROJECT_LABEL = "None (skip project-specific tasks)"
DEFAULT_TOOL = "cursor"

PromptFn = Callable[..., Any]
ConfirmFn = Callable[..., bool]


def parse_task_list(value: Optional[str]) -> List[str]:
    """Split a comma-separated ``--tasks``/``--skip-tasks`` value."""
    if not value:
        return []
    return [name.strip() for name in value.split(",") if name.strip()]


def terminal_link(url: str, text: str = "Learn more") -> str:
    """OSC 8 hyperlink escape sequence."""
    return f"\x1b]8;;{url}\x1b\\{text}\x1b]8;;\x1b\\"


def format_task_prompt(task: Dict[str, Any]) -> str:
    """The yes/no question for an optional task."""
    message = task.get("prompt") or f"Would you like to run: {task.get('name') or task.get('id')}?"
    if task.get("link"):
        message = f"{message} ({terminal_link(task['link'])})"
    return message


def _show_choices(title: str, rows: List[tuple]) -> None:
    table = Table(title=title, show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Name")
    for key, name in rows:
        table.add_row(key, name)
    console.print(table)


def select_tool(
    catalog: Dict[str, Any],
    tool: Optional[str] = None,
    prompt_fn: PromptFn = click.prompt,
) -> str:
    """Validate ``--tool`` or ask for one.

    Raises:
        ConfigurationError: unknown tool
    """
    tools = available_tools(catalog)
    if tool:
        if tool not in tools:
            raise ConfigurationError(
                f"Unsupported tool: {tool}. Available tools: {', '.join(tools)}"
            )
        return tool

    _show_choices("Available tools", [
        (key, catalog["tools"][key].get("name", key)) for key in tools
    ])
    default = DEFAULT_TOOL if DEFAULT_TOOL in tools else tools[0]
    return prompt_fn(
        "Which tool are you using?",
        type=click.Choice(tools),
        default=default,
    )


def select_project(
    catalog: Dict[str, Any],
    project: Optional[str] = None,
    prompt_fn: PromptFn = click.prompt,
) -> Optional[str]:
    """Validate ``--project`` (``none`` for no project) or ask for one.

    Raises:
        ConfigurationError: unknown project type
    """
    projects = available_projects(catalog)
    if project:
        if project == NO_PROJECT:
            return None
        if project not in projects:
            raise ConfigurationError(
                f"Unsupported project type: {project}. "
                f"Available projects: {', '.join(projects)}"
            )
        return project

    _show_choices("Project types", [(NO_PROJECT, NO_PROJECT_LABEL)] + [
        (key, catalog["projects"][key].get("name", key)) for key in projects
    ])
    answer = prompt_fn(
        "What type of project is this?",
        type=click.Choice([NO_PROJECT] + projects),
        default=NO_PROJECT,
    )
    return None if answer == NO_PROJECT else answer


def get_task_preferences(
    tasks: Dict[str, Dict[str, Any]],
    all_tasks: bool = False,
    include: Optional[List[str]] = None,
    skip: Optional[List[str]] = None,
    confirm_fn: ConfirmFn = click.confirm,
) -> Dict[str, bool]:
    """Decide which tasks run.

    ``all_tasks`` enables everything; ``include`` enables exactly the named
    tasks; otherwise required tasks run, ``skip`` tasks don't, and the rest
    are asked about (default yes).
    """
    if all_tasks:
        return {task_id: True for task_id in tasks}

    if include:
        return {task_id: task_id in include for task_id in tasks}

    skip = skip or []
    preferences = {}
    for task_id, task in tasks.items():
        if task.get("required"):
            preferences[task_id] = True
        elif task_id in skip:
            preferences[task_id] = False
        else:
            preferences[task_id] = bool(confirm_fn(format_task_prompt(task), default=True))
    return preferences


def confirm_action(
    message: str,
    default: bool = False,
    confirm_fn: ConfirmFn = click.confirm,
) -> bool:
    return bool(confirm_fn(message, default=default))


def confirm_file_overwrite(
    changed_files: Optional[List[ChangedFile]],
    confirm_fn: ConfirmFn = click.confirm,
) -> bool:
    """Warn about hand-edited files and ask before overwriting them."""
    if not changed_files:
        return True

    console.print("\n[yellow]⚠️  Warning: The following files have been modified:[/]")
    for changed in changed_files:
        suffix = f" ({changed.error})" if changed.error else ""
        console.print(f"  • {changed.path}{suffix}", markup=False, highlight=False)
    console.print("[yellow]These files will be overwritten with the latest versions.[/]\n")
    return bool(confirm_fn("Continue?", default=False))
