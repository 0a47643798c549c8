"""lullabot-project update - Re-run the recorded setup with the current version."""

import logging
import sys
from pathlib import Path
from typing import Dict, Optional, Tuple

import click
from rich.console import Console
from rich.panel import Panel

from lullabot_project.commands.helpers import (
    DRY_RUN_NOTE,
    print_error,
    print_outcomes,
    print_project_line,
    print_task_plan,
    warn_unknown_tasks,
)
from lullabot_project.core.catalog import get_tasks, load_catalog
from lullabot_project.core.settings import Settings
from lullabot_project.core.state import ProjectInfo, ProjectState, StateManager
from lullabot_project.errors import LullabotProjectError, StateFileError
from lullabot_project.git.remote import RepositoryCache
from lullabot_project.log import configure_logging
from lullabot_project.prompts import (
    confirm_file_overwrite,
    get_task_preferences,
    parse_task_list,
    select_project,
    select_tool,
)
from lullabot_project.runner import describe_tasks, run_tasks
from lullabot_project.tasks.base import TaskContext

logger = logging.getLogger(__name__)

console = Console()

NOT_INITIALIZED = "No existing configuration found. Run 'lullabot-project init' first."


def is_update_needed(state: ProjectState, running_version: str) -> bool:
    """An update is due whenever the recorded version differs from ours."""
    recorded = state.installation.tool_version
    logger.debug("Recorded tool version: %s, running: %s", recorded, running_version)
    return recorded != running_version


def _load_state(manager: StateManager, force: bool) -> Tuple[ProjectState, bool]:
    """Recorded state, and whether it had to be recreated.

    With ``force`` a corrupt file is replaced by a blank state; the tool and
    project are then asked for again.
    """
    try:
        state = manager.load()
    except StateFileError as e:
        if not force:
            raise
        console.print(f"[yellow]⚠[/] {e}", highlight=False)
        console.print("[yellow]Recreating configuration (--force)[/]")
        return ProjectState(project=ProjectInfo()), True

    if state is None:
        raise StateFileError(NOT_INITIALIZED)
    return state, False


@click.command("update")
@click.option("--tool", "-t", help="Override the recorded tool")
@click.option("--project", "-p", help="Override the recorded project type ('none' for no project)")
@click.option("--tasks", "only_tasks", help="Only run these tasks (comma-separated)")
@click.option("--skip-tasks", help="Skip these tasks (comma-separated)")
@click.option("--all-tasks", is_flag=True, help="Run every task without prompting")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--dry-run", is_flag=True, help="Show what would be updated without doing it")
@click.option("--force", "-F", is_flag=True, help="Update even when up to date; recreate a corrupt configuration")
def update_cmd(
    tool: Optional[str],
    project: Optional[str],
    only_tasks: Optional[str],
    skip_tasks: Optional[str],
    all_tasks: bool,
    verbose: bool,
    dry_run: bool,
    force: bool,
):
    """Bring an existing setup up to date.

    Re-runs the enabled tasks when the recorded tool version differs from
    the running one (or with --force). Files you edited since they were
    installed are listed and only overwritten after confirmation.

    \b
    Examples:
      lullabot-project update
      lullabot-project update --force
      lullabot-project update --dry-run
    """
    configure_logging(verbose)
    settings = Settings.from_env()
    cwd = Path.cwd()

    console.print(Panel.fit(
        f"[bold blue]lullabot-project update[/] - Updating [cyan]{cwd.name}[/]",
        border_style="blue"
    ))

    repositories = RepositoryCache()
    try:
        manager = StateManager(cwd, settings.tool_version)
        state, recreate = _load_state(manager, force)

        if not is_update_needed(state, settings.tool_version) and not force:
            console.print("[green]✓[/] Your setup is already up to date!")
            return

        catalog = load_catalog(settings.catalog_path)
        tool = select_tool(catalog, tool or state.tool)
        if project is not None or recreate:
            project_type = select_project(catalog, project)
        else:
            project_type = state.project_type
        tasks = get_tasks(tool, project_type, catalog)

        include = parse_task_list(only_tasks)
        skip = parse_task_list(skip_tasks)
        if all_tasks or include or skip or recreate:
            warn_unknown_tasks(include + skip, tasks)
            preferences = get_task_preferences(tasks, all_tasks, include, skip)
        else:
            preferences = _recorded_preferences(state, tasks)

        context = TaskContext.for_project(
            cwd,
            settings=settings,
            shared_tasks=catalog["shared_tasks"],
            repositories=repositories,
            previous_files=state.files,
        )
        changed = context.tracker.changes(state.files)

        if dry_run:
            _show_dry_run(state, tool, project_type, tasks, preferences, changed, force, catalog)
            return

        if changed and not confirm_file_overwrite(changed):
            console.print("[blue]Update cancelled.[/]")
            return

        # The tracked file list is rebuilt from scratch
        report = run_tasks(tasks, preferences, tool, project_type, context, verbose)

        packages = dict(state.packages)
        packages.update(report.packages)
        new_state = ProjectState(
            project=ProjectInfo(type=project_type, tool=tool),
            task_preferences=preferences,
            installation=state.installation,
            files=report.files,
            packages=packages,
        )
        if recreate:
            manager.create(new_state)
        else:
            manager.update(new_state)

        console.print("\n[green]✓[/] Update complete!")
        print_outcomes(report)

    except LullabotProjectError as e:
        print_error("Update failed", e, verbose)
        sys.exit(1)
    finally:
        repositories.cleanup()


def _recorded_preferences(state: ProjectState, tasks: Dict[str, dict]) -> Dict[str, bool]:
    """Stored preferences for the tasks that still exist; new tasks stay off."""
    return {task_id: state.task_preferences.get(task_id, False) for task_id in tasks}


def _show_dry_run(state, tool, project_type, tasks, preferences, changed, force, catalog) -> None:
    console.print("\n[bold blue]DRY RUN[/] - What would be updated:")
    console.print(f"  Recorded tool version: [cyan]{state.installation.tool_version}[/]", highlight=False)
    console.print(f"  Force update: {'[yellow]Yes[/]' if force else '[dim]No[/]'}")
    console.print(f"  Tool: [cyan]{tool}[/]")
    print_project_line(project_type)

    if changed:
        console.print("\n[yellow]Modified files that would need confirmation:[/]")
        for item in changed:
            console.print(f"  • {item.path}", markup=False, highlight=False)

    console.print("\n[bold]Actions:[/]")
    context = TaskContext.for_project(
        Path.cwd(), shared_tasks=catalog["shared_tasks"], previous_files=state.files
    )
    print_task_plan(describe_tasks(tasks, preferences, tool, project_type, context))
    console.print("  • Update .lullabot-project.yml")

    console.print(f"\n{DRY_RUN_NOTE}")
