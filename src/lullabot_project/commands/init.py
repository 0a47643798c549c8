"""lullabot-project init - Set up AI assistant files in the current project."""

import logging
import sys
from pathlib import Path
from typing import Optional

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
from lullabot_project.core.catalog import get_tasks, load_catalog, validate_project
from lullabot_project.core.settings import Settings
from lullabot_project.core.state import ProjectInfo, ProjectState, StateManager
from lullabot_project.errors import LullabotProjectError
from lullabot_project.git.remote import RepositoryCache
from lullabot_project.log import configure_logging
from lullabot_project.prompts import (
    get_task_preferences,
    parse_task_list,
    select_project,
    select_tool,
)
from lullabot_project.runner import RunReport, describe_tasks, run_tasks
from lullabot_project.tasks.base import TaskContext

logger = logging.getLogger(__name__)

console = Console()


@click.command("init")
@click.option("--tool", "-t", help="Tool to configure (e.g. claude, cursor)")
@click.option("--project", "-p", help="Project type, or 'none'")
@click.option("--tasks", "only_tasks", help="Only run these tasks (comma-separated)")
@click.option("--skip-tasks", help="Skip these tasks (comma-separated)")
@click.option("--all-tasks", is_flag=True, help="Run every task without prompting")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--skip-validation", is_flag=True, help="Skip project type validation")
@click.option("--dry-run", is_flag=True, help="Show what would be done without doing it")
def init_cmd(
    tool: Optional[str],
    project: Optional[str],
    only_tasks: Optional[str],
    skip_tasks: Optional[str],
    all_tasks: bool,
    verbose: bool,
    skip_validation: bool,
    dry_run: bool,
):
    """Set up AI development files for a tool and project type.

    \b
    Examples:
      lullabot-project init                          # Interactive
      lullabot-project init -t claude -p drupal --all-tasks
      lullabot-project init -t cursor -p none --tasks rules,agents-md
      lullabot-project init --dry-run
    """
    configure_logging(verbose)
    settings = Settings.from_env()
    cwd = Path.cwd()

    console.print(Panel.fit(
        f"[bold blue]lullabot-project init[/] - Setting up [cyan]{cwd.name}[/]",
        border_style="blue"
    ))

    repositories = RepositoryCache()
    try:
        catalog = load_catalog(settings.catalog_path)
        tool = select_tool(catalog, tool)
        project_type = select_project(catalog, project)
        tasks = get_tasks(tool, project_type, catalog)

        include = parse_task_list(only_tasks)
        skip = parse_task_list(skip_tasks)
        warn_unknown_tasks(include + skip, tasks)
        preferences = get_task_preferences(tasks, all_tasks, include, skip)

        if dry_run:
            _show_dry_run(tool, project_type, tasks, preferences, skip_validation, catalog)
            return

        if skip_validation:
            logger.debug("Project validation skipped")
        elif project_type:
            for warning in validate_project(project_type, tool, catalog, cwd):
                console.print(f"[yellow]⚠[/] {warning}", highlight=False)
            console.print("[green]✓[/] Project validation passed")
        else:
            console.print("[dim]Skipping project validation (no project selected)[/]")

        context = TaskContext.for_project(
            cwd,
            settings=settings,
            shared_tasks=catalog["shared_tasks"],
            repositories=repositories,
        )
        report = run_tasks(tasks, preferences, tool, project_type, context, verbose)

        state = ProjectState(
            project=ProjectInfo(type=project_type, tool=tool),
            task_preferences=preferences,
            files=report.files,
            packages=report.packages,
        )
        StateManager(cwd, settings.tool_version).create(state)

        _print_summary(tool, project_type, report)

    except LullabotProjectError as e:
        print_error("Setup failed", e, verbose)
        sys.exit(1)
    finally:
        repositories.cleanup()


def _show_dry_run(tool, project_type, tasks, preferences, skip_validation, catalog) -> None:
    console.print("\n[bold blue]DRY RUN[/] - What would be done:")
    console.print(f"  Tool: [cyan]{tool}[/]")
    print_project_line(project_type)

    console.print("\n[bold]Actions:[/]")
    if not skip_validation:
        if project_type:
            console.print(f"  • Validate project type: {project_type}")
        else:
            console.print("  • Skip project validation (no project selected)")
    context = TaskContext.for_project(Path.cwd(), shared_tasks=catalog["shared_tasks"])
    print_task_plan(describe_tasks(tasks, preferences, tool, project_type, context))
    console.print("  • Write .lullabot-project.yml")

    console.print(f"\n{DRY_RUN_NOTE}")


def _print_summary(tool: str, project_type: Optional[str], report: RunReport) -> None:
    console.print("\n[green]✓[/] Setup complete!")
    console.print(f"  Tool: [cyan]{tool}[/]")
    print_project_line(project_type)
    print_outcomes(report)

    console.print("\n[bold]Next steps:[/]")
    console.print("  1. Review the generated configuration: [cyan].lullabot-project.yml[/]")
    console.print("  2. Check [cyan]lullabot-project config[/] for what was installed")
    console.print("  3. Run [cyan]lullabot-project update[/] after upgrading the tool")
