"""lullabot-project config - Show what is installed in the current project."""

import json
import sys
from pathlib import Path
from typing import Dict

import click
from rich.console import Console
from rich.table import Table

from lullabot_project.commands.helpers import print_error
from lullabot_project.core.catalog import get_tasks, load_catalog
from lullabot_project.core.settings import Settings
from lullabot_project.core.state import ProjectState, StateManager
from lullabot_project.errors import ConfigurationError, LullabotProjectError
from lullabot_project.log import configure_logging

console = Console()


def state_to_json(state: ProjectState) -> dict:
    return {
        "tool": state.tool,
        "project": state.project_type,
        "toolVersion": state.installation.tool_version,
        "taskPreferences": dict(state.task_preferences),
        "files": [f.to_dict() for f in state.files],
        "packages": {name: info.to_dict() for name, info in state.packages.items()},
    }


def _task_names(state: ProjectState, settings: Settings) -> Dict[str, str]:
    """Display names for the recorded task ids, when the catalog knows them."""
    if not state.tool:
        return {}
    try:
        catalog = load_catalog(settings.catalog_path)
        tasks = get_tasks(state.tool, state.project_type, catalog)
    except ConfigurationError:
        return {}
    return {task_id: task.get("name") or task_id for task_id, task in tasks.items()}


@click.command("config")
@click.option("--verbose", "-v", is_flag=True, help="List every installed file and package")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--check-updates", is_flag=True, help="Compare the recorded version with this one")
def config_cmd(verbose: bool, as_json: bool, check_updates: bool):
    """Show the recorded configuration of the current project.

    \b
    Examples:
      lullabot-project config
      lullabot-project config -v
      lullabot-project config --json
    """
    configure_logging(verbose)
    settings = Settings.from_env()

    try:
        state = StateManager(Path.cwd(), settings.tool_version).load()
    except LullabotProjectError as e:
        print_error("Config display failed", e, verbose)
        sys.exit(1)

    if state is None:
        console.print("[yellow]No configuration found. Run 'lullabot-project init' first.[/]")
        return

    if as_json:
        click.echo(json.dumps(state_to_json(state), indent=2))
        return

    display_config(state, _task_names(state, settings), verbose)

    if check_updates:
        _check_for_updates(state, settings.tool_version)


def display_config(state: ProjectState, names: Dict[str, str], verbose: bool) -> None:
    table = Table(title="Current Configuration", show_header=False)
    table.add_column("Setting", style="bold")
    table.add_column("Value")

    table.add_row("Tool", state.tool or "[dim]Not specified[/]")
    table.add_row(
        "Project type",
        state.project_type or "[dim]None (project-specific tasks disabled)[/]",
    )
    table.add_row("Tool version", state.installation.tool_version)
    table.add_row("Created", state.installation.created)
    table.add_row("Updated", state.installation.updated)

    enabled = [
        names.get(task_id, task_id)
        for task_id, on in state.task_preferences.items()
        if on
    ]
    table.add_row("Enabled tasks", ", ".join(enabled) if enabled else "[dim]None[/]")
    table.add_row("Created files", str(len(state.files)) if state.files else "[dim]None[/]")
    table.add_row(
        "Installed packages",
        str(len(state.packages)) if state.packages else "[dim]None[/]",
    )
    console.print(table)

    if verbose and state.files:
        console.print("\n[bold]Files:[/]")
        for tracked in state.files:
            note = " (pre-existing)" if tracked.pre_existing else ""
            console.print(f"  • {tracked.path}{note}", markup=False, highlight=False)

    if verbose and state.packages:
        console.print("\n[bold]Packages:[/]")
        for name, info in state.packages.items():
            line = f"  • {name}@{info.version}"
            if info.error:
                line += f" ({info.error})"
            console.print(line, markup=False, highlight=False)


def _check_for_updates(state: ProjectState, running_version: str) -> None:
    recorded = state.installation.tool_version
    console.print("\n[blue]Checking for updates...[/]")
    if recorded == running_version:
        console.print("[green]✓[/] You have the latest version!")
    else:
        console.print(f"[yellow]Update available: {recorded} → {running_version}[/]", highlight=False)
        console.print("Run [cyan]lullabot-project update[/] to apply it.")
