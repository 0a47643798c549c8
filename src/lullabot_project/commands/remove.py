"""lullabot-project remove - Undo everything lullabot-project installed."""

import logging
import sys
from pathlib import Path
from typing import List, Tuple

import click
from rich.console import Console
from rich.panel import Panel

from lullabot_project.commands.helpers import DRY_RUN_NOTE, print_error
from lullabot_project.core.settings import Settings
from lullabot_project.core.state import STATE_FILE, ProjectState, StateManager
from lullabot_project.core.tracking import TrackedFile
from lullabot_project.errors import LullabotProjectError
from lullabot_project.log import configure_logging
from lullabot_project.prompts import confirm_action
from lullabot_project.tasks.agents_md import AGENTS_MD, remove_agents_md_section

logger = logging.getLogger(__name__)

console = Console()

MAX_PATH_SEPARATORS = 10

CONFIRM_MESSAGE = (
    "Are you sure you want to remove all files and configuration "
    "created by lullabot-project?"
)


def is_path_safe(file_path: str, project_root: Path) -> bool:
    """Only plain relative paths inside the project may be deleted."""
    if not file_path or not file_path.strip():
        return False
    if ".." in file_path:
        return False
    if file_path.count("/") + file_path.count("\\") > MAX_PATH_SEPARATORS:
        return False

    root = Path(project_root).resolve()
    resolved = (root / file_path).resolve()
    return resolved == root or root in resolved.parents


def is_reverted(tracked: TrackedFile) -> bool:
    """A pre-existing AGENTS.md only loses its generated section."""
    return tracked.path == AGENTS_MD and tracked.pre_existing


def plan_removal(state: ProjectState) -> Tuple[List[str], List[str]]:
    """(files to delete, files to revert)."""
    removed = [f.path for f in state.files if not is_reverted(f)]
    reverted = [f.path for f in state.files if is_reverted(f)]
    return removed, reverted


def revert_agents_md(path: Path) -> None:
    content = path.read_text(encoding="utf-8")
    cleaned = remove_agents_md_section(content)
    if cleaned != content:
        path.write_text(cleaned, encoding="utf-8")
        logger.debug("Removed generated section from %s", path)
    else:
        logger.debug("No generated section found in %s", path)


def perform_removal(
    state: ProjectState,
    manager: StateManager,
) -> Tuple[List[str], List[str]]:
    """Delete the state file and tracked files; returns (removed, reverted)."""
    root = manager.workspace
    removed = []
    reverted = []

    if manager.delete():
        logger.debug("Removed %s", STATE_FILE)

    for tracked in state.files:
        if not is_path_safe(tracked.path, root):
            console.print(f"  [yellow]Skipped (unsafe path):[/] {tracked.path}", highlight=False)
            continue

        path = root / tracked.path
        if not path.exists():
            logger.debug("File not found: %s", path)
            continue

        if is_reverted(tracked):
            try:
                revert_agents_md(path)
            except OSError as e:
                console.print(f"  [yellow]Warning: Could not clean {AGENTS_MD}: {e}[/]", highlight=False)
                continue
            reverted.append(tracked.path)
            continue

        try:
            path.unlink()
        except OSError as e:
            console.print(f"  [yellow]Warning: Could not remove {tracked.path}: {e}[/]", highlight=False)
            continue
        logger.debug("Removed %s", path)
        removed.append(tracked.path)

    return removed, reverted


@click.command("remove")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--dry-run", is_flag=True, help="Show what would be removed without doing it")
@click.option("--force", "-f", is_flag=True, help="Remove without asking for confirmation")
def remove_cmd(verbose: bool, dry_run: bool, force: bool):
    """Remove every file and the configuration created by lullabot-project.

    A pre-existing AGENTS.md is kept; only the generated section is removed.

    \b
    Examples:
      lullabot-project remove --dry-run
      lullabot-project remove -f
    """
    configure_logging(verbose)
    settings = Settings.from_env()
    cwd = Path.cwd()

    console.print(Panel.fit(
        f"[bold blue]lullabot-project remove[/] - Cleaning up [cyan]{cwd.name}[/]",
        border_style="blue"
    ))

    try:
        manager = StateManager(cwd, settings.tool_version)
        state = manager.load()
        if state is None:
            console.print("[yellow]No configuration found. Nothing to remove.[/]")
            return

        if dry_run:
            _show_dry_run(state, verbose)
            return

        if not force and not confirm_action(CONFIRM_MESSAGE, default=False):
            console.print("[blue]Removal cancelled.[/]")
            return

        removed, reverted = perform_removal(state, manager)

    except (LullabotProjectError, OSError) as e:
        print_error("Remove failed", e, verbose)
        sys.exit(1)

    _print_summary(removed, reverted)


def _show_dry_run(state: ProjectState, verbose: bool) -> None:
    removed, reverted = plan_removal(state)

    console.print("\n[bold blue]DRY RUN[/] - What would be removed:")
    console.print(f"  Configuration file: [cyan]{STATE_FILE}[/]")
    if removed:
        console.print(f"  Files removed: {len(removed)}")
    if reverted:
        console.print(f"  Files reverted: {len(reverted)}")
    if not removed and not reverted:
        console.print("  Files: [dim]None[/]")

    if verbose:
        for path in removed:
            console.print(f"    - {path}", markup=False, highlight=False)
        for path in reverted:
            console.print(f"    ~ {path}", markup=False, highlight=False)

    console.print(f"\n{DRY_RUN_NOTE}")


def _print_summary(removed: List[str], reverted: List[str]) -> None:
    if removed:
        console.print("\n[green]✓[/] Files removed:")
        for path in removed:
            console.print(f"  • {path}", markup=False, highlight=False)
    if reverted:
        console.print("\n[blue]↺[/] Files reverted:")
        for path in reverted:
            console.print(f"  • {path}", markup=False, highlight=False)
    if not removed and not reverted:
        console.print("[yellow]No files were found to remove or revert.[/]")
