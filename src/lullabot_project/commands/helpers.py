"""Output and selection helpers shared by the commands."""

import logging
from typing import Dict, List, Optional, Tuple

from rich.console import Console

from lullabot_project.errors import ProjectValidationError
from lullabot_project.runner import RunReport

logger = logging.getLogger(__name__)

console = Console()

DRY_RUN_NOTE = "[yellow]This was a dry run - no changes were made.[/]"


def print_error(title: str, error: Exception, verbose: bool) -> None:
    """Report a failed command; call from inside the ``except`` block."""
    console.print(f"[red]{title}:[/] {error}", highlight=False)
    if isinstance(error, ProjectValidationError):
        for issue in error.issues:
            console.print(f"  • {issue}", markup=False, highlight=False)
    if verbose:
        console.print_exception()


def print_project_line(project_type: Optional[str]) -> None:
    if project_type:
        console.print(f"  Project type: [cyan]{project_type}[/]", highlight=False)
    else:
        console.print("  Project type: [dim]None (project-specific tasks disabled)[/]")


def warn_unknown_tasks(requested: List[str], tasks: Dict[str, dict]) -> None:
    unknown = [name for name in requested if name not in tasks]
    if unknown:
        logger.warning("Ignoring unknown task(s): %s", ", ".join(unknown))


def print_task_plan(plan: List[Tuple[str, List[str]]]) -> None:
    if not plan:
        console.print("  [dim]No tasks selected[/]")
        return
    for name, actions in plan:
        console.print(f"  [cyan]{name}[/]", highlight=False)
        for action in actions:
            console.print(f"    • {action}", markup=False, highlight=False)


def print_outcomes(report: RunReport) -> None:
    if report.successful:
        console.print(f"\n[green]✓[/] Successful tasks: {len(report.successful)}")
        for outcome in report.successful:
            console.print(f"  • {outcome.name}", markup=False, highlight=False)
    if report.failed:
        console.print(f"\n[red]✗[/] Failed tasks: {len(report.failed)}")
        for outcome in report.failed:
            console.print(f"  • {outcome.name}: {outcome.error}", markup=False, highlight=False)
