"""Run the enabled tasks of a tool/project selection.

Tasks run one after another in catalog order. Each task sees the files
installed by the tasks before it (agents-md depends on that). A failing
task is reported and the run carries on with the next one.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from rich.console import Console
from tqdm import tqdm

from lullabot_project.core.state import PackageInfo
from lullabot_project.core.tracking import TrackedFile
from lullabot_project.errors import LullabotProjectError, MultiStepError
from lullabot_project.tasks import describe_task, execute_task, merge_files
from lullabot_project.tasks.base import TaskContext

logger = logging.getLogger(__name__)

console = Console()


@dataclass
class TaskOutcome:
    """How one task went."""
    task_id: str
    name: str
    success: bool
    output: str = ""
    error: Optional[str] = None


@dataclass
class RunReport:
    """Everything a run produced, ready to be written to the state file."""
    outcomes: List[TaskOutcome] = field(default_factory=list)
    files: List[TrackedFile] = field(default_factory=list)
    packages: Dict[str, PackageInfo] = field(default_factory=dict)

    @property
    def successful(self) -> List[TaskOutcome]:
        return [o for o in self.outcomes if o.success]

    @property
    def failed(self) -> List[TaskOutcome]:
        return [o for o in self.outcomes if not o.success]


def task_name(task_id: str, task: Dict[str, Any]) -> str:
    return task.get("name") or task_id


def enabled_tasks(
    tasks: Dict[str, Dict[str, Any]],
    preferences: Dict[str, bool],
) -> List[Tuple[str, Dict[str, Any]]]:
    """Tasks switched on in ``preferences``, in catalog order."""
    return [(task_id, task) for task_id, task in tasks.items() if preferences.get(task_id)]


def run_tasks(
    tasks: Dict[str, Dict[str, Any]],
    preferences: Dict[str, bool],
    tool: str,
    project_type: Optional[str],
    context: TaskContext,
    verbose: bool = False,
    show_progress: bool = True,
) -> RunReport:
    """Execute every enabled task and collect files, packages and outcomes."""
    report = RunReport(files=list(context.files))
    selected = enabled_tasks(tasks, preferences)

    with tqdm(selected, desc="Running tasks", unit="task", disable=not show_progress) as pbar:
        for task_id, task in pbar:
            pbar.set_postfix_str(task_id[:30])
            name = task_name(task_id, task)
            task_context = context.with_files(report.files)

            try:
                result = execute_task(task, tool, project_type, verbose, task_context)
            except MultiStepError as e:
                # Steps that succeeded still installed files
                report.files = merge_files(report.files, e.files)
                report.outcomes.append(TaskOutcome(task_id, name, False, error=str(e)))
                console.print(f"[red]✗[/] {name}: Failed - {e}", highlight=False)
                continue
            except (LullabotProjectError, OSError) as e:
                logger.debug("Task %s failed", task_id, exc_info=True)
                report.outcomes.append(TaskOutcome(task_id, name, False, error=str(e)))
                console.print(f"[red]✗[/] {name}: Failed - {e}", highlight=False)
                continue

            report.files = merge_files(report.files, result.files)
            if result.package_info is not None:
                report.packages[result.package_info.name] = result.package_info
            report.outcomes.append(TaskOutcome(task_id, name, True, output=result.output))
            console.print(f"[green]✓[/] {name}: Completed", highlight=False)

    return report


def describe_tasks(
    tasks: Dict[str, Dict[str, Any]],
    preferences: Dict[str, bool],
    tool: str,
    project_type: Optional[str],
    context: Optional[TaskContext] = None,
) -> List[Tuple[str, List[str]]]:
    """(task name, actions) for every enabled task, without side effects."""
    return [
        (task_name(task_id, task), describe_task(task, tool, project_type, context))
        for task_id, task in enabled_tasks(tasks, preferences)
    ]
