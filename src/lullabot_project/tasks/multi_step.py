"""multi-step: run several tasks in order as one.

    project-setup:
      type: multi-step
      fail-fast: true
      steps:
        - rules: "@shared_tasks.rules"
        - agents:
            extends: "@shared_tasks.agents-md"
            link-type: "@"

Each step sees the files installed by the steps before it. With
``fail-fast`` (the default) the first failing step stops the run;
otherwise every step runs and the failures are reported together.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from lullabot_project.core.resolver import resolve_task_config
from lullabot_project.core.validation import parse_step, validate_step_config
from lullabot_project.errors import LullabotProjectError, MultiStepError, TaskExecutionError
from lullabot_project.tasks import get_task_executor, describe_task
from lullabot_project.tasks.base import TaskContext, TaskResult, merge_files

logger = logging.getLogger(__name__)


def resolve_steps(
    task: Dict[str, Any],
    tool: Optional[str],
    project_type: Optional[str],
    context: Optional[TaskContext],
) -> List[Tuple[str, Dict[str, Any]]]:
    """Resolve and validate every step up front."""
    shared_tasks = context.shared_tasks if context else {}
    steps = []
    for index, step in enumerate(task.get("steps") or [], start=1):
        name, reference = parse_step(step, index)
        resolved = resolve_task_config(reference, shared_tasks, tool, project_type)
        resolved.setdefault("name", name)
        validate_step_config(resolved, name)
        steps.append((name, resolved))
    return steps


def execute(
    task: Dict[str, Any],
    tool: Optional[str],
    project_type: Optional[str],
    verbose: bool,
    context: TaskContext,
) -> TaskResult:
    steps = resolve_steps(task, tool, project_type, context)
    if not steps:
        return TaskResult(output="No steps to execute")

    fail_fast = task.get("fail-fast", True)
    files = []
    step_results = []
    failures = []

    for index, (name, step) in enumerate(steps, start=1):
        logger.debug("Step %d/%d: %s (%s)", index, len(steps), name, step["type"])
        step_context = context.with_files(files)
        try:
            result = get_task_executor(step["type"])(step, tool, project_type, verbose, step_context)
        except (LullabotProjectError, OSError) as e:
            if fail_fast:
                raise TaskExecutionError(f"Failed at step {index} ({name}): {e}")
            logger.debug("Step %s failed: %s", name, e)
            failures.append((name, str(e)))
            step_results.append({"step": name, "success": False, "error": str(e)})
            continue

        files = merge_files(files, result.files)
        step_results.append({"step": name, "success": True, "output": result.output})

    if failures:
        summary = "; ".join(f"Step {name}: {message}" for name, message in failures)
        raise MultiStepError(
            f"Multi-step task completed with errors: {summary}",
            failures=failures,
            files=files,
            step_results=step_results,
        )

    return TaskResult(
        output="Multi-step task completed successfully",
        files=files,
        step_results=step_results,
    )


def describe(
    task: Dict[str, Any],
    tool: Optional[str],
    project_type: Optional[str],
    context: Optional[TaskContext] = None,
) -> List[str]:
    lines = []
    for name, step in resolve_steps(task, tool, project_type, context):
        for line in describe_task(step, tool, project_type, context):
            lines.append(f"{name}: {line}")
    return lines or ["No steps to execute"]
