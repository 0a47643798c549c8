"""Exceptions raised by lullabot-project.

Commands catch LullabotProjectError, report the message and exit non-zero.
Git helpers keep their own GitError family (see lullabot_project.git.utils).
"""

from typing import Any, List, Optional, Tuple


class LullabotProjectError(Exception):
    """Base exception for lullabot-project."""
    pass


class ConfigurationError(LullabotProjectError):
    """Catalog, task definition or selection is invalid."""
    pass


class ProjectValidationError(ConfigurationError):
    """The current directory does not look like the selected project type."""

    def __init__(self, message: str, issues: Optional[List[str]] = None):
        super().__init__(message)
        self.issues = issues or []


class TaskExecutionError(LullabotProjectError):
    """A task failed while running."""
    pass


class MultiStepError(TaskExecutionError):
    """One or more steps of a multi-step task failed.

    Files installed by the steps that did succeed travel with the error so
    the caller can still record them.
    """

    def __init__(
        self,
        message: str,
        failures: Optional[List[Tuple[str, str]]] = None,
        files: Optional[List[Any]] = None,
        step_results: Optional[List[dict]] = None,
    ):
        super().__init__(message)
        self.failures = failures or []
        self.files = files or []
        self.step_results = step_results or []


class StateFileError(LullabotProjectError):
    """The installation state file exists but cannot be read."""
    pass
