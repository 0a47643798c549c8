"""Core modules for lullabot-project.

This package contains the pieces every command builds on:
- settings: where the catalog and assets live
- state: the .lullabot-project.yml state file
- tracking: installed-file hashes and change detection
- resolver: shared-task references, extends and substitution
- validation / catalog: catalog loading, checks and task lookup

validation and catalog depend on the task registry and are imported from
their modules directly.
"""

from lullabot_project.core.settings import Settings

from lullabot_project.core.state import (
    STATE_FILE,
    InstallationInfo,
    PackageInfo,
    ProjectInfo,
    ProjectState,
    StateManager,
)

from lullabot_project.core.tracking import (
    ChangedFile,
    FileTracker,
    TrackedFile,
    calculate_file_hash,
    check_file_changes,
    track_installed_file,
)

from lullabot_project.core.resolver import (
    merge_task,
    parse_task_ref,
    resolve_task_config,
)

__all__ = [
    "Settings",
    "STATE_FILE",
    "InstallationInfo",
    "PackageInfo",
    "ProjectInfo",
    "ProjectState",
    "StateManager",
    "ChangedFile",
    "FileTracker",
    "TrackedFile",
    "calculate_file_hash",
    "check_file_changes",
    "track_installed_file",
    "merge_task",
    "parse_task_ref",
    "resolve_task_config",
]
