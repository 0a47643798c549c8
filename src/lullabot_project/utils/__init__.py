"""Pure helpers shared by the task executors."""

from lullabot_project.utils.variables import (
    SUPPORTED_VARIABLES,
    substitute_variables,
    validate_task_variables,
)

from lullabot_project.utils.patterns import (
    expand_patterns,
    is_glob_pattern,
    is_regex_pattern,
    list_files,
    validate_patterns,
)

from lullabot_project.utils.filters import (
    FILTER_TYPES,
    FilterOutcome,
    process_content,
    should_process_file,
    validate_filter_config,
)

__all__ = [
    "SUPPORTED_VARIABLES",
    "substitute_variables",
    "validate_task_variables",
    "expand_patterns",
    "is_glob_pattern",
    "is_regex_pattern",
    "list_files",
    "validate_patterns",
    "FILTER_TYPES",
    "FilterOutcome",
    "process_content",
    "should_process_file",
    "validate_filter_config",
]
