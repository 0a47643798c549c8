"""Content filters applied to text files while they are copied.

A copy task may carry a ``filters`` list; each entry is a mapping with a
``type`` and the parameters for that type::

    filters:
      - type: frontmatter-removal
      - type: extract-content
        pattern: "`````(.*?)`````"
        flags: s
        group: 1
      - type: line-range
        start: 1
        end: 40
      - type: remove-lines
        pattern: "^#"

Filters run in order. One that fails is skipped, and one that would turn
non-empty content into nothing is undone; both leave a warning behind.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Pattern, Union

from lullabot_project.utils.patterns import IGNORED_REGEX_FLAGS, REGEX_FLAGS

logger = logging.getLogger(__name__)

FRONTMATTER_REMOVAL = "frontmatter-removal"
EXTRACT_CONTENT = "extract-content"
LINE_RANGE = "line-range"
REMOVE_LINES = "remove-lines"

FILTER_TYPES = (FRONTMATTER_REMOVAL, EXTRACT_CONTENT, LINE_RANGE, REMOVE_LINES)

TEXT_EXTENSIONS = {
    ".md", ".txt", ".yml", ".yaml", ".json", ".js", ".ts", ".py", ".php",
    ".rb", ".go", ".rs", ".java", ".c", ".cpp", ".h", ".hpp",
}

FRONTMATTER = re.compile(r"\A---\n.*?\n---\s*\n?", re.DOTALL)


class FilterError(ValueError):
    """A filter could not be applied."""
    pass


def compile_regex(pattern: str, flags: str = "") -> Pattern:
    """Compile a filter regex using the same flag letters as path patterns."""
    value = 0
    for char in flags or "":
        if char in REGEX_FLAGS:
            value |= REGEX_FLAGS[char]
        elif char not in IGNORED_REGEX_FLAGS:
            raise FilterError(f"Invalid regex pattern: {pattern} - unknown flag '{char}'")
    try:
        return re.compile(pattern, value)
    except re.error as e:
        raise FilterError(f"Invalid regex pattern: {pattern} - {e}")


def remove_frontmatter(content: str) -> str:
    """Drop a leading ``---`` YAML block."""
    return FRONTMATTER.sub("", content, count=1)


def extract_content(content: str, pattern: str, flags: str = "", group: int = 0) -> str:
    """Keep only the first match of ``pattern`` (or one of its groups).

    Content is returned unchanged when nothing matches.
    """
    match = compile_regex(pattern, flags).search(content)
    if not match or group > (match.re.groups or 0):
        return content
    extracted = match.group(group)
    if extracted is None:
        return content
    return extracted.strip()


def extract_line_range(content: str, start: int, end: int) -> str:
    """Keep lines ``start`` to ``end`` (1-based, inclusive)."""
    lines = content.split("\n")
    start_index = max(0, start - 1)
    end_index = min(len(lines), end)
    if start_index >= end_index:
        return ""
    return "\n".join(lines[start_index:end_index])


def remove_lines(content: str, pattern: str, flags: str = "") -> str:
    """Drop every line that ``pattern`` matches."""
    regex = compile_regex(pattern, flags)
    return "\n".join(line for line in content.split("\n") if not regex.search(line))


def validate_filter_config(filters: List[Dict]) -> List[str]:
    """Return a list of problems with ``filters`` (empty when valid)."""
    errors = []
    if not isinstance(filters, list):
        return ["Filters must be a list"]

    for index, config in enumerate(filters, start=1):
        if not isinstance(config, dict):
            errors.append(f"Filter {index}: must be a mapping")
            continue

        filter_type = config.get("type")
        if filter_type not in FILTER_TYPES:
            errors.append(
                f"Filter {index}: Invalid filter type '{filter_type}'. "
                f"Supported types: {', '.join(FILTER_TYPES)}"
            )

        if filter_type in (EXTRACT_CONTENT, REMOVE_LINES) and not config.get("pattern"):
            errors.append(
                f"Filter {index}: Missing required parameter 'pattern' "
                f"for filter type '{filter_type}'"
            )
        elif filter_type == LINE_RANGE:
            start, end = config.get("start"), config.get("end")
            if start is None or end is None:
                errors.append(
                    f"Filter {index}: Missing required parameters 'start' and 'end' "
                    f"for filter type 'line-range'"
                )
            elif not isinstance(start, int) or not isinstance(end, int):
                errors.append(f"Filter {index}: Line range start and end must be integers")
            elif start > end:
                errors.append(
                    f"Filter {index}: Line range start ({start}) must be less than "
                    f"or equal to end ({end})"
                )

        if config.get("pattern"):
            try:
                compile_regex(config["pattern"], config.get("flags", ""))
            except FilterError as e:
                errors.append(f"Filter {index}: {e}")

    return errors


def should_process_file(path: Union[str, Path]) -> bool:
    """True for files with a known text extension."""
    return Path(path).suffix.lower() in TEXT_EXTENSIONS


def apply_filter(content: str, config: Dict) -> str:
    """Apply a single filter mapping to ``content``."""
    filter_type = config.get("type")
    if filter_type == FRONTMATTER_REMOVAL:
        return remove_frontmatter(content)
    if filter_type == EXTRACT_CONTENT:
        return extract_content(
            content, config["pattern"], config.get("flags", ""), config.get("group", 0)
        )
    if filter_type == LINE_RANGE:
        return extract_line_range(content, config["start"], config["end"])
    if filter_type == REMOVE_LINES:
        return remove_lines(content, config["pattern"], config.get("flags", ""))
    raise FilterError(f"Unknown filter type: {filter_type}")


@dataclass
class FilterOutcome:
    """Filtered content plus anything that went wrong on the way."""
    content: str
    applied: int = 0
    warnings: List[str] = field(default_factory=list)


def process_content(content: str, filters: List[Dict]) -> FilterOutcome:
    """Run ``filters`` over ``content`` in order."""
    outcome = FilterOutcome(content=content)

    for index, config in enumerate(filters or [], start=1):
        label = f"Filter {index} ({config.get('type')})"
        before = outcome.content
        try:
            after = apply_filter(before, config)
        except (FilterError, KeyError, TypeError) as e:
            outcome.warnings.append(f"{label} failed: {e}")
            continue

        if not after and before:
            outcome.warnings.append(f"{label} produced empty content, keeping original")
            continue

        logger.debug("%s: %d -> %d characters", label, len(before), len(after))
        outcome.content = after
        outcome.applied += 1

    return outcome
