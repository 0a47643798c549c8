"""Select files from a directory by literal name, glob or regex.

Three pattern forms are understood:

- ``/body/flags`` -- a regular expression, searched against each relative
  path (flags: ``i`` ignore case, ``m`` multiline, ``s`` dot-all; ``g``,
  ``u`` and ``y`` are accepted and have no effect)
- anything containing ``*``, ``?``, ``[`` or ``{`` -- a glob, anchored at
  the source directory, so ``*.md`` only matches top-level files while
  ``**/*.md`` matches at any depth; ``{a,b}`` alternatives are expanded
- anything else -- an exact relative path
"""

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Pattern

from wcmatch import glob

from lullabot_project.errors import ConfigurationError

logger = logging.getLogger(__name__)

GLOB_CHARS = ("*", "?", "[", "{")

# Case-sensitive, dotfiles included, {a,b} alternatives expanded
GLOB_FLAGS = glob.GLOBSTAR | glob.DOTMATCH | glob.BRACE | glob.CASE

REGEX_SHAPE = re.compile(r"^/(.+)/([a-z]*)$", re.DOTALL)

REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
}
IGNORED_REGEX_FLAGS = "guy"


def is_regex_pattern(pattern: str) -> bool:
    """True if ``pattern`` has the ``/body/flags`` shape."""
    return bool(REGEX_SHAPE.match(pattern))


def is_glob_pattern(pattern: str) -> bool:
    """True if ``pattern`` contains a glob metacharacter."""
    return any(char in pattern for char in GLOB_CHARS)


def parse_regex_pattern(pattern: str) -> Pattern:
    """Compile a ``/body/flags`` pattern.

    Raises:
        ConfigurationError: not in regex form, unknown flag or bad syntax
    """
    match = REGEX_SHAPE.match(pattern)
    if not match:
        raise ConfigurationError(
            f"Invalid regex pattern: {pattern}. Must be in format /pattern/flags"
        )
    body, flag_chars = match.groups()

    flags = 0
    for char in flag_chars:
        if char in REGEX_FLAGS:
            flags |= REGEX_FLAGS[char]
        elif char not in IGNORED_REGEX_FLAGS:
            raise ConfigurationError(
                f"Invalid regex pattern: {pattern}. Unknown flag '{char}'"
            )

    try:
        return re.compile(body, flags)
    except re.error as e:
        raise ConfigurationError(f"Invalid regex pattern: {pattern}. {e}")


def glob_matches(path: str, pattern: str) -> bool:
    """Match a relative file path against a glob.

    ``*`` and ``?`` stay within one path segment; only ``**`` crosses
    directories. Matching a directory does not select the files under it.
    """
    return glob.globmatch(path, pattern.lstrip("/"), flags=GLOB_FLAGS)


def list_files(source_dir: Path, recursive: bool = True) -> List[str]:
    """List regular files under ``source_dir`` as relative POSIX paths.

    Returns an empty list when the directory does not exist.
    """
    source_dir = Path(source_dir)
    if not source_dir.is_dir():
        return []

    candidates = source_dir.rglob("*") if recursive else source_dir.iterdir()
    files = [
        path.relative_to(source_dir).as_posix()
        for path in candidates
        if path.is_file()
    ]
    return sorted(files)


def _check_is_string(pattern) -> None:
    if not isinstance(pattern, str):
        raise ConfigurationError(f"Invalid pattern: {pattern}. Must be a string.")


def expand_patterns(
    patterns: Iterable[str],
    source_dir: Path,
    recursive: bool = True,
) -> List[str]:
    """Resolve patterns to the relative paths of files under ``source_dir``.

    Args:
        patterns: Literal names, globs or ``/regex/flags`` strings
        source_dir: Directory to search
        recursive: Include files in subdirectories

    Returns:
        De-duplicated relative paths, in listing order

    Raises:
        ConfigurationError: a pattern is not a string or is a bad regex
    """
    patterns = list(patterns)
    all_files = list_files(source_dir, recursive)
    matched = set()

    for pattern in patterns:
        _check_is_string(pattern)

        if is_regex_pattern(pattern):
            regex = parse_regex_pattern(pattern)
            matched.update(f for f in all_files if regex.search(f))
        elif is_glob_pattern(pattern):
            matched.update(f for f in all_files if glob_matches(f, pattern))
        elif pattern in all_files:
            matched.add(pattern)

    result = [f for f in all_files if f in matched]
    logger.debug("Patterns %s matched %d file(s) in %s", patterns, len(result), source_dir)
    return result


def validate_patterns(patterns: Optional[Iterable[str]]) -> bool:
    """Check every pattern is a string and every regex compiles.

    Raises:
        ConfigurationError: on the first invalid pattern
    """
    for pattern in patterns or []:
        _check_is_string(pattern)
        if is_regex_pattern(pattern):
            parse_regex_pattern(pattern)
    return True
