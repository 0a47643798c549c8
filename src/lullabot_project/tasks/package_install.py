"""package-install: run an install command and record the installed version.

    ai-task-manager:
      type: package-install
      package:
        name: "@e0ipso/ai-task-manager"
        type: npx
        install-command: npx @e0ipso/ai-task-manager init --assistants {tool}
        version-command: npx @e0ipso/ai-task-manager init --version

The install command must succeed. The version probe is best effort: if
it fails the version is recorded as "unknown" together with the error.
"""

import logging
import re
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from lullabot_project.core.state import PackageInfo
from lullabot_project.errors import ConfigurationError, TaskExecutionError
from lullabot_project.tasks.base import TaskContext, TaskResult

logger = logging.getLogger(__name__)

DEFAULT_VERSION_TIMEOUT = 10

LIST_OUTPUT_TYPES = ("npm", "yarn", "pnpm")

# "└── @scope/name@1.2.3" style lines from npm/yarn/pnpm list
LIST_VERSION = re.compile(r"└── (?:@[^@\s/]+/)?[^@\s]+@(\S+)")


def get_default_version_command(name: str, package_type: str) -> str:
    if package_type == "npx":
        return f"npx {name} --version"
    if package_type in LIST_OUTPUT_TYPES:
        return f"{package_type} list {name}"
    return f"{name} --version"


def parse_version_from_output(output: Optional[str], package_type: str) -> str:
    """Pull a version out of a probe's output ("unknown" if impossible)."""
    if not output or not output.strip():
        return "unknown"
    if package_type in LIST_OUTPUT_TYPES:
        match = LIST_VERSION.search(output)
        return match.group(1) if match else "unknown"
    return output.strip()


def get_package_version(
    package: Union[str, Dict[str, Any]],
    cwd: Optional[Path] = None,
    timeout: int = DEFAULT_VERSION_TIMEOUT,
) -> PackageInfo:
    """Run the version probe for ``package``; never raises."""
    if isinstance(package, str):
        package = {"name": package, "type": "npx"}

    name = package["name"]
    package_type = package.get("type", "npx")
    command = package.get("version-command") or get_default_version_command(name, package_type)
    logger.debug("Checking version for %s: %s", name, command)

    try:
        result = subprocess.run(
            command,
            shell=True,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return PackageInfo(name=name, error=f"Version check timed out after {timeout}s")
    except OSError as e:
        return PackageInfo(name=name, error=str(e))

    if result.returncode != 0:
        message = (result.stderr or "").strip() or f"exit status {result.returncode}"
        return PackageInfo(name=name, error=f"Command failed: {command}: {message}")

    version = parse_version_from_output(result.stdout, package_type)
    logger.debug("Found version %s for %s", version, name)
    return PackageInfo(name=name, version=version)


def execute(
    task: Dict[str, Any],
    tool: Optional[str],
    project_type: Optional[str],
    verbose: bool,
    context: TaskContext,
) -> TaskResult:
    package = task.get("package")
    if not isinstance(package, dict) or not package.get("install-command"):
        raise ConfigurationError(
            f"package-install task '{task.get('id', '')}' requires package.install-command"
        )

    command = package["install-command"]
    logger.debug("Installing %s: %s", package.get("name"), command)

    try:
        # Verbose runs let the installer talk to the terminal directly
        result = subprocess.run(
            command,
            shell=True,
            cwd=str(context.project_root),
            capture_output=not verbose,
            text=True,
        )
    except OSError as e:
        raise TaskExecutionError(f"Package installation failed: {e}")

    if result.returncode != 0:
        detail = (result.stderr or "").strip() or f"exit status {result.returncode}"
        raise TaskExecutionError(f"Package installation failed: {command}: {detail}")

    package_info = get_package_version(
        package,
        cwd=context.project_root,
        timeout=context.settings.version_timeout,
    )
    if package_info.error and verbose:
        logger.warning("Could not get version for %s: %s", package_info.name, package_info.error)

    return TaskResult(
        output=(result.stdout or "").strip() or "Package installed successfully",
        package_info=package_info,
    )


def describe(
    task: Dict[str, Any],
    tool: Optional[str],
    project_type: Optional[str],
    context: Optional[TaskContext] = None,
) -> List[str]:
    package = task.get("package") or {}
    return [f"Run: {package.get('install-command')}"]
