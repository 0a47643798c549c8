"""Git command-line helpers for lullabot-project.

Remote task sources and packaged assets are fetched with the git command
line; every call goes through run_git so failures surface as GitError.
"""

import os
import subprocess
from pathlib import Path
from typing import Optional

# Timeout for ls-remote and other short git calls (seconds)
DEFAULT_GIT_TIMEOUT = 60


# =============================================================================
# Exceptions
# =============================================================================

class GitError(Exception):
    """Base exception for git calls."""
    pass


class GitNotInstalledError(GitError):
    """No git executable on PATH."""
    pass


class GitTimeoutError(GitError):
    """A git call ran past its timeout."""

    def __init__(self, message: str, timeout: Optional[int]):
        super().__init__(message)
        self.timeout = timeout


class GitCommandError(GitError):
    """A git call exited non-zero."""

    def __init__(self, message: str, returncode: int, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


# =============================================================================
# Core Functions
# =============================================================================

def _git_env() -> dict:
    # Never block on a credential prompt for a private or missing remote
    env = dict(os.environ)
    env["GIT_TERMINAL_PROMPT"] = "0"
    return env


def run_git(
    *args,
    cwd: Optional[Path] = None,
    check: bool = False,
    timeout: Optional[int] = DEFAULT_GIT_TIMEOUT
) -> subprocess.CompletedProcess:
    """Run ``git <args>`` and capture its output.

    Args:
        *args: Arguments after ``git``; converted with str()
        cwd: Working directory (defaults to cwd)
        check: Raise GitCommandError on a non-zero exit
        timeout: Seconds before giving up (None waits indefinitely)

    Raises:
        GitNotInstalledError: git is missing
        GitTimeoutError: the call timed out
        GitCommandError: ``check`` is set and git failed
    """
    command = ["git"] + [str(arg) for arg in args]
    command_line = " ".join(command)

    try:
        result = subprocess.run(
            command,
            cwd=cwd or Path.cwd(),
            capture_output=True,
            text=True,
            timeout=timeout,
            env=_git_env(),
        )
    except FileNotFoundError:
        raise GitNotInstalledError(
            "git was not found on PATH. Remote tasks and asset downloads need it: "
            "https://git-scm.com/downloads"
        )
    except subprocess.TimeoutExpired:
        raise GitTimeoutError(
            f"{command_line} did not finish within {timeout}s",
            timeout=timeout
        )

    if check and result.returncode != 0:
        raise GitCommandError(
            f"{command_line} failed: {result.stderr.strip()}",
            returncode=result.returncode,
            stderr=result.stderr
        )
    return result


def ls_remote(url: str, ref_type: str, target: str) -> str:
    """List the refs on ``url`` matching a branch or tag name.

    Returns:
        Raw ``git ls-remote`` output; empty when the ref does not exist

    Raises:
        GitCommandError: the remote could not be reached
    """
    flag = "--tags" if ref_type == "tag" else "--heads"
    output = run_git("ls-remote", flag, url, target, check=True).stdout
    return output.strip()


def shallow_clone(url: str, ref: str, destination: Path) -> Path:
    """Clone one branch or tag of ``url`` at depth 1 into ``destination``.

    Raises:
        GitCommandError: unknown ref or unreachable remote
    """
    run_git(
        "clone", "--depth", "1", "--single-branch", "--branch", ref, url, str(destination),
        check=True,
        timeout=None,
    )
    return destination
