"""Installation state for lullabot-project.

Everything the tool knows about a project it has set up lives in a single
YAML file at the project root, ``.lullabot-project.yml``::

    project:
      type: drupal
      tool: claude
    features:
      taskPreferences:
        rules: true
    installation:
      created: '2025-01-01T10:00:00'
      updated: '2025-01-01T10:00:00'
      toolVersion: 1.0.0
    files:
      - path: .ai/rules/coding.md
        originalHash: 9f86d0...
    packages:
      '@e0ipso/ai-task-manager':
        name: '@e0ipso/ai-task-manager'
        version: 1.2.3
        lastUpdated: '2025-01-01T10:00:00'

Older flat files (``tool``, ``project``, ``taskPreferences`` and
``toolVersion`` at the top level) are read transparently.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, List

import yaml
from filelock import FileLock

from lullabot_project import __version__
from lullabot_project.core.tracking import TrackedFile
from lullabot_project.errors import StateFileError

logger = logging.getLogger(__name__)

STATE_FILE = ".lullabot-project.yml"


# =============================================================================
# State Data Classes
# =============================================================================

@dataclass
class ProjectInfo:
    """Which tool and project type were selected."""
    type: Optional[str] = None
    tool: Optional[str] = None


@dataclass
class InstallationInfo:
    """When the project was set up, and by which version."""
    created: str = field(default_factory=lambda: datetime.now().isoformat())
    updated: str = field(default_factory=lambda: datetime.now().isoformat())
    tool_version: str = __version__

    def to_dict(self) -> dict:
        return {
            "created": self.created,
            "updated": self.updated,
            "toolVersion": self.tool_version,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "InstallationInfo":
        info = cls()
        info.created = data.get("created", info.created)
        info.updated = data.get("updated", info.updated)
        info.tool_version = str(data.get("toolVersion", info.tool_version))
        return info


@dataclass
class PackageInfo:
    """Version of a package installed by a package-install task."""
    name: str
    version: str = "unknown"
    last_updated: str = field(default_factory=lambda: datetime.now().isoformat())
    error: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "version": self.version,
            "lastUpdated": self.last_updated,
        }
        if self.error:
            data["error"] = self.error
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "PackageInfo":
        return cls(
            name=data.get("name", ""),
            version=str(data.get("version", "unknown")),
            last_updated=data.get("lastUpdated", datetime.now().isoformat()),
            error=data.get("error"),
        )


@dataclass
class ProjectState:
    """Everything recorded about one installation."""
    project: ProjectInfo = field(default_factory=ProjectInfo)
    task_preferences: Dict[str, bool] = field(default_factory=dict)
    installation: InstallationInfo = field(default_factory=InstallationInfo)
    files: List[TrackedFile] = field(default_factory=list)
    packages: Dict[str, PackageInfo] = field(default_factory=dict)

    @property
    def tool(self) -> Optional[str]:
        return self.project.tool

    @property
    def project_type(self) -> Optional[str]:
        return self.project.type

    def to_dict(self) -> dict:
        """Convert to the on-disk YAML shape."""
        return {
            "project": {
                "type": self.project.type,
                "tool": self.project.tool,
            },
            "features": {
                "taskPreferences": dict(self.task_preferences),
            },
            "installation": self.installation.to_dict(),
            "files": [f.to_dict() for f in self.files],
            "packages": {
                k: v.to_dict() for k, v in self.packages.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectState":
        """Create from the on-disk shape, accepting the legacy flat layout."""
        state = cls()

        project = data.get("project")
        if isinstance(project, dict):
            state.project = ProjectInfo(type=project.get("type"), tool=project.get("tool"))
        else:
            # Legacy: project type and tool at the top level
            state.project = ProjectInfo(type=project, tool=data.get("tool"))

        features = data.get("features") or {}
        preferences = features.get("taskPreferences", data.get("taskPreferences")) or {}
        state.task_preferences = {str(k): bool(v) for k, v in preferences.items()}

        installation = data.get("installation")
        if isinstance(installation, dict):
            state.installation = InstallationInfo.from_dict(installation)
        else:
            state.installation = InstallationInfo.from_dict({
                "toolVersion": data.get("toolVersion", "unknown"),
            })

        state.files = [TrackedFile.from_dict(f) for f in data.get("files") or []]

        for name, pkg in (data.get("packages") or {}).items():
            if isinstance(pkg, dict):
                state.packages[name] = PackageInfo.from_dict({"name": name, **pkg})

        return state


# =============================================================================
# State Manager
# =============================================================================

class StateManager:
    """Reads and writes ``.lullabot-project.yml``.

    Provides:
    - load() that tells "not initialized" (None) apart from "corrupt" (error)
    - create()/update() with timestamps and the running tool version
    - Atomic writes under a file lock
    """

    def __init__(self, workspace: Optional[Path] = None, tool_version: str = __version__):
        """Initialize state manager.

        Args:
            workspace: Project root directory (defaults to cwd)
            tool_version: Version recorded on every write
        """
        self.workspace = Path(workspace or Path.cwd())
        self.state_file = self.workspace / STATE_FILE
        self.tool_version = tool_version
        self._lock = FileLock(str(self.state_file) + ".lock", timeout=30)

    def exists(self) -> bool:
        return self.state_file.exists()

    def load(self) -> Optional[ProjectState]:
        """Load state from disk.

        Returns:
            The state, or None when the project was never initialized

        Raises:
            StateFileError: the file exists but cannot be parsed
        """
        if not self.state_file.exists():
            return None

        try:
            data = yaml.safe_load(self.state_file.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise StateFileError(f"Failed to read configuration file: {e}")

        if not isinstance(data, dict):
            raise StateFileError(
                f"Failed to read configuration file: {self.state_file.name} is not a mapping"
            )

        try:
            return ProjectState.from_dict(data)
        except (KeyError, TypeError, AttributeError) as e:
            raise StateFileError(f"Failed to read configuration file: {e}")

    def save(self, state: ProjectState) -> Path:
        """Write state to disk (atomic, under the file lock)."""
        with self._lock:
            fd = None
            tmp_path = None
            try:
                fd, tmp_path = tempfile.mkstemp(
                    dir=str(self.workspace),
                    suffix=".tmp",
                    prefix=".lullabot-project_",
                )
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    fd = None  # os.fdopen takes ownership of fd
                    yaml.safe_dump(state.to_dict(), f, sort_keys=False, allow_unicode=True)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, str(self.state_file))
                tmp_path = None
            except Exception:
                if fd is not None:
                    os.close(fd)
                if tmp_path and os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        self._remove_lock_file()
        logger.debug("Wrote %s", self.state_file)
        return self.state_file

    def create(self, state: ProjectState) -> Path:
        """Record a fresh installation."""
        now = datetime.now().isoformat()
        state.installation.created = now
        state.installation.updated = now
        state.installation.tool_version = self.tool_version
        return self.save(state)

    def update(self, state: ProjectState) -> Path:
        """Replace the recorded installation, keeping its creation time.

        Raises:
            StateFileError: nothing has been recorded yet
        """
        existing = self.load()
        if existing is None:
            raise StateFileError("No existing configuration found. Run 'lullabot-project init' first.")

        state.installation.created = existing.installation.created
        state.installation.updated = datetime.now().isoformat()
        state.installation.tool_version = self.tool_version
        return self.save(state)

    def delete(self) -> bool:
        """Remove the state file. Returns True if something was deleted."""
        removed = False
        with self._lock:
            if self.state_file.exists():
                self.state_file.unlink()
                removed = True
        self._remove_lock_file()
        return removed

    def _remove_lock_file(self) -> None:
        lock_file = Path(self._lock.lock_file)
        try:
            lock_file.unlink()
        except FileNotFoundError:
            pass
        except OSError:
            logger.debug("Could not remove %s", lock_file)
