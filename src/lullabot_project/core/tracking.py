"""Installed-file tracking.

Every file the tool writes is recorded with a SHA-256 of its bytes, so a
later update can tell whether the user has edited it since.
"""

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union

logger = logging.getLogger(__name__)

CHUNK_SIZE = 65536


@dataclass
class TrackedFile:
    """A file the tool installed, relative to the project root."""
    path: str
    original_hash: Optional[str] = None
    pre_existing: bool = False

    def to_dict(self) -> dict:
        data = {"path": self.path, "originalHash": self.original_hash}
        if self.pre_existing:
            data["preExisting"] = True
        return data

    @classmethod
    def from_dict(cls, data: Union[dict, str]) -> "TrackedFile":
        """Read a tracked entry; bare strings come from older state files."""
        if isinstance(data, str):
            return cls(path=data)
        return cls(
            path=data["path"],
            original_hash=data.get("originalHash"),
            pre_existing=bool(data.get("preExisting", False)),
        )


@dataclass
class ChangedFile:
    """A tracked file whose content no longer matches what was installed."""
    path: str
    original_hash: Optional[str]
    current_hash: Optional[str] = None
    error: Optional[str] = None


def calculate_file_hash(path: Path) -> str:
    """SHA-256 hex digest of a file's bytes."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def _relative(path: Union[str, Path], project_root: Path) -> str:
    path = Path(path)
    if path.is_absolute():
        path = path.resolve().relative_to(project_root.resolve())
    return path.as_posix()


def track_installed_file(
    path: Union[str, Path],
    project_root: Path,
    pre_existing: bool = False,
) -> TrackedFile:
    """Hash a freshly written file and return its tracking record."""
    relative = _relative(path, project_root)
    file_hash = calculate_file_hash(project_root / relative)
    logger.debug("Tracking %s (%s)", relative, file_hash[:12])
    return TrackedFile(path=relative, original_hash=file_hash, pre_existing=pre_existing)


def check_file_changes(
    files: Optional[Iterable[TrackedFile]],
    project_root: Path,
) -> List[ChangedFile]:
    """Compare tracked files against the disk.

    Returns only the files that differ. Unreadable or missing files are
    reported with ``current_hash=None`` and the error message. Entries
    without a recorded hash cannot be compared and are skipped.
    """
    changed = []
    for tracked in files or []:
        if not tracked.original_hash:
            continue
        try:
            current = calculate_file_hash(project_root / tracked.path)
        except OSError as e:
            changed.append(ChangedFile(
                path=tracked.path,
                original_hash=tracked.original_hash,
                error=str(e),
            ))
            continue

        if current != tracked.original_hash:
            changed.append(ChangedFile(
                path=tracked.path,
                original_hash=tracked.original_hash,
                current_hash=current,
            ))
    return changed


class FileTracker:
    """Binds tracking to one project root; handed to task executors."""

    def __init__(self, project_root: Path):
        self.project_root = Path(project_root)

    def track(self, path: Union[str, Path], pre_existing: bool = False) -> TrackedFile:
        return track_installed_file(path, self.project_root, pre_existing=pre_existing)

    def changes(self, files: Iterable[TrackedFile]) -> List[ChangedFile]:
        return check_file_changes(files, self.project_root)
