"""Runtime settings for lullabot-project.

Resolved once per command invocation and passed down to the task
executors, so nothing below the CLI has to look at the environment.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from lullabot_project import __version__

# Package directory; holds config/config.yml and assets/
INSTALLATION_ROOT = Path(__file__).resolve().parent.parent

DEFAULT_REPO_URL = "https://github.com/Lullabot/lullabot-project"
DEFAULT_FALLBACK_BRANCH = "main"

ENV_CATALOG = "LULLABOT_PROJECT_CATALOG"
ENV_ASSETS = "LULLABOT_PROJECT_ASSETS"
ENV_REPO = "LULLABOT_PROJECT_REPO"


@dataclass
class Settings:
    """Where the catalog and assets live, and which version is running."""
    installation_root: Path = INSTALLATION_ROOT
    catalog_path: Path = field(default_factory=lambda: INSTALLATION_ROOT / "config" / "config.yml")
    repo_url: str = DEFAULT_REPO_URL
    fallback_branch: str = DEFAULT_FALLBACK_BRANCH
    tool_version: str = __version__
    version_timeout: int = 10  # seconds, package version probes only

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings, honouring LULLABOT_PROJECT_* overrides."""
        settings = cls()
        if os.environ.get(ENV_ASSETS):
            settings.installation_root = Path(os.environ[ENV_ASSETS])
        if os.environ.get(ENV_CATALOG):
            settings.catalog_path = Path(os.environ[ENV_CATALOG])
        if os.environ.get(ENV_REPO):
            settings.repo_url = os.environ[ENV_REPO]
        return settings

