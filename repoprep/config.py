"""
User-level defaults for repoprep.

The only setting is where dynamic repositories are cloned when an invocation
does not pass a clone path:

    [dirs]
    dynamic_repos = ~/clones

The file is ``repoprep.cfg`` in the user config directory. A missing file, a
missing key or a blank value all mean the system temp directory.
"""

import configparser
import logging
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

APP_NAME = "repoprep"

if platform.system() == "Darwin":
    config_dir = Path("~/Library/Application Support/repoprep").expanduser()
else:
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser(
        "~/.config"
    )
    config_dir = Path(xdg_config_home) / APP_NAME


def get_config_file() -> Path:
    return config_dir / f"{APP_NAME}.cfg"


class ConfigAccessor:
    """Read-only view of a repoprep config file."""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or get_config_file()
        self.config = configparser.ConfigParser()
        if self.config_path.exists():
            self.config.read(self.config_path)
            logger.debug(f"Loaded user configuration from {self.config_path}")

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Value of ``key`` in ``section``, or ``default`` when either is missing."""
        try:
            return self.config[section][key]
        except KeyError:
            return default


config = ConfigAccessor()


def get_dynamic_repos_dir() -> Path:
    """
    Base directory dynamic repositories are cloned into.

    Returns:
        The configured ``[dirs] dynamic_repos`` path with ``~`` expanded, or
        the system temp directory when none is configured.
    """
    configured = config.get("dirs", "dynamic_repos")
    if not configured or not configured.strip():
        return Path(tempfile.gettempdir())

    return Path(configured.strip()).expanduser()
