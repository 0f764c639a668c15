from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class RemoteDescriptor:
    """A git remote as read from the repository config."""

    name: str
    url: str


@dataclass(frozen=True)
class PreparationResult:
    """Directories handed to the version calculation once preparation succeeded."""

    dot_git_directory: Path
    project_root_directory: Path
