"""
Thin GitPython adapter used by the preparation components.

Components depend on the ``VersionControlClient`` protocol so that tests can
substitute a fake; ``GitClient`` is the real implementation.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Tuple

from git import Repo
from git.exc import InvalidGitRepositoryError, NoSuchPathError

from repoprep.model.repository import RemoteDescriptor

logger = logging.getLogger(__name__)


class VersionControlClient(Protocol):
    def open(self, path: Path) -> Repo:
        """Open the repository at ``path``. The result is a context manager."""
        ...

    def discover(self, path: Path) -> Tuple[Optional[Path], Optional[Path]]: ...

    def remotes(self, repo: Repo) -> List[RemoteDescriptor]: ...

    def remove_remote(self, repo: Repo, name: str) -> None: ...

    def clone(
        self,
        url: str,
        destination: Path,
        checkout: bool,
        env: Optional[Dict[str, str]] = None,
    ) -> Path: ...


class GitClient:
    """VersionControlClient backed by GitPython and the git executable."""

    def open(self, path: Path) -> Repo:
        """
        Open an existing repository.

        ``path`` may be a working tree or a ``.git`` directory. Raises
        ``git.exc.InvalidGitRepositoryError`` or ``git.exc.NoSuchPathError``.
        """
        return Repo(str(path))

    def remotes(self, repo: Repo) -> List[RemoteDescriptor]:
        """Remotes in the order they are declared in the repository config."""
        descriptors = []
        for remote in repo.remotes:
            url = remote.config_reader.get_value("url", "")
            descriptors.append(RemoteDescriptor(name=remote.name, url=str(url)))
        return descriptors

    def remove_remote(self, repo: Repo, name: str) -> None:
        repo.delete_remote(repo.remote(name))

    def clone(
        self,
        url: str,
        destination: Path,
        checkout: bool,
        env: Optional[Dict[str, str]] = None,
    ) -> Path:
        """
        Clone ``url`` into the working tree ``destination``.

        Returns:
            Path to the ``.git`` directory of the new clone.

        Raises:
            git.exc.GitCommandError: when git fails (transport errors included)
        """
        repo = Repo.clone_from(
            url, Path(destination).as_posix(), no_checkout=not checkout, env=env
        )
        try:
            return Path(repo.git_dir)
        finally:
            repo.close()

    def discover(self, path: Path) -> Tuple[Optional[Path], Optional[Path]]:
        """
        Find the repository containing ``path``.

        Returns:
            Tuple of (.git directory, working tree root). Either is None when
            it cannot be determined.
        """
        try:
            with Repo(str(path), search_parent_directories=True) as repo:
                working_tree = repo.working_tree_dir
                return (
                    Path(repo.git_dir),
                    Path(working_tree) if working_tree else None,
                )
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            logger.debug(f"No git repository found at {path}: {e}")
            return None, None
