"""
Repository preparation.

``GitPreparer`` turns a ``PreparationConfig`` into a ``.git`` directory and a
project root the version calculation can read history from:

    remote URL   plan a local path, clone if needed, normalize
    local path   discover the repository, clean up remotes and normalize
                 when running under a build server

Preparation is a single pass. Errors are raised as ``PreparationError``
subclasses and never retried.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

from filelock import FileLock

from repoprep.config import get_dynamic_repos_dir
from repoprep.git.client import GitClient, VersionControlClient
from repoprep.git.clone import clone_repository
from repoprep.git.exceptions import ConfigurationError
from repoprep.git.normalize import DirectoryNormalizer, GitDirectoryNormalizer
from repoprep.git.paths import plan_repository_path
from repoprep.git.remotes import cleanup_remotes
from repoprep.model.config import PreparationConfig
from repoprep.model.context import ABSENT, BuildContext, BuildContextPresent
from repoprep.model.repository import PreparationResult
from repoprep.prepare.branch import resolve_branch

logger = logging.getLogger(__name__)


class GitPreparer:
    def __init__(
        self,
        config: PreparationConfig,
        build_context: BuildContext = ABSENT,
        normalizer: Optional[DirectoryNormalizer] = None,
        client: Optional[VersionControlClient] = None,
    ):
        self.config = config
        self.build_context = build_context
        self.normalizer = normalizer or GitDirectoryNormalizer()
        self.client = client or GitClient()

    def prepare(self) -> PreparationResult:
        """
        Prepare the configured repository.

        Returns:
            The ``.git`` directory and project root to read history from

        Raises:
            ConfigurationError: if a dynamic repository has no target branch,
                or no ``.git`` directory/project root could be determined
            AuthenticationError, AuthorizationError, NotFoundError,
            UnknownRepositoryError: if cloning or fetching fails
        """
        branch = resolve_branch(
            self.build_context,
            self.config.target_branch,
            self.config.dynamic_repository_clone_path is not None,
        )

        if self.config.is_remote:
            dot_git, project_root = self._prepare_dynamic_repository(branch)
        else:
            dot_git, project_root = self._prepare_local_repository(branch)

        logger.info(f"Project root is: {project_root}")
        logger.info(f"DotGit directory is: {dot_git}")
        if not dot_git or not project_root:
            raise ConfigurationError(
                "Failed to prepare or find the .git directory in path "
                f"'{self.config.target_path}'."
            )

        return PreparationResult(
            dot_git_directory=Path(dot_git), project_root_directory=Path(project_root)
        )

    def _prepare_dynamic_repository(self, branch: Optional[str]) -> Tuple[Path, Path]:
        if not branch or not branch.strip():
            raise ConfigurationError(
                "Dynamic Git repositories must have a target branch (--branch)"
            )

        url = self.config.target_url
        base_dir = self.config.dynamic_repository_clone_path or get_dynamic_repos_dir()
        repo_path = plan_repository_path(url, base_dir, self.client)
        git_dir = repo_path / ".git"

        logger.info(f"Creating dynamic repository at '{repo_path}'")
        repo_path.parent.mkdir(parents=True, exist_ok=True)
        lock = repo_path.parent / f"{repo_path.name}.lock"
        with FileLock(lock):
            if not repo_path.is_dir():
                clone_repository(
                    url, repo_path, self.config.authentication, self.client
                )
            else:
                logger.info("Git repository already exists")

            self._normalize(git_dir, branch, is_dynamic_repository=True)

        return git_dir, repo_path

    def _prepare_local_repository(
        self, branch: Optional[str]
    ) -> Tuple[Optional[Path], Optional[Path]]:
        dot_git, project_root = self._local_directories()
        if dot_git is None:
            return dot_git, project_root

        match self.build_context:
            case BuildContextPresent() if not self.config.no_normalize:
                if self.build_context.should_cleanup_remotes():
                    removed = cleanup_remotes(dot_git, self.client)
                    if removed:
                        logger.info(f"Removed remotes: {', '.join(removed)}")
                self._normalize(dot_git, branch, self.config.is_dynamic_git_repository)
            case _:
                logger.debug("Skipping normalization of the local git directory")

        return dot_git, project_root

    def _local_directories(self) -> Tuple[Optional[Path], Optional[Path]]:
        dot_git = self.config.dot_git_directory
        project_root = self.config.project_root_directory
        if dot_git is not None and project_root is not None:
            return dot_git, project_root

        found_git, found_root = self.client.discover(
            dot_git if dot_git is not None else self.config.target_path
        )
        return dot_git or found_git, project_root or found_root

    def _normalize(
        self, git_directory: Path, branch: Optional[str], is_dynamic_repository: bool
    ) -> None:
        logger.info(f"Normalizing git directory for branch '{branch}'")
        self.normalizer.normalize(
            git_directory,
            self.config.authentication,
            self.config.no_fetch,
            branch,
            is_dynamic_repository,
        )


def prepare(
    config: PreparationConfig,
    build_context: BuildContext = ABSENT,
    normalizer: Optional[DirectoryNormalizer] = None,
) -> PreparationResult:
    """Prepare the repository described by ``config``."""
    return GitPreparer(config, build_context, normalizer).prepare()
