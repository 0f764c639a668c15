"""
Git directory normalization.

Before the history of a repository can be read, the branch being built must
exist locally and point at the tip known by the remote. On build agents the
working copy is often a detached checkout with a single fetched ref, and
dynamic repositories are cloned without a working tree, so both need their
refs brought in line first.

``GitDirectoryNormalizer`` is the default implementation; the preparer only
depends on the ``DirectoryNormalizer`` protocol.
"""

import logging
from pathlib import Path
from typing import Optional, Protocol

from git import Repo
from git.exc import GitCommandError
from git.refs.head import Head
from git.refs.remote import RemoteReference
from git.remote import Remote

from repoprep.git.clone import classify_transport_error
from repoprep.git.credentials import credentials_env
from repoprep.git.exceptions import NormalizationError
from repoprep.git.remotes import canonical_remote_name
from repoprep.model.config import AuthenticationCredentials

logger = logging.getLogger(__name__)

_BRANCH_PREFIX = "refs/heads/"


class DirectoryNormalizer(Protocol):
    def normalize(
        self,
        git_directory: Path,
        credentials: Optional[AuthenticationCredentials],
        no_fetch: bool,
        target_branch: Optional[str],
        is_dynamic_repository: bool,
    ) -> None: ...


def short_branch_name(branch: str) -> str:
    """Strip a leading ``refs/heads/`` from a branch name."""
    if branch.startswith(_BRANCH_PREFIX):
        return branch[len(_BRANCH_PREFIX) :]
    return branch


class GitDirectoryNormalizer:
    """Fetch the canonical remote and align the target branch with it."""

    def normalize(
        self,
        git_directory: Path,
        credentials: Optional[AuthenticationCredentials],
        no_fetch: bool,
        target_branch: Optional[str],
        is_dynamic_repository: bool,
    ) -> None:
        with Repo(str(git_directory)) as repo:
            remote = self._single_remote(repo, is_dynamic_repository)

            if no_fetch:
                logger.info("Skipping fetch, refs are used as they are")
            else:
                self._fetch(repo, remote, credentials)

            if not target_branch:
                logger.debug("No target branch, leaving refs as they are")
                return

            branch = self._ensure_local_branch(
                repo, remote, short_branch_name(target_branch), is_dynamic_repository
            )
            if branch is not None:
                self._attach_head(repo, branch, is_dynamic_repository)

    def _single_remote(self, repo: Repo, is_dynamic_repository: bool) -> Remote:
        names = [r.name for r in repo.remotes]
        name = canonical_remote_name(names)
        if name is None:
            raise NormalizationError(
                f"Repository at '{repo.git_dir}' has no remote, add at least one"
            )
        if len(names) > 1 and is_dynamic_repository:
            # a reused clone must only know the URL it was planned for
            raise NormalizationError(
                f"Dynamic repository at '{repo.git_dir}' has {len(names)} remotes "
                f"({', '.join(names)}), expected exactly one"
            )
        if len(names) > 1:
            logger.warning(f"Repository has {len(names)} remotes, using '{name}'")
        return repo.remote(name)

    def _fetch(
        self,
        repo: Repo,
        remote: Remote,
        credentials: Optional[AuthenticationCredentials],
    ) -> None:
        logger.info(f"Fetching from remote '{remote.name}'")
        try:
            with repo.git.custom_environment(**credentials_env(credentials)):
                remote.fetch(prune=True)
        except GitCommandError as e:
            logger.debug(f"Fetch from '{remote.name}' failed: {e}")
            raise classify_transport_error(e) from e

    def _remote_ref(self, remote: Remote, branch: str) -> Optional[RemoteReference]:
        for ref in remote.refs:
            if ref.remote_head == branch:
                return ref
        return None

    def _ensure_local_branch(
        self, repo: Repo, remote: Remote, branch: str, is_dynamic_repository: bool
    ) -> Optional[Head]:
        remote_ref = self._remote_ref(remote, branch)
        local = repo.heads[branch] if branch in repo.heads else None

        if remote_ref is None:
            if local is not None:
                return local
            if is_dynamic_repository:
                raise NormalizationError(
                    f"Branch '{branch}' was not found on remote '{remote.name}'"
                )
            logger.warning(
                f"Branch '{branch}' exists neither locally "
                f"nor on remote '{remote.name}'"
            )
            return None

        if local is None:
            logger.info(f"Creating local branch '{branch}' from '{remote_ref.name}'")
            local = repo.create_head(branch, remote_ref.commit)
            local.set_tracking_branch(remote_ref)
            return local

        checked_out = not repo.head.is_detached and repo.head.reference == local
        if checked_out and not is_dynamic_repository:
            # never move the branch under an existing working tree
            return local

        if local.commit != remote_ref.commit:
            logger.info(
                f"Updating local branch '{branch}' to {remote_ref.commit.hexsha[:7]}"
            )
            local.set_commit(remote_ref.commit)
        if local.tracking_branch() is None:
            local.set_tracking_branch(remote_ref)
        return local

    def _attach_head(self, repo: Repo, branch: Head, is_dynamic_repository: bool):
        if not repo.head.is_detached:
            if not is_dynamic_repository or repo.head.reference == branch:
                return
        elif not is_dynamic_repository and repo.head.commit != branch.commit:
            logger.info(
                f"HEAD is detached at {repo.head.commit.hexsha[:7]}, "
                f"not at the tip of '{branch.name}'; leaving it detached"
            )
            return

        logger.info(f"Pointing HEAD at branch '{branch.name}'")
        repo.head.reference = branch
