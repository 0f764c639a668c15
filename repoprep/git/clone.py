import logging
from pathlib import Path
from typing import Optional

from git.exc import GitCommandError

from repoprep.git.client import GitClient, VersionControlClient
from repoprep.git.credentials import credentials_env, credentials_provider
from repoprep.git.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    PreparationError,
    UnknownRepositoryError,
)
from repoprep.model.config import AuthenticationCredentials

logger = logging.getLogger(__name__)


def _error_text(error: Exception) -> str:
    # str(GitCommandError) includes the command line, stderr holds git's output
    stderr = getattr(error, "stderr", None)
    if stderr:
        return str(stderr)
    return str(error)


def classify_transport_error(error: Exception) -> PreparationError:
    """
    Map a git transport failure to a preparation error.

    git does not report HTTP status codes in a structured way, so the error
    output is scanned for "401", "403" and "404", in that order.

    Known limitation: git often reports a 401 as "Authentication failed for"
    and a 404 as "repository ... not found" without the status code. Those
    failures end up as ``UnknownRepositoryError``, with git's message kept.

    Args:
        error: The failure raised by git

    Returns:
        The preparation error to raise in its place
    """
    message = _error_text(error)
    if "401" in message:
        return AuthenticationError()
    if "403" in message:
        return AuthorizationError()
    if "404" in message:
        return NotFoundError()

    return UnknownRepositoryError(error)


def clone_repository(
    url: str,
    destination: Path,
    credentials: Optional[AuthenticationCredentials] = None,
    client: Optional[VersionControlClient] = None,
) -> Path:
    """
    Clone ``url`` into ``destination`` without checking out a working tree.

    Args:
        url: Remote repository URL
        destination: Working tree directory of the new clone
        credentials: Optional credentials; ignored unless complete
        client: Version control client (defaults to GitClient)

    Returns:
        Path to the ``.git`` directory of the clone

    Raises:
        AuthenticationError, AuthorizationError, NotFoundError,
        UnknownRepositoryError: when the clone fails
    """
    if client is None:
        client = GitClient()

    provided = credentials_provider(credentials)
    if provided is not None:
        logger.info(f"Setting up credentials using name '{provided.username}'")

    logger.info(f"Cloning repository from url '{url}'")
    try:
        git_dir = client.clone(
            url, destination, checkout=False, env=credentials_env(provided)
        )
    except GitCommandError as e:
        logger.debug(f"Clone of '{url}' failed: {e}")
        raise classify_transport_error(e) from e

    logger.info(f"Returned path after repository clone: {git_dir}")
    return git_dir
