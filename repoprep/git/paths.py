"""
Local paths for dynamic repositories.

A remote URL is cloned into ``<base>/<name>`` where ``<name>`` is the last
segment of the URL. If that directory is already taken by something that is
not a clone of the same URL, ``<name>_1``, ``<name>_2``, ... are tried in order.
An existing clone of the same URL is reused as is.
"""

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

from repoprep.git.client import GitClient, VersionControlClient

logger = logging.getLogger(__name__)

_SEPARATORS = {"/", "\\", os.sep}


def repository_name(target_url: str) -> str:
    """
    Derive a directory name from a repository URL.

    Examples:
        https://github.com/org/proj.git -> proj
        git@github.com:org/proj.git -> proj
        C:\\repos\\proj -> proj
    """
    pattern = "[" + "".join(re.escape(s) for s in sorted(_SEPARATORS)) + "]"
    stripped = target_url.strip().rstrip("".join(_SEPARATORS))
    name = re.split(pattern, stripped)[-1]
    while name.endswith(".git"):
        name = name[: -len(".git")]
    return name


def has_matching_remote(
    path: Path, target_url: str, client: Optional[VersionControlClient] = None
) -> bool:
    """
    Check whether the repository at ``path`` has a remote with URL ``target_url``.

    URLs are compared as plain, case-sensitive strings. A directory that cannot
    be opened as a repository never matches.
    """
    if client is None:
        client = GitClient()

    try:
        with client.open(path) as repo:
            return any(remote.url == target_url for remote in client.remotes(repo))
    except Exception as e:
        logger.debug(f"Could not read repository at {path}: {e}")
        return False


def plan_repository_path(
    target_url: str,
    preferred_base_dir: Optional[Union[str, Path]] = None,
    client: Optional[VersionControlClient] = None,
) -> Path:
    """
    Compute where a dynamic repository for ``target_url`` lives.

    Args:
        target_url: Remote repository URL
        preferred_base_dir: Base directory (defaults to the system temp directory)
        client: Version control client used to inspect existing directories

    Returns:
        A path that either does not exist yet or holds a clone of ``target_url``
    """
    if client is None:
        client = GitClient()

    if preferred_base_dir:
        base_dir = Path(preferred_base_dir)
    else:
        base_dir = Path(tempfile.gettempdir())

    name = repository_name(target_url)
    candidate = base_dir / name

    if not candidate.is_dir() or has_matching_remote(candidate, target_url, client):
        return candidate

    suffix = 1
    while True:
        candidate = base_dir / f"{name}_{suffix}"
        if not candidate.is_dir() or has_matching_remote(
            candidate, target_url, client
        ):
            logger.debug(f"Using {candidate} for dynamic repository {target_url}")
            return candidate
        suffix += 1
