import logging
from pathlib import Path
from typing import List, Optional, Sequence

from repoprep.git.client import GitClient, VersionControlClient

logger = logging.getLogger(__name__)

DEFAULT_REMOTE_NAME = "origin"


def canonical_remote_name(names: Sequence[str]) -> Optional[str]:
    """
    Name of the remote to keep: ``origin`` if present, else the first one.

    Names are compared case-insensitively. Returns None when there are no remotes.
    """
    if not names:
        return None

    for name in names:
        if name.casefold() == DEFAULT_REMOTE_NAME:
            return name

    return names[0]


def cleanup_remotes(
    repository_path: Path, client: Optional[VersionControlClient] = None
) -> List[str]:
    """
    Remove every remote but the canonical one.

    Args:
        repository_path: Working tree or ``.git`` directory
        client: Version control client (defaults to GitClient)

    Returns:
        Names of the removed remotes, in enumeration order
    """
    if client is None:
        client = GitClient()

    removed = []
    with client.open(repository_path) as repo:
        remotes = client.remotes(repo)
        if len(remotes) <= 1:
            return removed

        keep = canonical_remote_name([remote.name for remote in remotes])
        for remote in remotes:
            if remote.name.casefold() != keep.casefold():
                logger.info(f"Removing duplicate remote '{remote.name}' ({remote.url})")
                client.remove_remote(repo, remote.name)
                removed.append(remote.name)

    return removed
