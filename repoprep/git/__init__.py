"""
Git operations for repository preparation.

Every component talks to git through GitPython. Repository handles are always
opened in a ``with`` block so they are released on error paths too.

    paths.py      where a dynamic repository is cloned to
    clone.py      credentialed clone without checkout, transport error mapping
    remotes.py    reduce the remotes of a working copy to a single one
    normalize.py  fetch and align the target branch with the remote
"""

from .clone import classify_transport_error, clone_repository
from .client import GitClient, VersionControlClient
from .credentials import credentials_env, credentials_provider
from .normalize import DirectoryNormalizer, GitDirectoryNormalizer
from .paths import has_matching_remote, plan_repository_path, repository_name
from .remotes import DEFAULT_REMOTE_NAME, canonical_remote_name, cleanup_remotes

__all__ = [
    "DEFAULT_REMOTE_NAME",
    "DirectoryNormalizer",
    "GitClient",
    "GitDirectoryNormalizer",
    "VersionControlClient",
    "canonical_remote_name",
    "classify_transport_error",
    "cleanup_remotes",
    "clone_repository",
    "credentials_env",
    "credentials_provider",
    "has_matching_remote",
    "plan_repository_path",
    "repository_name",
]
