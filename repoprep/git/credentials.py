"""
Credential handling for git transport.

Credentials are passed to git as an HTTP ``Authorization`` header through
``GIT_CONFIG_*`` environment variables. They never end up in the clone's
``.git/config`` or in a remote URL, so a reused dynamic clone keeps the exact
URL it was cloned from.
"""

import base64
import os
from typing import Dict, Mapping, Optional

from repoprep.model.config import AuthenticationCredentials


def credentials_provider(
    credentials: Optional[AuthenticationCredentials],
) -> Optional[AuthenticationCredentials]:
    """
    Return the credentials to send, or None for anonymous access.

    Credentials are only sent when both username and password are non-blank.
    """
    if credentials is None or not credentials.is_usable:
        return None
    return credentials


def basic_auth_header(credentials: AuthenticationCredentials) -> str:
    token = base64.b64encode(
        f"{credentials.username}:{credentials.password}".encode("utf-8")
    ).decode("ascii")
    return f"Authorization: Basic {token}"


def credentials_env(
    credentials: Optional[AuthenticationCredentials],
    base_env: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Build the environment overrides for a git transport command.

    Interactive prompts are always disabled. When usable credentials are
    provided, an ``http.extraHeader`` entry is appended after any
    ``GIT_CONFIG_*`` entries already present in ``base_env``.

    Args:
        credentials: Credentials as configured (may be incomplete or None)
        base_env: Environment the command inherits (defaults to os.environ)

    Returns:
        Environment variables to add to the git invocation
    """
    env = {"GIT_TERMINAL_PROMPT": "0"}

    provided = credentials_provider(credentials)
    if provided is None:
        return env

    if base_env is None:
        base_env = os.environ
    try:
        index = int(base_env.get("GIT_CONFIG_COUNT", "0"))
    except ValueError:
        index = 0

    env["GIT_CONFIG_COUNT"] = str(index + 1)
    env[f"GIT_CONFIG_KEY_{index}"] = "http.extraHeader"
    env[f"GIT_CONFIG_VALUE_{index}"] = basic_auth_header(provided)
    return env
