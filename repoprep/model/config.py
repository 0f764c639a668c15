"""Pydantic models for a single preparation run."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def blank_to_none(v: Optional[str]) -> Optional[str]:
    """Treat empty or whitespace-only strings as unset."""
    if v is None:
        return None
    if isinstance(v, str) and not v.strip():
        return None
    return v


class AuthenticationCredentials(BaseModel):
    """Username/password pair used for HTTP(S) remotes."""

    model_config = ConfigDict(frozen=True)

    username: Optional[str] = Field(None, description="Remote username")
    password: Optional[str] = Field(None, description="Remote password", repr=False)

    @property
    def is_usable(self) -> bool:
        """Both parts must be present for the credentials to be sent."""
        return bool(
            self.username
            and self.username.strip()
            and self.password
            and self.password.strip()
        )


class PreparationConfig(BaseModel):
    """
    Immutable input of a preparation run.

    Either ``target_url`` is set, in which case a dynamic repository is cloned
    into a computed location, or the local working copy at ``target_path``
    (or the explicit ``dot_git_directory``) is prepared in place.
    """

    model_config = ConfigDict(frozen=True)

    target_path: Path = Field(Path("."), description="Working directory to prepare")
    dot_git_directory: Optional[Path] = Field(
        None, description=".git directory of the local working copy"
    )
    project_root_directory: Optional[Path] = Field(
        None, description="Root of the local working copy"
    )
    target_url: Optional[str] = Field(None, description="Remote repository URL")
    target_branch: Optional[str] = Field(None, description="Branch to prepare")
    authentication: Optional[AuthenticationCredentials] = Field(
        None, description="Credentials for the remote"
    )
    no_normalize: bool = Field(False, description="Skip git directory normalization")
    no_fetch: bool = Field(False, description="Do not fetch from the remote")
    is_dynamic_git_repository: bool = Field(
        False, description="The local directory comes from a previous dynamic clone"
    )
    dynamic_repository_clone_path: Optional[Path] = Field(
        None, description="Base directory for dynamic clones"
    )

    @field_validator("target_url", "target_branch", mode="before")
    @classmethod
    def validate_optional_string(cls, v: Optional[str]) -> Optional[str]:
        return blank_to_none(v)

    @field_validator(
        "dot_git_directory",
        "project_root_directory",
        "dynamic_repository_clone_path",
        mode="before",
    )
    @classmethod
    def validate_optional_path(cls, v):
        if isinstance(v, str):
            return blank_to_none(v)
        return v

    @property
    def is_remote(self) -> bool:
        return self.target_url is not None
