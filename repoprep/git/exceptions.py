"""
Exception classes for repository preparation.
"""

from typing import Optional


class PreparationError(Exception):
    """Base exception for all repository preparation errors."""

    pass


class ConfigurationError(PreparationError):
    """Raised when the configuration cannot yield a usable repository."""

    pass


class AuthenticationError(PreparationError):
    """Raised when the remote rejected the credentials (HTTP 401)."""

    def __init__(self, message: str = "Unauthorized: Incorrect username/password"):
        super().__init__(message)


class AuthorizationError(PreparationError):
    """Raised when the remote refused access (HTTP 403)."""

    def __init__(
        self, message: str = "Forbidden: Possibly Incorrect username/password"
    ):
        super().__init__(message)


class NotFoundError(PreparationError):
    """Raised when the remote repository does not exist (HTTP 404)."""

    def __init__(self, message: str = "Not found: The repository was not found"):
        super().__init__(message)


class UnknownRepositoryError(PreparationError):
    """Raised for any other transport failure. Keeps the original error."""

    def __init__(
        self,
        cause: Optional[BaseException] = None,
        message: str = (
            "There was an unknown problem with the Git repository you provided"
        ),
    ):
        self.cause = cause
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class NormalizationError(PreparationError):
    """Raised when a git directory cannot be normalized."""

    pass
