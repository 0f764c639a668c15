from .config import AuthenticationCredentials, PreparationConfig
from .context import (
    ABSENT,
    BuildContext,
    BuildContextAbsent,
    BuildContextPresent,
    BuildServer,
    build_context,
)
from .repository import PreparationResult, RemoteDescriptor

__all__ = [
    "ABSENT",
    "AuthenticationCredentials",
    "BuildContext",
    "BuildContextAbsent",
    "BuildContextPresent",
    "BuildServer",
    "PreparationConfig",
    "PreparationResult",
    "RemoteDescriptor",
    "build_context",
]
