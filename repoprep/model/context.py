"""
Build context passed to the preparer.

A build server is either detected or not. Detection itself happens outside
this package; callers wrap the detected server in ``BuildContextPresent`` or
pass ``ABSENT``.
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Union


class BuildServer(Protocol):
    """Capabilities the preparer needs from a build server."""

    def current_branch(self, is_dynamic_repository: bool) -> Optional[str]:
        """Branch being built, if the build server knows it."""
        ...

    def should_cleanup_remotes(self) -> bool:
        """Whether duplicate remotes must be removed before normalizing."""
        ...


@dataclass(frozen=True)
class BuildContextAbsent:
    """No build server detected."""


@dataclass(frozen=True)
class BuildContextPresent:
    """A detected build server."""

    server: BuildServer

    def current_branch(self, is_dynamic_repository: bool) -> Optional[str]:
        return self.server.current_branch(is_dynamic_repository)

    def should_cleanup_remotes(self) -> bool:
        return self.server.should_cleanup_remotes()


BuildContext = Union[BuildContextAbsent, BuildContextPresent]

ABSENT = BuildContextAbsent()


def build_context(server: Optional[BuildServer]) -> BuildContext:
    """Wrap an optional build server into a build context."""
    if server is None:
        return ABSENT
    return BuildContextPresent(server)
