import logging
from typing import Optional

from repoprep.model.context import BuildContext, BuildContextPresent

logger = logging.getLogger(__name__)


def resolve_branch(
    context: BuildContext,
    explicit_branch: Optional[str],
    is_dynamic_repository: bool,
) -> Optional[str]:
    """
    Decide which branch is being prepared.

    A build server knows better than the command line which branch it is
    building; its answer wins whenever it has one.

    Args:
        context: Build context of the invocation
        explicit_branch: Branch given in the configuration (may be empty)
        is_dynamic_repository: Passed through to the build server query

    Returns:
        The effective branch, possibly None or empty
    """
    match context:
        case BuildContextPresent():
            current = context.current_branch(is_dynamic_repository)
            if current is None:
                current = explicit_branch
            logger.info(f"Branch from build environment: {current}")
            return current
        case _:
            return explicit_branch
