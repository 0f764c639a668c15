from .branch import resolve_branch
from .preparer import GitPreparer, prepare

__all__ = ["GitPreparer", "prepare", "resolve_branch"]
