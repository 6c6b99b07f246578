"""Git-backed implementation of the backend interface."""

from .backend import GitBackend, classify_remote_error, stderr_of
from .porcelain import parse_worktree_list

__all__ = [
    "GitBackend",
    "classify_remote_error",
    "stderr_of",
    "parse_worktree_list",
]
