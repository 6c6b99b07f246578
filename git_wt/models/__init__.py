"""Data models for git-wt."""

from .worktree import PruneReport, Worktree

__all__ = ["Worktree", "PruneReport"]
