"""Abstract interface to the version-control backend.

Every filesystem- or network-mutating git call goes through a Backend, so
the layout algorithms can be run against a fake in tests.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Union

from git_wt.models.worktree import Worktree

PathLike = Union[str, Path]


class Backend(ABC):
    """Worktree, clone and branch primitives of the backend."""

    @abstractmethod
    def clone_bare(self, url: str, dest: PathLike) -> None:
        """Clone ``url`` into a bare store at ``dest`` and fetch its branches.

        Transient transport failures are retried; on final failure nothing is
        left at ``dest``.

        Raises:
            NetworkTransient: retry budget exhausted
            AuthFailure: credentials rejected or missing
            RepositoryNotFound: remote does not exist
        """
        ...

    @abstractmethod
    def default_branch(self, bare_dir: PathLike) -> str:
        """Branch that HEAD of the bare store points at."""
        ...

    @abstractmethod
    def list_worktrees(self, bare_dir: PathLike) -> List[Worktree]:
        """All worktrees of the store, excluding the bare store itself."""
        ...

    @abstractmethod
    def add_worktree(
        self,
        repo_root: PathLike,
        path: PathLike,
        branch: str,
        create: bool = False,
        checkout: bool = True,
    ) -> None:
        """Create a worktree at ``path`` bound to ``branch``.

        Args:
            repo_root: The bare store
            path: Directory to create
            branch: Branch to check out
            create: Create ``branch`` first
            checkout: Populate files; False leaves the directory empty apart
                from its ``.git`` file

        Raises:
            BranchAlreadyCheckedOut: branch is in use by another worktree
            PathConflict: ``path`` already exists
        """
        ...

    @abstractmethod
    def remove_worktree(
        self, repo_root: PathLike, path: PathLike, force: bool = False, locked: bool = False
    ) -> None:
        """Remove the worktree at ``path``.

        Args:
            force: Remove even with uncommitted changes
            locked: The worktree is locked; remove it without unlocking first,
                so a failed removal leaves the lock in place
        """
        ...

    @abstractmethod
    def prune_worktrees(self, repo_root: PathLike) -> None:
        """Drop administrative entries of worktrees whose directory is gone."""
        ...

    @abstractmethod
    def unlock_worktree(self, repo_root: PathLike, path: PathLike) -> None:
        ...

    @abstractmethod
    def current_branch(self, checkout_path: PathLike) -> Optional[str]:
        """Branch checked out at ``checkout_path``; None when detached.

        Raises:
            NotARepository: ``checkout_path`` is not a checkout
        """
        ...

    @abstractmethod
    def has_uncommitted_changes(self, checkout_path: PathLike) -> bool:
        """True for staged, modified or untracked files. Must not write."""
        ...

    @abstractmethod
    def set_bare(self, git_dir: PathLike, bare: bool) -> None:
        """Set ``core.bare`` in the store at ``git_dir``."""
        ...

    @abstractmethod
    def set_core_worktree(self, git_dir: PathLike, worktree: str) -> None:
        """Set ``core.worktree`` in the store at ``git_dir`` (a submodule's store)."""
        ...

    @abstractmethod
    def reset_index(self, worktree_path: PathLike) -> None:
        """Rebuild the worktree's index from HEAD without touching files."""
        ...
