"""In-memory backend used by unit tests."""

from pathlib import Path
from typing import Dict, List, Optional, Set

from git_wt.exceptions import BackendError, BranchAlreadyCheckedOut, NotARepository, PathConflict
from git_wt.models.worktree import Worktree
from git_wt.services.backend import Backend


class FakeBackend(Backend):
    """Backend keeping worktrees in a dict keyed by path.

    ``add_worktree`` creates the directory on disk so the registry sees it;
    everything else stays in memory. ``calls`` records every mutation.
    """

    def __init__(self, default: str = "main"):
        self.default = default
        self.worktrees: Dict[str, Worktree] = {}
        self.branches: Dict[str, Optional[str]] = {}
        self.dirty: Set[str] = set()
        self.calls: List[tuple] = []

    def add(self, path, branch: str = "", **kwargs) -> Worktree:
        """Register an existing worktree directly."""
        worktree = Worktree(path=str(path), branch=branch, head="0" * 40, **kwargs)
        self.worktrees[str(path)] = worktree
        return worktree

    def clone_bare(self, url, dest):
        self.calls.append(("clone_bare", url, str(dest)))
        Path(dest).mkdir(parents=True)

    def default_branch(self, bare_dir):
        return self.default

    def list_worktrees(self, bare_dir):
        return [
            Worktree(
                path=wt.path,
                branch=wt.branch,
                head=wt.head,
                locked=wt.locked,
                lock_reason=wt.lock_reason,
                locked_since=wt.locked_since,
                prunable=wt.prunable,
            )
            for wt in self.worktrees.values()
        ]

    def add_worktree(self, repo_root, path, branch, create=False, checkout=True):
        self.calls.append(("add_worktree", str(path), branch))
        if any(wt.branch == branch for wt in self.worktrees.values()):
            raise BranchAlreadyCheckedOut(branch, path)
        target = Path(path)
        if target.exists() and any(target.iterdir()):
            raise PathConflict(path)
        target.mkdir(parents=True, exist_ok=True)
        self.add(target, branch)

    def remove_worktree(self, repo_root, path, force=False, locked=False):
        self.calls.append(("remove_worktree", str(path), force, locked))
        if self.worktrees[str(path)].locked and not locked:
            raise BackendError("worktree remove", "cannot remove a locked working tree", path=path)
        del self.worktrees[str(path)]

    def prune_worktrees(self, repo_root):
        self.calls.append(("prune_worktrees",))
        for key in [k for k in self.worktrees if not Path(k).exists()]:
            if not self.worktrees[key].locked:
                del self.worktrees[key]

    def unlock_worktree(self, repo_root, path):
        self.calls.append(("unlock_worktree", str(path)))
        self.worktrees[str(path)].locked = False

    def current_branch(self, checkout_path):
        if str(checkout_path) not in self.branches:
            raise NotARepository(checkout_path)
        return self.branches[str(checkout_path)]

    def has_uncommitted_changes(self, checkout_path):
        return str(checkout_path) in self.dirty

    def set_bare(self, git_dir, bare):
        self.calls.append(("set_bare", str(git_dir), bare))

    def set_core_worktree(self, git_dir, worktree):
        self.calls.append(("set_core_worktree", str(git_dir), worktree))

    def reset_index(self, worktree_path):
        self.calls.append(("reset_index", str(worktree_path)))
