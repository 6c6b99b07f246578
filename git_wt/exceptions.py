"""Custom exceptions for git-wt"""

from pathlib import Path
from typing import List, Optional, Union

PathLike = Union[str, Path]


class GitWtError(Exception):
    """Base exception for all git-wt errors.

    Every subclass has a fixed ``exit_code`` so scripts can tell error kinds
    apart across runs.
    """

    exit_code = 1

    def __init__(
        self,
        message: str,
        path: Optional[PathLike] = None,
        branch: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        self.message = message
        self.path = str(path) if path is not None else None
        self.branch = branch
        self.detail = detail

        error_msg = message
        if branch:
            error_msg += f" [branch '{branch}']"
        if self.path:
            error_msg += f" [path {self.path}]"
        if detail:
            error_msg += f": {detail}"

        super().__init__(error_msg)


class BackendError(GitWtError):
    """Exception raised when a git command fails for an unclassified reason."""

    exit_code = 3

    def __init__(
        self,
        operation: str,
        detail: Optional[str] = None,
        path: Optional[PathLike] = None,
        branch: Optional[str] = None,
    ):
        self.operation = operation
        super().__init__(f"Git operation '{operation}' failed", path=path, branch=branch, detail=detail)


class NotARepository(GitWtError):
    exit_code = 10

    def __init__(self, path: PathLike, detail: Optional[str] = None):
        super().__init__("Not a conventional Git repository", path=path, detail=detail)


class AlreadyWorktree(GitWtError):
    exit_code = 11

    def __init__(self, path: PathLike, detail: Optional[str] = None):
        super().__init__("Repository already uses a worktree layout", path=path, detail=detail)


class DirtyWorkingTree(GitWtError):
    """Exception raised when uncommitted changes block a migration."""

    exit_code = 12

    def __init__(self, path: PathLike, branch: Optional[str] = None):
        super().__init__(
            "Working tree has uncommitted changes; commit or stash them first "
            "(nothing was changed)",
            path=path,
            branch=branch,
        )


class PathConflict(GitWtError):
    exit_code = 13

    def __init__(self, path: PathLike, detail: Optional[str] = None, branch: Optional[str] = None):
        super().__init__("Target path is already in use", path=path, branch=branch, detail=detail)


class BranchAlreadyCheckedOut(GitWtError):
    exit_code = 14

    def __init__(self, branch: str, path: Optional[PathLike] = None, detail: Optional[str] = None):
        super().__init__("Branch is already checked out in another worktree", path=path, branch=branch, detail=detail)


class RepositoryBusy(GitWtError):
    """Exception raised when another git-wt command holds the repository lock."""

    exit_code = 15

    def __init__(self, path: PathLike, holder: Optional[str] = None):
        self.holder = holder
        detail = f"lock held by {holder}" if holder else "lock held by another process"
        super().__init__("Repository is busy", path=path, detail=detail)


class NetworkTransient(GitWtError):
    """Exception raised for transient transport failures.

    Retried internally; only surfaces once the retry budget is exhausted.
    """

    exit_code = 16

    def __init__(self, url: str, detail: Optional[str] = None, attempts: int = 1):
        self.url = url
        self.attempts = attempts
        message = f"Network error talking to '{url}'"
        if attempts > 1:
            message += f" (gave up after {attempts} attempts)"
        super().__init__(message, detail=detail)


class AuthFailure(GitWtError):
    exit_code = 17

    def __init__(self, url: str, detail: Optional[str] = None):
        self.url = url
        super().__init__(f"Authentication failed for '{url}'", detail=detail)


class RepositoryNotFound(GitWtError):
    exit_code = 20

    def __init__(self, url: str, detail: Optional[str] = None):
        self.url = url
        super().__init__(f"Remote repository '{url}' not found", detail=detail)


class ReorganizeFailed(GitWtError):
    """Exception raised when ``init`` fails after it started changing the layout.

    ``rolled_back`` tells whether every compensating step succeeded, i.e.
    whether the repository is back in its original state.
    """

    exit_code = 18

    def __init__(self, path: PathLike, cause: BaseException, rollback_errors: Optional[List[str]] = None):
        self.cause = cause
        self.rollback_errors = rollback_errors or []
        self.rolled_back = not self.rollback_errors

        if self.rolled_back:
            state = "repository restored to its original layout"
        else:
            state = "ROLLBACK INCOMPLETE, manual repair needed: " + "; ".join(self.rollback_errors)
        super().__init__(f"Reorganization failed ({state})", path=path, detail=str(cause) or type(cause).__name__)


class WorktreeCreateFailed(GitWtError):
    """Exception raised when the clone succeeded but no worktree could be made."""

    exit_code = 19

    def __init__(self, bare_dir: PathLike, worktree_path: PathLike, branch: str, cause: BaseException):
        self.bare_dir = str(bare_dir)
        self.worktree_path = str(worktree_path)
        self.cause = cause
        super().__init__(
            f"Clone succeeded but no working copy was created; the bare store is kept at "
            f"{self.bare_dir}. Retry with: git -C {self.bare_dir} worktree add {self.worktree_path} {branch}",
            branch=branch,
            detail=str(cause) or type(cause).__name__,
        )


class DetachedHead(GitWtError):
    """Exception raised when repository is in detached HEAD state."""

    exit_code = 21

    def __init__(self, path: PathLike):
        super().__init__("Repository is in detached HEAD state; check out a branch first", path=path)


class InvalidBranchName(GitWtError):
    exit_code = 22

    def __init__(self, branch: str, detail: Optional[str] = None):
        super().__init__("Branch name cannot be mapped to a directory", branch=branch, detail=detail)


class AliasSetupFailed(GitWtError):
    exit_code = 23

    def __init__(self, detail: Optional[str] = None):
        super().__init__("Could not set the 'git wt' alias", detail=detail)


class PruneSkipped(GitWtError):
    """Record of a worktree that prune left in place (locked, dirty or failed).

    Informational: collected in a PruneReport, not raised by commands.
    """

    exit_code = 0

    def __init__(self, path: PathLike, reason: str, branch: Optional[str] = None, detail: Optional[str] = None):
        self.reason = reason
        super().__init__(f"Skipped ({reason})", path=path, branch=branch, detail=detail)
