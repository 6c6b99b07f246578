"""Backend implementation that drives the git executable through GitPython."""

import shutil
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import git

from git_wt.config import Config
from git_wt.constants import (
    ALREADY_CHECKED_OUT_MARKERS,
    AUTH_FAILURE_MARKERS,
    LOCK_FILENAME,
    NETWORK_ENV,
    NOT_FOUND_MARKERS,
    READ_ONLY_ENV,
    TRANSIENT_NETWORK_MARKERS,
)
from git_wt.exceptions import (
    AuthFailure,
    BackendError,
    BranchAlreadyCheckedOut,
    GitWtError,
    NetworkTransient,
    NotARepository,
    PathConflict,
    RepositoryNotFound,
)
from git_wt.logging_config import get_logger
from git_wt.models.worktree import Worktree
from git_wt.services.backend import Backend, PathLike
from git_wt.services.git.porcelain import parse_worktree_list
from git_wt.utils.retry import retry_transient

logger = get_logger(__name__)

ORIGIN_FETCH_REFSPEC = "+refs/heads/*:refs/remotes/origin/*"


def stderr_of(error: git.exc.GitCommandError) -> str:
    """Plain stderr text of a GitCommandError.

    GitPython formats it as ``"\\n  stderr: '...'"``; unwrap that.
    """
    text = (getattr(error, "stderr", "") or "").strip()
    if text.startswith("stderr:"):
        text = text[len("stderr:"):].strip()
        if len(text) >= 2 and text[0] == text[-1] == "'":
            text = text[1:-1]
    return text.strip() or str(error)


def classify_remote_error(url: str, error: git.exc.GitCommandError, operation: str = "clone") -> GitWtError:
    """Map a failed network operation onto the error taxonomy."""
    detail = stderr_of(error)
    lowered = detail.lower()
    if any(marker in lowered for marker in AUTH_FAILURE_MARKERS):
        return AuthFailure(url, detail)
    if any(marker in lowered for marker in TRANSIENT_NETWORK_MARKERS):
        return NetworkTransient(url, detail)
    if any(marker in lowered for marker in NOT_FOUND_MARKERS):
        return RepositoryNotFound(url, detail)
    return BackendError(operation, detail)


class GitBackend(Backend):
    """Backend that runs git commands via GitPython."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

    def _open(self, path: PathLike) -> git.Repo:
        """Open a fresh git.Repo for ``path``.

        Raises:
            NotARepository: ``path`` is missing or not a repository
        """
        try:
            return git.Repo(str(path))
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise NotARepository(path, f"{type(e).__name__}: {e}")

    @staticmethod
    def _discard(path: Path) -> None:
        if path.exists():
            logger.debug(f"Removing partial clone at {path}")
            shutil.rmtree(path, ignore_errors=True)

    def _retry(self, operation, description: str):
        return retry_transient(
            operation,
            attempts=self.config.clone_attempts,
            initial_delay=self.config.retry_initial_delay,
            backoff_factor=self.config.retry_backoff_factor,
            max_delay=self.config.retry_max_delay,
            description=description,
        )

    def clone_bare(self, url: str, dest: PathLike) -> None:
        dest = Path(dest)
        if dest.exists():
            raise PathConflict(dest, "clone destination already exists")

        def attempt_clone():
            try:
                git.Repo.clone_from(url, str(dest), bare=True, env=NETWORK_ENV)
            except git.exc.GitCommandError as e:
                # Start every retry from a clean slate
                self._discard(dest)
                raise classify_remote_error(url, e)

        try:
            self._retry(attempt_clone, f"clone {url}")
            logger.info(f"Cloned {url} into bare store {dest}")

            repo = self._open(dest)
            # A bare clone has no fetch refspec; add one so remote-tracking
            # branches exist for the worktrees
            with repo.config_writer() as writer:
                writer.set_value('remote "origin"', "fetch", ORIGIN_FETCH_REFSPEC)

            def attempt_fetch():
                try:
                    with repo.git.custom_environment(**NETWORK_ENV):
                        repo.git.fetch("origin")
                except git.exc.GitCommandError as e:
                    raise classify_remote_error(url, e, operation="fetch")

            self._retry(attempt_fetch, f"fetch {url}")
        except BaseException:
            self._discard(dest)
            raise

    def default_branch(self, bare_dir: PathLike) -> str:
        repo = self._open(bare_dir)
        try:
            return repo.git.symbolic_ref("--short", "HEAD")
        except git.exc.GitCommandError as e:
            raise BackendError("symbolic-ref HEAD", stderr_of(e), path=bare_dir)

    def _lock_times(self, bare_dir: Path) -> Dict[str, datetime]:
        """Map resolved worktree path -> mtime of its ``locked`` marker."""
        lock_times: Dict[str, datetime] = {}
        admin_root = bare_dir / "worktrees"
        if not admin_root.is_dir():
            return lock_times

        for admin_dir in admin_root.iterdir():
            locked_file = admin_dir / "locked"
            gitdir_file = admin_dir / "gitdir"
            if not locked_file.exists() or not gitdir_file.exists():
                continue
            try:
                # gitdir holds "<worktree>/.git"
                worktree_path = Path(gitdir_file.read_text().strip()).parent
                lock_times[str(worktree_path.resolve())] = datetime.fromtimestamp(locked_file.stat().st_mtime)
            except OSError as e:
                logger.debug(f"Could not read lock marker in {admin_dir}: {e}")
        return lock_times

    def list_worktrees(self, bare_dir: PathLike) -> List[Worktree]:
        repo = self._open(bare_dir)
        try:
            output = repo.git.worktree("list", "--porcelain")
        except git.exc.GitCommandError as e:
            raise BackendError("worktree list", stderr_of(e), path=bare_dir)

        worktrees = parse_worktree_list(output)
        lock_times = self._lock_times(Path(bare_dir))
        for wt in worktrees:
            if wt.locked:
                wt.locked_since = lock_times.get(str(Path(wt.path).resolve()))

        logger.debug(f"Found {len(worktrees)} worktrees")
        for wt in worktrees:
            logger.debug(f"  {wt}")
        return worktrees

    def add_worktree(
        self,
        repo_root: PathLike,
        path: PathLike,
        branch: str,
        create: bool = False,
        checkout: bool = True,
    ) -> None:
        repo = self._open(repo_root)
        args = ["add"]
        if not checkout:
            args.append("--no-checkout")
        if create:
            args.extend(["-b", branch, str(path)])
        else:
            args.extend([str(path), branch])

        try:
            repo.git.worktree(*args)
        except git.exc.GitCommandError as e:
            detail = stderr_of(e)
            lowered = detail.lower()
            if any(marker in lowered for marker in ALREADY_CHECKED_OUT_MARKERS):
                raise BranchAlreadyCheckedOut(branch, path, detail)
            if "already exists" in lowered and "branch named" not in lowered:
                raise PathConflict(path, detail, branch=branch)
            raise BackendError("worktree add", detail, path=path, branch=branch)
        logger.info(f"Created worktree at {path} for branch {branch}")

    def remove_worktree(
        self, repo_root: PathLike, path: PathLike, force: bool = False, locked: bool = False
    ) -> None:
        repo = self._open(repo_root)
        args = ["remove", str(path)]
        if force or locked:
            args.append("--force")
        if locked:
            # git wants a second --force for locked worktrees
            args.append("--force")
        try:
            repo.git.worktree(*args)
        except git.exc.GitCommandError as e:
            raise BackendError("worktree remove", stderr_of(e), path=path)
        logger.info(f"Removed worktree at {path}")

    def prune_worktrees(self, repo_root: PathLike) -> None:
        repo = self._open(repo_root)
        try:
            repo.git.worktree("prune")
        except git.exc.GitCommandError as e:
            raise BackendError("worktree prune", stderr_of(e), path=repo_root)
        logger.info("Pruned orphaned worktree metadata")

    def unlock_worktree(self, repo_root: PathLike, path: PathLike) -> None:
        repo = self._open(repo_root)
        try:
            repo.git.worktree("unlock", str(path))
        except git.exc.GitCommandError as e:
            raise BackendError("worktree unlock", stderr_of(e), path=path)
        logger.info(f"Unlocked worktree at {path}")

    def current_branch(self, checkout_path: PathLike) -> Optional[str]:
        repo = self._open(checkout_path)
        try:
            return repo.active_branch.name
        except TypeError:
            # Detached HEAD
            return None

    def has_uncommitted_changes(self, checkout_path: PathLike) -> bool:
        repo = self._open(checkout_path)
        try:
            with repo.git.custom_environment(**READ_ONLY_ENV):
                status = repo.git.status("--porcelain")
        except git.exc.GitCommandError as e:
            raise BackendError("status", stderr_of(e), path=checkout_path)

        # Porcelain format: XY filename
        for line in status.split("\n"):
            if not line.strip():
                continue
            if line[3:] == LOCK_FILENAME:
                continue
            return True
        return False

    def set_bare(self, git_dir: PathLike, bare: bool) -> None:
        config_file = Path(git_dir) / "config"
        try:
            git.Git().config("--file", str(config_file), "core.bare", "true" if bare else "false")
        except git.exc.GitCommandError as e:
            raise BackendError("config core.bare", stderr_of(e), path=git_dir)

    def set_core_worktree(self, git_dir: PathLike, worktree: str) -> None:
        config_file = Path(git_dir) / "config"
        try:
            git.Git().config("--file", str(config_file), "core.worktree", worktree)
        except git.exc.GitCommandError as e:
            raise BackendError("config core.worktree", stderr_of(e), path=git_dir)

    def reset_index(self, worktree_path: PathLike) -> None:
        repo = self._open(worktree_path)
        try:
            repo.git.reset("--quiet")
        except git.exc.GitCommandError as e:
            raise BackendError("reset", stderr_of(e), path=worktree_path)
