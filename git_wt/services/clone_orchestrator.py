"""Cloning a remote straight into the worktree layout (``clone``)."""

import shutil
from pathlib import Path
from typing import Optional, Union

from git_wt.config import Config
from git_wt.exceptions import PathConflict, RepositoryBusy, WorktreeCreateFailed
from git_wt.layout import Layout
from git_wt.logging_config import get_logger
from git_wt.models.worktree import Worktree
from git_wt.services.backend import Backend
from git_wt.services.path_resolver import destination_from_url, resolve
from git_wt.services.registry import WorktreeRegistry
from git_wt.utils.locking import RepositoryLock

logger = get_logger(__name__)


class CloneOrchestrator:
    """Create ``<dest>/.bare`` from a remote and a first worktree next to it.

    A failed clone leaves nothing on disk. A clone whose worktree cannot be
    created keeps the bare store, since the fetched history is real data
    and the worktree can be added later.
    """

    def __init__(self, backend: Backend, config: Optional[Config] = None):
        self.backend = backend
        self.config = config or Config()

    def run(
        self,
        url: str,
        directory: Optional[Union[str, Path]] = None,
        branch: Optional[str] = None,
    ) -> Worktree:
        """Clone ``url``.

        Args:
            url: Remote repository
            directory: Destination root; defaults to ``./<name from url>``
            branch: Branch for the first worktree; defaults to the remote's HEAD

        Returns:
            The registry entry of the first worktree

        Raises:
            PathConflict: destination exists and is not empty
            NetworkTransient, AuthFailure, RepositoryNotFound: clone failed,
                nothing left on disk
            RepositoryBusy: another command is cloning into the destination
            WorktreeCreateFailed: clone kept, no worktree
        """
        root = Path(directory) if directory else Path.cwd() / destination_from_url(url)
        layout = Layout.at(root)

        if layout.root.exists() and (not layout.root.is_dir() or any(layout.root.iterdir())):
            raise PathConflict(layout.root, "clone destination exists and is not empty")

        created_root = not layout.root.exists()
        layout.root.mkdir(parents=True, exist_ok=True)
        logger.info(f"Cloning {url} into {layout.root}")

        try:
            with RepositoryLock(layout.root, operation="clone"):
                self.backend.clone_bare(url, layout.bare_dir)
                layout.write_git_pointer()
        except RepositoryBusy:
            # Someone else owns the destination now; leave it alone
            raise
        except BaseException:
            self._remove_leftovers(layout, created_root)
            raise

        target_branch = branch
        target = None
        try:
            with RepositoryLock(layout.root, operation="clone"):
                target_branch = target_branch or self.backend.default_branch(layout.bare_dir)
                target = resolve(layout.root, target_branch)
                self.backend.add_worktree(layout.bare_dir, target, target_branch)
        except RepositoryBusy:
            raise
        except Exception as e:
            logger.error(f"Clone of {url} kept at {layout.bare_dir}, but worktree creation failed: {e}")
            raise WorktreeCreateFailed(
                layout.bare_dir,
                target or layout.root / "<branch>",
                target_branch or "<branch>",
                e,
            ) from e

        registry = WorktreeRegistry(self.backend, layout, use_cache=self.config.use_cache)
        registry.refresh()
        entry = registry.find(path=target)

        logger.info(f"Cloned {url}: worktree for '{target_branch}' at {target}")
        return entry or Worktree(path=str(target), branch=target_branch)

    def _remove_leftovers(self, layout: Layout, created_root: bool) -> None:
        """Remove what a failed clone left in the destination."""
        if layout.bare_dir.exists():
            logger.warning(f"Removing partial bare store {layout.bare_dir}")
            shutil.rmtree(layout.bare_dir, ignore_errors=True)
        if layout.git_pointer.is_file():
            layout.git_pointer.unlink()

        if created_root and layout.root.is_dir() and not any(layout.root.iterdir()):
            layout.root.rmdir()
            logger.debug(f"Removed empty destination {layout.root}")
