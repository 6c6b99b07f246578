"""Removal of stale worktrees (``prune``)."""

from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional, Union

from git_wt.config import Config
from git_wt.exceptions import GitWtError, PruneSkipped
from git_wt.layout import Layout
from git_wt.logging_config import get_logger
from git_wt.models.worktree import PruneReport, Worktree
from git_wt.services.backend import Backend
from git_wt.services.registry import WorktreeRegistry
from git_wt.utils.locking import RepositoryLock

logger = get_logger(__name__)


class WorktreePruner:
    """Reconcile the registry with the backend and drop stale worktrees."""

    def __init__(self, backend: Backend, config: Optional[Config] = None):
        self.backend = backend
        self.config = config or Config()

    def lock_expired(self, worktree: Worktree, now: Optional[datetime] = None) -> bool:
        """True when a worktree's lock is older than ``lock_stale_days``.

        Locks of unknown age never expire.
        """
        if not worktree.locked or worktree.locked_since is None:
            return False
        now = now or datetime.now()
        return now - worktree.locked_since > timedelta(days=self.config.lock_stale_days)

    def prune(self, root: Union[str, Path], force: Optional[bool] = None) -> PruneReport:
        """Prune the managed repository at ``root``.

        Args:
            root: Layout root
            force: Remove worktrees with expired locks even when they hold
                uncommitted changes (defaults to ``config.force``)

        Returns:
            PruneReport with pruned paths and skipped (locked, dirty or
            failed) entries. A failed removal never stops the final
            ``git worktree prune``
        """
        force = self.config.force if force is None else force
        layout = Layout.at(root)
        registry = WorktreeRegistry(self.backend, layout, use_cache=self.config.use_cache)
        report = PruneReport()

        with RepositoryLock(layout.root, operation="prune"):
            now = datetime.now()
            for wt in registry.refresh():
                expired = self.lock_expired(wt, now)
                if not (wt.stale or expired):
                    continue

                if wt.locked and not expired:
                    skipped = PruneSkipped(wt.path, "locked", branch=wt.branch, detail=wt.lock_reason)
                    logger.info(str(skipped))
                    report.skipped.append(skipped)
                    continue

                if wt.stale:
                    # Directory already gone; the backend prune below drops the entry
                    try:
                        if wt.locked:
                            self.backend.unlock_worktree(layout.bare_dir, wt.path)
                    except GitWtError as e:
                        self._skip_failed(report, wt, e)
                        continue
                    registry.mark_stale(wt.path)
                    report.pruned.append(wt.path)
                    logger.info(f"Pruning stale worktree {wt}")
                    continue

                # Abandoned lock, directory still present
                if not force and self.backend.has_uncommitted_changes(wt.path):
                    skipped = PruneSkipped(
                        wt.path,
                        "dirty",
                        branch=wt.branch,
                        detail="uncommitted changes; use --force to remove anyway",
                    )
                    logger.info(str(skipped))
                    report.skipped.append(skipped)
                    continue

                # Removed while still locked, so a failure leaves the lock as it was
                try:
                    self.backend.remove_worktree(layout.bare_dir, wt.path, force=force, locked=True)
                except GitWtError as e:
                    self._skip_failed(report, wt, e)
                    continue
                report.pruned.append(wt.path)
                logger.info(f"Removed worktree {wt} (lock older than {self.config.lock_stale_days} days)")

            self.backend.prune_worktrees(layout.bare_dir)
            registry.refresh()

        logger.info(f"Pruned {report.pruned_count} worktree(s), skipped {report.skipped_count}")
        return report

    def _skip_failed(self, report: PruneReport, worktree: Worktree, error: GitWtError) -> None:
        skipped = PruneSkipped(worktree.path, "failed", branch=worktree.branch, detail=str(error))
        logger.warning(str(skipped))
        report.skipped.append(skipped)
