"""Conversion of a conventional checkout into the worktree layout (``init``)."""

import os
import shutil
from pathlib import Path
from typing import Optional, Union

import git

from git_wt.config import Config
from git_wt.constants import RESERVED_NAMES
from git_wt.exceptions import (
    AlreadyWorktree,
    DetachedHead,
    DirtyWorkingTree,
    NotARepository,
    ReorganizeFailed,
)
from git_wt.layout import Layout
from git_wt.logging_config import get_logger
from git_wt.models.worktree import Worktree
from git_wt.services.backend import Backend
from git_wt.services.path_resolver import resolve
from git_wt.services.relink import RelinkPlan, plan_relinks
from git_wt.services.registry import WorktreeRegistry
from git_wt.utils.locking import RepositoryLock
from git_wt.utils.transaction import CompensatingTransaction

logger = get_logger(__name__)


class Reorganizer:
    """Migrate ``root`` to ``root/.bare`` plus a ``root/<branch>`` worktree.

    The repository ends up either fully migrated or exactly as it was: every
    change is a step of a CompensatingTransaction, undone in reverse order
    when a later step fails or the run is interrupted.
    """

    def __init__(self, backend: Backend, config: Optional[Config] = None):
        self.backend = backend
        self.config = config or Config()

    def _check_preconditions(self, layout: Layout) -> None:
        git_path = layout.git_pointer
        if layout.bare_dir.exists() or git_path.is_file():
            raise AlreadyWorktree(layout.root)
        if not git_path.is_dir():
            raise NotARepository(layout.root, "no .git directory here (run init at the repository's top level)")
        if (git_path / "commondir").exists():
            # .git is itself a linked worktree's admin dir
            raise AlreadyWorktree(layout.root, "this checkout is a linked worktree")

        repo_config = git_path / "config"
        if repo_config.exists() and _is_bare(repo_config):
            raise AlreadyWorktree(layout.root, "repository is already bare")

    def run(self, root: Union[str, Path]) -> Worktree:
        """Migrate the repository at ``root``.

        Returns:
            The registry entry of the new worktree

        Raises:
            NotARepository, AlreadyWorktree, DetachedHead, DirtyWorkingTree,
            PathConflict, InvalidBranchName: preconditions; nothing changed
            RepositoryBusy: another command holds the repository lock
            ReorganizeFailed: a step failed; see ``rolled_back``
        """
        layout = Layout.at(root)
        if not layout.root.is_dir():
            raise NotARepository(layout.root, "directory does not exist")

        with RepositoryLock(layout.root, operation="init"):
            self._check_preconditions(layout)

            branch = self.backend.current_branch(layout.root)
            if branch is None:
                raise DetachedHead(layout.root)
            if self.backend.has_uncommitted_changes(layout.root):
                raise DirtyWorkingTree(layout.root, branch)

            target = resolve(layout.root, branch)
            relinks = plan_relinks(layout, target)
            logger.info(f"Migrating {layout.root} (branch '{branch}') to worktree layout at {target}")

            tx = CompensatingTransaction(f"init {layout.root}")
            try:
                self._migrate(tx, layout, branch, target, relinks)
            except BaseException as e:
                errors = tx.rollback()
                if errors:
                    logger.error(f"Rollback of {layout.root} incomplete")
                else:
                    logger.info(f"Rolled back {layout.root} to its original layout")
                raise ReorganizeFailed(layout.root, e, errors) from e
            tx.commit()

            registry = WorktreeRegistry(self.backend, layout, use_cache=self.config.use_cache)
            registry.refresh()
            entry = registry.find(path=target)

        logger.info(f"Migrated {layout.root}: worktree for '{branch}' at {target}")
        return entry or Worktree(path=str(target), branch=branch)

    def _migrate(
        self,
        tx: CompensatingTransaction,
        layout: Layout,
        branch: str,
        target: Path,
        relinks: RelinkPlan,
    ) -> None:
        git_dir = layout.git_pointer
        bare_dir = layout.bare_dir

        tx.step(
            f"move {git_dir} to {bare_dir}",
            lambda: os.rename(git_dir, bare_dir),
            lambda: os.rename(bare_dir, git_dir),
        )
        tx.step(
            "mark store bare",
            lambda: self.backend.set_bare(bare_dir, True),
            lambda: self.backend.set_bare(bare_dir, False),
        )
        tx.step(
            f"write {git_dir}",
            layout.write_git_pointer,
            git_dir.unlink,
        )

        target_existed = target.exists()
        tx.step(
            f"add worktree {target}",
            lambda: self._add_worktree(bare_dir, target, branch, target_existed),
            lambda: self._drop_worktree(bare_dir, target, target_existed),
        )

        # Working files keep their bytes: they are moved, not checked out again
        for entry in sorted(os.listdir(layout.root)):
            if entry in RESERVED_NAMES or entry == target.name:
                continue
            source = layout.root / entry
            destination = target / entry
            tx.step(
                f"move {entry}",
                lambda s=source, d=destination: os.rename(s, d),
                lambda s=source, d=destination: os.rename(d, s),
            )

        # Linked worktrees and submodules still name the old locations
        for rewrite in relinks.files:
            tx.step(
                f"relink {rewrite.path}",
                lambda r=rewrite: r.path.write_text(r.updated),
                lambda r=rewrite: r.path.write_text(r.original),
            )
        for setting in relinks.settings:
            tx.step(
                f"set core.worktree of {setting.git_dir}",
                lambda s=setting: self.backend.set_core_worktree(s.git_dir, s.updated),
                lambda s=setting: self.backend.set_core_worktree(s.git_dir, s.original),
            )

        tx.step("rebuild index", lambda: self.backend.reset_index(target))

    def _add_worktree(self, bare_dir: Path, target: Path, branch: str, target_existed: bool) -> None:
        try:
            self.backend.add_worktree(bare_dir, target, branch, checkout=False)
        except BaseException:
            # Leave nothing behind; the step's compensation is not registered
            if not target_existed and target.exists():
                shutil.rmtree(target, ignore_errors=True)
            raise

    def _drop_worktree(self, bare_dir: Path, target: Path, target_existed: bool) -> None:
        if target_existed:
            # Was an empty directory before; keep it that way
            for child in target.iterdir():
                if child.is_dir() and not child.is_symlink():
                    shutil.rmtree(child)
                else:
                    child.unlink()
        elif target.exists():
            shutil.rmtree(target)
        self.backend.prune_worktrees(bare_dir)


def _is_bare(config_file: Path) -> bool:
    """Read core.bare straight from the config file."""
    reader = git.GitConfigParser(str(config_file), read_only=True)
    try:
        return bool(reader.get_value("core", "bare", False))
    finally:
        reader.release()
