"""Core functionality for git-wt"""

from pathlib import Path
from typing import List, Optional, Union

from git_wt.config import Config
from git_wt.exceptions import NotARepository
from git_wt.layout import Layout, find_layout_root
from git_wt.logging_config import get_logger
from git_wt.models.worktree import PruneReport, Worktree
from git_wt.services.backend import Backend
from git_wt.services.cleanup import WorktreePruner
from git_wt.services.clone_orchestrator import CloneOrchestrator
from git_wt.services.git.backend import GitBackend
from git_wt.services.registry import WorktreeRegistry
from git_wt.services.reorganizer import Reorganizer

logger = get_logger(__name__)


class WorktreeManager:
    """Entry point for the worktree lifecycle commands."""

    def __init__(self, config: Optional[Config] = None, backend: Optional[Backend] = None):
        """Initialize WorktreeManager.

        Args:
            config: Configuration; defaults to Config()
            backend: Backend to drive; defaults to GitBackend
        """
        self.config = config or Config()
        self.backend = backend or GitBackend(self.config)
        self.reorganizer = Reorganizer(self.backend, self.config)
        self.clone_orchestrator = CloneOrchestrator(self.backend, self.config)
        self.pruner = WorktreePruner(self.backend, self.config)

    def init(self, path: Union[str, Path, None] = None) -> Worktree:
        """Convert the repository at ``path`` (default: cwd) to the worktree layout."""
        return self.reorganizer.run(path or Path.cwd())

    def clone(
        self,
        url: str,
        directory: Union[str, Path, None] = None,
        branch: Optional[str] = None,
    ) -> Worktree:
        return self.clone_orchestrator.run(url, directory, branch)

    def locate(self, path: Union[str, Path, None] = None) -> Layout:
        """Layout of the managed repository containing ``path`` (default: cwd).

        Raises:
            NotARepository: ``path`` is not inside a managed repository
        """
        start = Path(path) if path else Path.cwd()
        root = find_layout_root(start)
        if root is None:
            raise NotARepository(start, "not inside a git-wt managed repository (run 'git wt init' first)")
        return Layout(root)

    def registry(self, path: Union[str, Path, None] = None) -> WorktreeRegistry:
        return WorktreeRegistry(self.backend, self.locate(path), use_cache=self.config.use_cache)

    def list(self, path: Union[str, Path, None] = None) -> List[Worktree]:
        registry = self.registry(path)
        return registry.refresh()

    def prune(self, path: Union[str, Path, None] = None, force: Optional[bool] = None) -> PruneReport:
        return self.pruner.prune(self.locate(path).root, force=force)
