"""Registry of the worktrees attached to a managed repository."""
import json
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

from git_wt.layout import Layout
from git_wt.logging_config import get_logger
from git_wt.models.worktree import Worktree
from git_wt.services.backend import Backend

# Import fcntl for POSIX file locking (Unix/Linux/macOS)
try:
    import fcntl
    HAS_FCNTL = True
except ImportError:
    HAS_FCNTL = False

logger = get_logger(__name__)


def _key(path: Union[str, Path]) -> str:
    return str(Path(path).resolve())


class WorktreeRegistry:
    """In-memory view of the backend's worktrees, mirrored to a cache file.

    The backend is authoritative: ``refresh`` rebuilds the view from it and
    ``list``/``find`` never answer from the cache file. The cache only
    records the last refresh so the next one can report worktrees that
    disappeared in between.
    """

    def __init__(self, backend: Backend, layout: Layout, use_cache: bool = True):
        self.backend = backend
        self.layout = layout
        self.use_cache = use_cache
        self._entries: Optional[Dict[str, Worktree]] = None

    @property
    def cache_file(self) -> Path:
        return self.layout.cache_path

    def list(self) -> List[Worktree]:
        """All worktrees; refreshes from the backend on first use."""
        if self._entries is None:
            self.refresh()
        return list(self._entries.values())

    def find(self, path: Optional[Union[str, Path]] = None, branch: Optional[str] = None) -> Optional[Worktree]:
        """Find a worktree by path or by branch name."""
        if path is None and branch is None:
            raise ValueError("find() needs a path or a branch")

        entries = self.list()
        if path is not None:
            return next((wt for wt in entries if _key(wt.path) == _key(path)), None)
        return next((wt for wt in entries if wt.branch == branch), None)

    def refresh(self) -> List[Worktree]:
        """Re-synchronize with the backend."""
        worktrees = self.backend.list_worktrees(self.layout.bare_dir)

        entries: Dict[str, Worktree] = {}
        for wt in worktrees:
            wt.stale = wt.prunable or not Path(wt.path).exists()
            entries[_key(wt.path)] = wt

        if self.use_cache:
            previous = self._load_cache()
            for key in previous.keys() - entries.keys():
                logger.info(f"Worktree {previous[key]} is no longer known to git")

        self._entries = entries
        logger.debug(f"Registry refreshed: {len(entries)} worktree(s)")

        if self.use_cache:
            self._save_cache()
        return list(entries.values())

    def mark_stale(self, path: Union[str, Path]) -> bool:
        """Flag a worktree as stale in the in-memory view.

        Returns:
            False when the registry has no entry for ``path``
        """
        entry = self.find(path=path)
        if entry is None:
            return False
        entry.stale = True
        logger.debug(f"Marked {entry.path} stale")
        return True

    @contextmanager
    def _acquire_cache_lock(self, file_handle, operation: str = "read"):
        """Acquire file lock for cache operations.

        Args:
            file_handle: Open file handle to lock
            operation: Type of operation ("read" or "write")
        """
        if not HAS_FCNTL:
            logger.debug("File locking not available on this platform")
            yield
            return

        # Exclusive lock for writes, shared lock for reads
        lock_type = fcntl.LOCK_EX if operation == "write" else fcntl.LOCK_SH
        fcntl.flock(file_handle.fileno(), lock_type)
        try:
            yield
        finally:
            fcntl.flock(file_handle.fileno(), fcntl.LOCK_UN)

    def _load_cache(self) -> Dict[str, Worktree]:
        """Entries recorded by the last refresh; empty when unreadable."""
        if not self.cache_file.exists():
            return {}

        try:
            with open(self.cache_file, 'r') as f:
                with self._acquire_cache_lock(f, operation="read"):
                    cache_data = json.load(f)
            return {
                _key(item["path"]): Worktree.from_dict(item)
                for item in cache_data.get("worktrees", [])
            }
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            # The cache is disposable; the next save replaces it
            logger.warning(f"Ignoring unreadable registry cache {self.cache_file}: {e}")
            return {}

    def _save_cache(self) -> None:
        """Write the current view using an atomic temp-file rename."""
        cache_data = {
            "root": str(self.layout.root),
            "last_updated": datetime.now().isoformat(),
            "worktrees": [wt.to_dict() for wt in self._entries.values()],
        }

        temp_file = self.cache_file.with_suffix('.tmp')
        try:
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_file, 'w') as f:
                with self._acquire_cache_lock(f, operation="write"):
                    json.dump(cache_data, f, indent=2)
                    f.flush()

            # Atomic rename (POSIX systems guarantee atomicity)
            temp_file.replace(self.cache_file)
            logger.debug(f"Saved registry cache with {len(self._entries)} worktree(s)")
        except OSError as e:
            logger.warning(f"Failed to save registry cache: {e}")
        finally:
            if temp_file.exists():
                temp_file.unlink()
