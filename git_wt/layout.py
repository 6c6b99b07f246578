"""On-disk layout of a repository managed by git-wt.

A managed repository rooted at ``root`` keeps its bare store in
``root/.bare``, a ``root/.git`` file pointing at it, and one directory per
worktree next to them. ``init`` and ``clone`` both produce this layout.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from git_wt.constants import (
    BARE_DIRNAME,
    CACHE_DIRNAME,
    CACHE_FILENAME,
    GIT_POINTER_CONTENT,
    GIT_POINTER_NAME,
    LOCK_FILENAME,
)


@dataclass(frozen=True)
class Layout:
    """Paths of a managed repository."""

    root: Path

    @classmethod
    def at(cls, root: Union[str, Path]) -> "Layout":
        return cls(Path(root).resolve())

    @property
    def bare_dir(self) -> Path:
        return self.root / BARE_DIRNAME

    @property
    def git_pointer(self) -> Path:
        return self.root / GIT_POINTER_NAME

    @property
    def lock_path(self) -> Path:
        return self.root / LOCK_FILENAME

    @property
    def cache_path(self) -> Path:
        return self.bare_dir / CACHE_DIRNAME / CACHE_FILENAME

    def is_managed(self) -> bool:
        """True when root holds a bare store and a pointer file to it."""
        return self.bare_dir.is_dir() and self.git_pointer.is_file()

    def write_git_pointer(self) -> None:
        self.git_pointer.write_text(GIT_POINTER_CONTENT)


def find_layout_root(start: Union[str, Path]) -> Optional[Path]:
    """Walk up from ``start`` to the root of a managed repository.

    Works from the root itself, from any worktree below it, and from inside
    the bare store.
    """
    current = Path(start).resolve()
    for candidate in (current, *current.parents):
        if Layout(candidate).is_managed():
            return candidate
    return None
