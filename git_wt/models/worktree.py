"""Worktree data models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from git_wt.exceptions import PruneSkipped


@dataclass
class Worktree:
    """A worktree attached to a managed repository's bare store."""

    path: str
    branch: str  # Empty when detached
    head: str = ""
    locked: bool = False
    lock_reason: Optional[str] = None
    locked_since: Optional[datetime] = None
    prunable: bool = False  # Backend says its admin entry points nowhere
    stale: bool = False  # Directory missing or prunable

    @property
    def is_detached(self) -> bool:
        return not self.branch

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a cache-friendly dictionary."""
        return {
            "path": self.path,
            "branch": self.branch,
            "head": self.head,
            "locked": self.locked,
            "lock_reason": self.lock_reason,
            "locked_since": self.locked_since.isoformat() if self.locked_since else None,
            "prunable": self.prunable,
            "stale": self.stale,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Worktree":
        locked_since = data.get("locked_since")
        return cls(
            path=data["path"],
            branch=data.get("branch", ""),
            head=data.get("head", ""),
            locked=data.get("locked", False),
            lock_reason=data.get("lock_reason"),
            locked_since=datetime.fromisoformat(locked_since) if locked_since else None,
            prunable=data.get("prunable", False),
            stale=data.get("stale", False),
        )

    def __str__(self) -> str:
        """String representation of worktree."""
        status = "stale" if self.stale else ("locked" if self.locked else "active")
        branch = self.branch or f"(detached {self.head[:7]})"
        return f"{branch} @ {self.path} [{status}]"


@dataclass
class PruneReport:
    """Outcome of a prune run."""

    pruned: List[str] = field(default_factory=list)
    skipped: List[PruneSkipped] = field(default_factory=list)

    @property
    def pruned_count(self) -> int:
        return len(self.pruned)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)
