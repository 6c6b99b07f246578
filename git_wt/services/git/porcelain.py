"""Parser for ``git worktree list --porcelain``."""

from typing import Any, Dict, List

from git_wt.models.worktree import Worktree


def _to_worktree(record: Dict[str, Any]) -> Worktree:
    return Worktree(
        path=record["path"],
        branch=record.get("branch", ""),
        head=record.get("HEAD", ""),
        locked=record.get("locked", False),
        lock_reason=record.get("lock_reason"),
        prunable=record.get("prunable", False),
    )


def parse_worktree_list(output: str) -> List[Worktree]:
    """Parse porcelain output into Worktree records.

    Format (blank line between entries):
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name    (or "detached", or "bare")
        locked [reason]
        prunable [reason]

    The bare store's own entry is skipped.
    """
    worktrees: List[Worktree] = []
    current: Dict[str, Any] = {}

    def flush():
        if current.get("path") and not current.get("bare"):
            worktrees.append(_to_worktree(current))

    for line in output.split("\n"):
        line = line.strip()

        if not line:
            # Empty line marks end of worktree entry
            flush()
            current = {}
            continue

        key, _, value = line.partition(" ")
        if key == "worktree":
            # Tolerate a missing blank line between entries
            flush()
            current = {"path": value}
        elif key == "bare":
            current["bare"] = True
        elif key == "HEAD":
            current["HEAD"] = value
        elif key == "branch":
            # "branch refs/heads/feature/x" -> "feature/x"
            current["branch"] = value[len("refs/heads/"):] if value.startswith("refs/heads/") else value
        elif key == "detached":
            current["branch"] = ""
        elif key == "locked":
            current["locked"] = True
            current["lock_reason"] = value or None
        elif key == "prunable":
            current["prunable"] = True

    # Handle last entry if no trailing blank line
    flush()
    return worktrees
