"""Mapping from branch names to worktree directories."""

import re
from pathlib import Path
from typing import Union

from git_wt.constants import PATH_SEPARATOR_SUBSTITUTE, RESERVED_NAMES
from git_wt.exceptions import InvalidBranchName, PathConflict

# Path separators and control characters
_PATH_HOSTILE = re.compile(r"[/\\\x00-\x1f\x7f]")


def sanitize_branch(branch: str) -> str:
    """Turn a branch name into a single directory name.

    ``feature/login`` becomes ``feature-login``. The mapping is not
    reversible in general, so callers keep the original branch name next to
    the path (the registry stores both).

    Raises:
        InvalidBranchName: nothing usable remains, or the result would
            shadow a hidden or reserved layout entry
    """
    name = _PATH_HOSTILE.sub(PATH_SEPARATOR_SUBSTITUTE, branch or "").strip()
    if not name or name in (".", ".."):
        raise InvalidBranchName(branch, "empty after sanitizing")
    if name.startswith(".") or name in RESERVED_NAMES:
        raise InvalidBranchName(branch, f"'{name}' would clash with the layout's hidden entries")
    return name


def _is_empty_dir(path: Path) -> bool:
    return path.is_dir() and not any(path.iterdir())


def resolve(repo_root: Union[str, Path], branch: str) -> Path:
    """Worktree directory for ``branch`` under ``repo_root``.

    Deterministic for the same inputs. An existing target is accepted only
    when it is an empty directory; anything else is someone's data, stale
    worktree leftovers included.

    Raises:
        InvalidBranchName: see sanitize_branch
        PathConflict: target exists and holds data
    """
    target = Path(repo_root) / sanitize_branch(branch)

    if target.exists() or target.is_symlink():
        if not _is_empty_dir(target):
            raise PathConflict(target, "directory exists and is not empty", branch=branch)
    return target


def destination_from_url(url: str) -> str:
    """Directory name ``clone`` uses for ``url``.

    ``https://host/org/repo.git`` and ``git@host:org/repo.git`` both give
    ``repo``.

    Raises:
        ValueError: no usable name in ``url``
    """
    trimmed = url.strip().rstrip("/\\")
    name = re.split(r"[/\\:]", trimmed)[-1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    if not name or name in (".", ".."):
        raise ValueError(f"Cannot derive a directory name from '{url}'")
    return name
