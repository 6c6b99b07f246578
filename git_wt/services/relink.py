"""Pointer rewrites that keep linked worktrees and submodules working after ``init``.

``init`` renames ``.git`` to ``.bare`` and moves the working files one level
down. Git records the location of both sides in plain files:

- a linked worktree's ``.git`` file names its admin dir
  (``.git/worktrees/<id>``), whose ``gitdir`` file names the worktree back;
- a submodule's ``.git`` file names its store (``.git/modules/<name>``),
  whose ``core.worktree`` setting names the submodule's checkout.

``plan_relinks`` reads all of them before anything moves and returns the
rewrites needed afterwards. Pointers keep their style: absolute paths stay
absolute, relative ones are recomputed from the new locations.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional

import git

from git_wt.constants import RESERVED_NAMES
from git_wt.layout import Layout
from git_wt.logging_config import get_logger

logger = get_logger(__name__)

GITFILE_PREFIX = "gitdir:"


@dataclass(frozen=True)
class FileRewrite:
    """New content for a pointer file, at its post-migration location."""

    path: Path
    original: str
    updated: str


@dataclass(frozen=True)
class SettingRewrite:
    """New ``core.worktree`` for a submodule store."""

    git_dir: Path
    original: str
    updated: str


@dataclass
class RelinkPlan:
    files: List[FileRewrite] = field(default_factory=list)
    settings: List[SettingRewrite] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.files or self.settings)


class _Mover:
    """Maps pre-migration paths to where ``init`` puts them."""

    def __init__(self, layout: Layout, target: Path):
        self.root = layout.root
        self.git_dir = layout.git_pointer
        self.bare_dir = layout.bare_dir
        self.target = target

    def store(self, path: Path) -> Path:
        return self.bare_dir / path.relative_to(self.git_dir)

    def checkout(self, path: Path) -> Path:
        try:
            relative = path.relative_to(self.root)
        except ValueError:
            # Outside the repository; stays where it is
            return path
        if not relative.parts:
            return path
        top = relative.parts[0]
        if top in RESERVED_NAMES or top == self.target.name:
            return path
        return self.target / relative


def read_gitfile(path: Path) -> Optional[str]:
    """The ``gitdir:`` value of a ``.git`` file, or None when there is none."""
    if not path.is_file() or path.is_symlink():
        return None
    content = path.read_text()
    if not content.startswith(GITFILE_PREFIX):
        return None
    return content[len(GITFILE_PREFIX):].strip()


def _points_at(base: Path, value: str, expected: Path) -> bool:
    return Path(os.path.normpath(base / value)).resolve() == expected.resolve()


def _repoint(value: str, new_destination: Path, new_base: Path) -> str:
    if os.path.isabs(value):
        return str(new_destination)
    return os.path.relpath(new_destination, new_base)


def _linked_admin_dirs(git_dir: Path) -> Iterator[Path]:
    worktrees = git_dir / "worktrees"
    if not worktrees.is_dir():
        return
    for admin in sorted(worktrees.iterdir()):
        if admin.is_dir() and (admin / "gitdir").is_file():
            yield admin


def _module_dirs(modules: Path) -> Iterator[Path]:
    if not modules.is_dir():
        return
    for child in sorted(modules.iterdir()):
        if not child.is_dir() or child.is_symlink():
            continue
        if (child / "HEAD").is_file() and (child / "config").is_file():
            yield child
            yield from _module_dirs(child / "modules")
        else:
            # Submodule names may contain slashes
            yield from _module_dirs(child)


def _core_worktree(module_dir: Path) -> Optional[str]:
    reader = git.GitConfigParser(str(module_dir / "config"), read_only=True)
    try:
        value = reader.get_value("core", "worktree", "")
    finally:
        reader.release()
    return str(value) or None


def _plan_linked(mover: _Mover, admin: Path, plan: RelinkPlan) -> None:
    admin_file = admin / "gitdir"
    admin_content = admin_file.read_text()
    recorded = admin_content.strip()
    gitfile = Path(os.path.normpath(admin / recorded))
    worktree = gitfile.parent

    value = read_gitfile(gitfile)
    if value is None or not _points_at(worktree, value, admin):
        logger.debug(f"Skipping worktree entry {admin.name}: {gitfile} does not point back at it")
        return

    new_admin = mover.store(admin)
    new_worktree = mover.checkout(worktree)
    plan.files.append(
        FileRewrite(
            new_worktree / ".git",
            gitfile.read_text(),
            f"{GITFILE_PREFIX} {_repoint(value, new_admin, new_worktree)}\n",
        )
    )
    if new_worktree != worktree:
        plan.files.append(
            FileRewrite(
                new_admin / "gitdir",
                admin_content,
                f"{_repoint(recorded, new_worktree / '.git', new_admin)}\n",
            )
        )


def _plan_module(mover: _Mover, module_dir: Path, plan: RelinkPlan) -> None:
    setting = _core_worktree(module_dir)
    if setting is None:
        return
    worktree = Path(os.path.normpath(module_dir / setting))
    new_module = mover.store(module_dir)
    new_worktree = mover.checkout(worktree)

    updated = _repoint(setting, new_worktree, new_module)
    if updated != setting:
        plan.settings.append(SettingRewrite(new_module, setting, updated))

    gitfile = worktree / ".git"
    value = read_gitfile(gitfile)
    if value is None or not _points_at(worktree, value, module_dir):
        # Submodule not checked out, or absorbed somewhere else
        return
    updated_value = _repoint(value, new_module, new_worktree)
    if updated_value != value:
        plan.files.append(
            FileRewrite(new_worktree / ".git", gitfile.read_text(), f"{GITFILE_PREFIX} {updated_value}\n")
        )


def plan_relinks(layout: Layout, target: Path) -> RelinkPlan:
    """Rewrites needed once ``layout.git_pointer`` is ``layout.bare_dir``
    and the working files live in ``target``.

    Read-only; call it before the migration starts.
    """
    mover = _Mover(layout, target)
    git_dir = layout.git_pointer
    plan = RelinkPlan()

    for admin in _linked_admin_dirs(git_dir):
        _plan_linked(mover, admin, plan)

    module_roots = [git_dir / "modules"]
    module_roots.extend(admin / "modules" for admin in _linked_admin_dirs(git_dir))
    for modules in module_roots:
        for module_dir in _module_dirs(modules):
            _plan_module(mover, module_dir, plan)

    if plan:
        logger.debug(f"Relinking {len(plan.files)} pointer file(s) and {len(plan.settings)} core.worktree setting(s)")
    return plan
