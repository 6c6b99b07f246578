"""Tests for planning pointer rewrites before init"""

from pathlib import Path

from git_wt.layout import Layout
from git_wt.services.relink import plan_relinks, read_gitfile


def _layout(repo) -> Layout:
    return Layout.at(repo.working_dir)


class TestReadGitfile:
    """Test read_gitfile."""

    def test_reads_value(self, temp_dir):
        (temp_dir / ".git").write_text("gitdir: ../store/worktrees/x\n")
        assert read_gitfile(temp_dir / ".git") == "../store/worktrees/x"

    def test_directory_is_not_a_gitfile(self, temp_dir):
        (temp_dir / ".git").mkdir()
        assert read_gitfile(temp_dir / ".git") is None

    def test_other_content_ignored(self, temp_dir):
        (temp_dir / ".git").write_text("not a pointer\n")
        assert read_gitfile(temp_dir / ".git") is None


class TestPlanRelinks:
    """Test plan_relinks against real repositories."""

    def test_plain_repository_needs_nothing(self, git_repo):
        layout = _layout(git_repo)
        assert not plan_relinks(layout, layout.root / "main")

    def test_linked_worktree_outside(self, git_repo, temp_dir):
        layout = _layout(git_repo)
        linked = temp_dir / "linked"
        git_repo.git.worktree("add", "-b", "other", str(linked))
        original = (linked / ".git").read_text()

        plan = plan_relinks(layout, layout.root / "main")

        assert plan.settings == []
        assert len(plan.files) == 1
        rewrite = plan.files[0]
        assert rewrite.path == linked / ".git"
        assert rewrite.original == original
        assert rewrite.updated == f"gitdir: {layout.bare_dir / 'worktrees' / 'linked'}\n"

    def test_missing_linked_worktree_skipped(self, git_repo, temp_dir):
        """A worktree whose directory is gone has no pointer to fix."""
        layout = _layout(git_repo)
        linked = temp_dir / "linked"
        git_repo.git.worktree("add", "-b", "other", str(linked))
        (linked / ".git").unlink()

        assert not plan_relinks(layout, layout.root / "main")

    def test_submodule(self, submodule_repo):
        layout = _layout(submodule_repo)
        target = layout.root / "main"

        plan = plan_relinks(layout, target)

        assert [(Path(s.git_dir), s.original, s.updated) for s in plan.settings] == [
            (layout.bare_dir / "modules" / "sub", "../../../sub", "../../../main/sub"),
        ]
        assert [(f.path, f.updated) for f in plan.files] == [
            (target / "sub" / ".git", "gitdir: ../../.bare/modules/sub\n"),
        ]

    def test_planning_changes_nothing(self, submodule_repo, temp_dir):
        layout = _layout(submodule_repo)
        submodule_repo.git.worktree("add", "-b", "other", str(temp_dir / "linked"))
        gitfiles = {p: p.read_text() for p in (layout.root / "sub" / ".git", temp_dir / "linked" / ".git")}

        plan_relinks(layout, layout.root / "main")

        assert {p: p.read_text() for p in gitfiles} == gitfiles
        assert (layout.root / ".git").is_dir()
