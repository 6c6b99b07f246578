"""Tests for layout paths, models and error formatting"""

from datetime import datetime

from git_wt.exceptions import (
    GitWtError,
    NetworkTransient,
    PruneSkipped,
    ReorganizeFailed,
    RepositoryBusy,
)
from git_wt.layout import Layout, find_layout_root
from git_wt.models.worktree import PruneReport, Worktree


class TestLayout:
    """Test Layout and find_layout_root."""

    def test_paths(self, temp_dir):
        layout = Layout.at(temp_dir)
        assert layout.bare_dir == temp_dir / ".bare"
        assert layout.git_pointer == temp_dir / ".git"
        assert layout.lock_path == temp_dir / ".git-wt.lock"
        assert layout.cache_path == temp_dir / ".bare" / "git-wt" / "registry.json"

    def test_is_managed(self, temp_dir):
        layout = Layout.at(temp_dir)
        assert not layout.is_managed()

        layout.bare_dir.mkdir()
        layout.write_git_pointer()
        assert layout.is_managed()

    def test_find_layout_root(self, temp_dir):
        (temp_dir / ".bare").mkdir()
        Layout.at(temp_dir).write_git_pointer()
        nested = temp_dir / "main" / "src"
        nested.mkdir(parents=True)

        assert find_layout_root(nested) == temp_dir
        assert find_layout_root(temp_dir / ".bare") == temp_dir
        assert find_layout_root(temp_dir) == temp_dir

    def test_find_layout_root_outside(self, temp_dir):
        assert find_layout_root(temp_dir) is None


class TestWorktree:
    """Test the Worktree model."""

    def test_dict_round_trip_keeps_lock_time(self):
        worktree = Worktree(
            path="/r/main",
            branch="main",
            head="a" * 40,
            locked=True,
            lock_reason="usb",
            locked_since=datetime(2024, 1, 2, 3, 4, 5),
        )
        assert Worktree.from_dict(worktree.to_dict()) == worktree

    def test_str(self):
        assert str(Worktree(path="/r/main", branch="main")) == "main @ /r/main [active]"
        assert str(Worktree(path="/r/x", branch="", head="abcdef123", stale=True)) == "(detached abcdef1) @ /r/x [stale]"

    def test_prune_report_counts(self):
        report = PruneReport(pruned=["/r/a", "/r/b"], skipped=[PruneSkipped("/r/c", "locked")])
        assert report.pruned_count == 2
        assert report.skipped_count == 1


class TestErrors:
    """Test error messages and exit codes."""

    def test_context_in_message(self):
        error = GitWtError("Something failed", path="/r", branch="main", detail="because")
        assert str(error) == "Something failed [branch 'main'] [path /r]: because"

    def test_exit_codes_distinct(self):
        codes = [cls.exit_code for cls in GitWtError.__subclasses__() if cls is not PruneSkipped]
        assert len(codes) == len(set(codes))

    def test_busy_holder(self):
        error = RepositoryBusy("/r", "pid 7 on host (init, since now)")
        assert "pid 7" in str(error)

    def test_network_attempts(self):
        assert "3 attempts" in str(NetworkTransient("u", "timed out", attempts=3))

    def test_reorganize_failed_states(self):
        clean = ReorganizeFailed("/r", OSError("disk full"))
        assert clean.rolled_back
        assert "restored" in str(clean)

        partial = ReorganizeFailed("/r", OSError("disk full"), ["undo 'move a' failed: busy"])
        assert not partial.rolled_back
        assert "ROLLBACK INCOMPLETE" in str(partial)
