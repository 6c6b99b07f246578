"""Tests for branch-to-directory mapping"""

import pytest

from git_wt.exceptions import InvalidBranchName, PathConflict
from git_wt.services.path_resolver import destination_from_url, resolve, sanitize_branch


class TestSanitizeBranch:
    """Test sanitize_branch."""

    def test_plain_name_unchanged(self):
        assert sanitize_branch("main") == "main"

    def test_slashes_replaced(self):
        assert sanitize_branch("feature/login") == "feature-login"
        assert sanitize_branch("user\\fix/bug") == "user-fix-bug"

    def test_control_characters_replaced(self):
        assert sanitize_branch("a\tb") == "a-b"

    @pytest.mark.parametrize("branch", ["", ".", "..", ".bare", ".git", ".git-wt.lock", ".hidden"])
    def test_unusable_names_rejected(self, branch):
        with pytest.raises(InvalidBranchName):
            sanitize_branch(branch)


class TestResolve:
    """Test resolve."""

    def test_deterministic(self, temp_dir):
        """Same inputs give the same path."""
        assert resolve(temp_dir, "feature/x") == resolve(temp_dir, "feature/x")
        assert resolve(temp_dir, "feature/x") == temp_dir / "feature-x"

    def test_missing_target_ok(self, temp_dir):
        assert not (temp_dir / "main").exists()
        assert resolve(temp_dir, "main") == temp_dir / "main"

    def test_empty_directory_ok(self, temp_dir):
        (temp_dir / "main").mkdir()
        assert resolve(temp_dir, "main") == temp_dir / "main"

    def test_non_empty_directory_conflicts(self, temp_dir):
        (temp_dir / "main").mkdir()
        (temp_dir / "main" / "notes.txt").write_text("mine")

        with pytest.raises(PathConflict) as exc_info:
            resolve(temp_dir, "main")
        assert exc_info.value.branch == "main"

    def test_existing_file_conflicts(self, temp_dir):
        (temp_dir / "main").write_text("a file")
        with pytest.raises(PathConflict):
            resolve(temp_dir, "main")

    def test_leftover_worktree_directory_conflicts(self, temp_dir):
        """A directory that still holds files is never reused, whatever it was."""
        (temp_dir / "main").mkdir()
        (temp_dir / "main" / ".git").write_text("gitdir: /gone/worktrees/main\n")
        with pytest.raises(PathConflict):
            resolve(temp_dir, "main")


class TestDestinationFromUrl:
    """Test destination_from_url."""

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://github.com/org/repo.git", "repo"),
            ("https://github.com/org/repo", "repo"),
            ("https://github.com/org/repo/", "repo"),
            ("git@github.com:org/repo.git", "repo"),
            ("git@host:repo.git", "repo"),
            ("/srv/git/project.git", "project"),
        ],
    )
    def test_names(self, url, expected):
        assert destination_from_url(url) == expected

    def test_unusable_url(self):
        with pytest.raises(ValueError):
            destination_from_url(".git")
