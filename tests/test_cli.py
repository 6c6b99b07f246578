"""Tests for the command-line interface"""

import signal
from pathlib import Path
from unittest.mock import patch

import pytest

from git_wt.cli.args import parse_args
from git_wt.cli.main import main
from git_wt.exceptions import AliasSetupFailed


def _output(capsys):
    """Captured stdout with line wrapping undone."""
    return " ".join(capsys.readouterr().out.split())


@pytest.fixture(autouse=True)
def restore_sigterm():
    handler = signal.getsignal(signal.SIGTERM)
    yield
    signal.signal(signal.SIGTERM, handler)


class TestParseArgs:
    """Test argument parsing."""

    def test_clone(self):
        args = parse_args(["clone", "https://h/r.git", "dest", "-b", "dev", "--clone-attempts", "5"])
        assert args.command == "clone"
        assert args.url == "https://h/r.git"
        assert args.directory == "dest"
        assert args.branch == "dev"
        assert args.clone_attempts == 5

    def test_prune_options(self):
        args = parse_args(["-v", "prune", "--force", "--lock-stale-days", "7"])
        assert args.verbose
        assert args.force
        assert args.lock_stale_days == 7
        assert args.path is None

    def test_command_required(self):
        with pytest.raises(SystemExit) as exc_info:
            parse_args([])
        assert exc_info.value.code == 2

    def test_attempts_must_be_positive(self):
        with pytest.raises(SystemExit):
            parse_args(["clone", "u", "--clone-attempts", "0"])


class TestMain:
    """Test main() end to end."""

    def test_init_and_list(self, git_repo, capsys):
        root = Path(git_repo.working_dir)

        assert main(["init", str(root)]) == 0
        assert (root / "main" / "README.md").exists()

        assert main(["list", str(root)]) == 0
        output = _output(capsys)
        assert "main" in output
        assert "active" in output

    def test_init_dirty_exit_code(self, git_repo, capsys):
        root = Path(git_repo.working_dir)
        (root / "README.md").write_text("changed\n")

        assert main(["init", str(root)]) == 12
        assert "uncommitted changes" in _output(capsys)
        assert (root / ".git").is_dir()

    def test_no_cache(self, git_repo):
        root = Path(git_repo.working_dir)

        assert main(["--no-cache", "init", str(root)]) == 0
        assert not (root / ".bare" / "git-wt" / "registry.json").exists()

    def test_list_outside_managed_repository(self, temp_dir, capsys):
        assert main(["list", str(temp_dir)]) == 10
        assert "git wt init" in _output(capsys)

    def test_clone(self, remote_repo, temp_dir, capsys):
        dest = temp_dir / "cloned"

        assert main(["clone", str(remote_repo.git_dir), str(dest), "--clone-attempts", "1"]) == 0
        assert (dest / "main" / "README.md").exists()
        assert "Cloned" in _output(capsys)

    def test_clone_into_non_empty_directory(self, remote_repo, temp_dir):
        dest = temp_dir / "cloned"
        dest.mkdir()
        (dest / "file").write_text("x")

        assert main(["clone", str(remote_repo.git_dir), str(dest)]) == 13

    def test_prune(self, git_repo, capsys):
        root = Path(git_repo.working_dir)
        main(["init", str(root)])

        assert main(["prune", str(root)]) == 0
        assert "Pruned 0, skipped 0" in _output(capsys)

    def test_setup_alias_failure_prints_manual_command(self, capsys):
        with patch("git_wt.cli.main.setup_alias", side_effect=AliasSetupFailed("read-only config")):
            assert main(["setup-alias"]) == 23

        output = _output(capsys)
        assert "git config --global alias.wt '!git-wt'" in output

    def test_setup_alias(self, capsys):
        with patch("git_wt.cli.main.setup_alias", return_value=True):
            assert main(["setup-alias"]) == 0
        assert "git wt" in _output(capsys)

    def test_interrupt(self, git_repo, capsys):
        with patch("git_wt.cli.main.WorktreeManager") as mock_manager:
            mock_manager.return_value.init.side_effect = KeyboardInterrupt
            assert main(["init", str(git_repo.working_dir)]) == 130
        assert "cancelled" in _output(capsys)
