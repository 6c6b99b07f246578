"""Pytest fixtures for git-wt tests"""
import tempfile
from pathlib import Path
import pytest
import git

from git_wt.config import Config
from tests.fakes import FakeBackend


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        # Resolve so paths compare equal to the ones git reports
        yield Path(tmpdir).resolve()


@pytest.fixture
def config():
    """Configuration with instant retries."""
    return Config(retry_initial_delay=0.0, retry_max_delay=0.0)


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository for testing."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    # Initialize repository
    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    # Create initial commit on main branch
    (repo_path / "README.md").write_text("# Test Repository\n")
    (repo_path / "src").mkdir()
    (repo_path / "src" / "app.py").write_text("print('hello')\n")
    (repo_path / "data.bin").write_bytes(bytes(range(256)))
    repo.git.add("--all")
    repo.git.commit("-m", "Initial commit")

    # Rename master to main if needed
    repo.git.branch("-M", "main")

    yield repo

    # Cleanup
    repo.close()


@pytest.fixture
def remote_repo(temp_dir):
    """A bare repository on disk that clone can use as its URL.

    Has branches ``main`` (HEAD) and ``feature/login``.
    """
    source_path = temp_dir / "source"
    source_path.mkdir()
    source = git.Repo.init(source_path)
    source.config_writer().set_value("user", "name", "Test User").release()
    source.config_writer().set_value("user", "email", "test@example.com").release()

    (source_path / "README.md").write_text("# Remote Repository\n")
    source.git.add("README.md")
    source.git.commit("-m", "Initial commit")
    source.git.branch("-M", "main")
    source.git.branch("feature/login")

    remote_path = temp_dir / "remote.git"
    remote = source.clone(str(remote_path), bare=True)
    remote.git.symbolic_ref("HEAD", "refs/heads/main")
    source.close()

    yield remote

    remote.close()


@pytest.fixture
def fake_backend():
    """In-memory backend."""
    return FakeBackend()


def snapshot(root: Path, skip=(".git", ".bare")) -> dict:
    """Relative path -> bytes of every file under ``root``, skipping ``skip`` at the top."""
    files = {}
    for path in sorted(root.rglob("*")):
        relative = path.relative_to(root)
        if relative.parts[0] in skip or not path.is_file():
            continue
        files[relative.as_posix()] = path.read_bytes()
    return files


@pytest.fixture
def submodule_repo(git_repo, temp_dir):
    """git_repo with a committed submodule checked out at ``sub``."""
    lib_path = temp_dir / "lib"
    lib_path.mkdir()
    lib = git.Repo.init(lib_path)
    lib.config_writer().set_value("user", "name", "Test User").release()
    lib.config_writer().set_value("user", "email", "test@example.com").release()
    (lib_path / "lib.py").write_text("VALUE = 1\n")
    lib.git.add("lib.py")
    lib.git.commit("-m", "Library")
    lib.close()

    # Local clones over the file transport are off by default since git 2.38.1
    git_repo.git.execute(
        ["git", "-c", "protocol.file.allow=always", "submodule", "add", str(lib_path), "sub"]
    )
    git_repo.git.commit("-m", "Add submodule")
    return git_repo
