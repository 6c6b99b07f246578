"""Repository lock shared by all mutating git-wt commands."""

import json
import os
import socket
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from git_wt.constants import LOCK_FILENAME
from git_wt.exceptions import RepositoryBusy
from git_wt.logging_config import get_logger

logger = get_logger(__name__)


def _pid_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists, owned by someone else
        return True
    return True


class RepositoryLock:
    """Exclusive lock file in the repository root.

    Created with O_EXCL like git's own ``*.lock`` files, so a second command
    fails immediately with RepositoryBusy instead of waiting. The file
    records who holds it and is removed on release.
    """

    def __init__(self, root: Union[str, Path], operation: str):
        self.root = Path(root)
        self.lock_path = self.root / LOCK_FILENAME
        self.operation = operation
        self._held = False

    def acquire(self) -> None:
        info = {
            "pid": os.getpid(),
            "host": socket.gethostname(),
            "operation": self.operation,
            "started": datetime.now().isoformat(timespec="seconds"),
        }
        try:
            fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            holder = self.describe_holder()
            logger.debug(f"Lock {self.lock_path} is held: {holder}")
            raise RepositoryBusy(self.root, holder)

        with os.fdopen(fd, "w") as f:
            json.dump(info, f)
            f.flush()
        self._held = True
        logger.debug(f"Acquired {self.lock_path} for {self.operation}")

    def release(self) -> None:
        if not self._held:
            return
        try:
            self.lock_path.unlink()
            logger.debug(f"Released {self.lock_path}")
        except FileNotFoundError:
            logger.warning(f"Lock file {self.lock_path} disappeared while held")
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    def describe_holder(self) -> Optional[str]:
        """Describe the current holder from the lock file, if readable."""
        try:
            data = json.loads(self.lock_path.read_text())
        except (OSError, ValueError):
            # Removed meanwhile, or the holder has not written it yet
            return None

        pid = data.get("pid")
        host = data.get("host", "?")
        description = f"pid {pid} on {host} ({data.get('operation', '?')}, since {data.get('started', '?')})"
        if host == socket.gethostname() and isinstance(pid, int) and not _pid_alive(pid):
            description += (
                f"; that process is no longer running, remove {self.lock_path} "
                "if no git-wt command is active"
            )
        return description

    def __enter__(self) -> "RepositoryLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
