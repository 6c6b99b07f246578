"""Configuration handling for git-wt"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

import git

from git_wt.logging_config import get_logger

logger = get_logger(__name__)


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in ("true", "yes", "on", "1")


# (git config key, Config field, parser)
GIT_CONFIG_KEYS: Tuple[Tuple[str, str, Callable[[str], Any]], ...] = (
    ("wt.cloneAttempts", "clone_attempts", int),
    ("wt.lockStaleDays", "lock_stale_days", int),
    ("wt.useCache", "use_cache", _parse_bool),
)


@dataclass
class Config:
    """Configuration for git-wt with validation."""

    # Clone retries (transient network errors only)
    clone_attempts: int = 3
    retry_initial_delay: float = 1.0
    retry_backoff_factor: float = 2.0
    retry_max_delay: float = 30.0

    # Locks older than this are treated as abandoned by prune
    lock_stale_days: int = 30

    # Persist the registry cache inside the bare store
    use_cache: bool = True

    # Execution modes
    force: bool = False
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_clone_attempts()
        self._validate_retry_delays()
        self._validate_lock_stale_days()

    def _validate_clone_attempts(self):
        """Validate clone_attempts is positive."""
        if self.clone_attempts <= 0:
            raise ValueError(f"clone_attempts must be positive, got {self.clone_attempts}")

    def _validate_retry_delays(self):
        if self.retry_initial_delay < 0:
            raise ValueError(f"retry_initial_delay cannot be negative, got {self.retry_initial_delay}")
        if self.retry_backoff_factor < 1:
            raise ValueError(f"retry_backoff_factor must be at least 1, got {self.retry_backoff_factor}")
        if self.retry_max_delay < self.retry_initial_delay:
            raise ValueError(
                f"retry_max_delay ({self.retry_max_delay}) must not be below "
                f"retry_initial_delay ({self.retry_initial_delay})"
            )

    def _validate_lock_stale_days(self):
        """Validate lock_stale_days is positive."""
        if self.lock_stale_days <= 0:
            raise ValueError(f"lock_stale_days must be positive, got {self.lock_stale_days}")

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "clone_attempts": self.clone_attempts,
            "retry_initial_delay": self.retry_initial_delay,
            "retry_backoff_factor": self.retry_backoff_factor,
            "retry_max_delay": self.retry_max_delay,
            "lock_stale_days": self.lock_stale_days,
            "use_cache": self.use_cache,
            "force": self.force,
            "verbose": self.verbose,
            "debug": self.debug,
        }

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary, ignoring unknown keys."""
        known_fields = set(cls.__dataclass_fields__)
        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)

    @classmethod
    def from_git_config(cls, cwd: Optional[str] = None, **overrides) -> "Config":
        """Create Config from ``wt.*`` git config keys, then apply overrides.

        Overrides set to None are ignored so CLI flags that were not given
        leave the git config value in place.
        """
        values = {}
        runner = git.Git(cwd)
        for key, field_name, parse in GIT_CONFIG_KEYS:
            try:
                raw = runner.config("--get", key)
            except git.exc.GitCommandError:
                # Exit status 1 means the key is unset
                continue
            try:
                values[field_name] = parse(raw)
            except ValueError:
                raise ValueError(f"Invalid value for git config '{key}': {raw!r}")
            logger.debug(f"git config {key} = {raw}")

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_dict(values)
