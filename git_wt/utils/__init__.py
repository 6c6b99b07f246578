"""Utility functions for git-wt.

This package provides utility modules:
- locking: repository lock file shared by all mutating commands
- retry: bounded retries with backoff for transient network failures
- transaction: steps paired with compensating actions, undone in reverse
"""

from .locking import RepositoryLock
from .retry import retry_transient
from .transaction import CompensatingTransaction

__all__ = [
    "RepositoryLock",
    "retry_transient",
    "CompensatingTransaction",
]
