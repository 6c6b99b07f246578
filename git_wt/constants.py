"""Shared constants for git-wt."""

from typing import FrozenSet, Tuple

# On-disk layout of a managed repository:
#   <root>/.bare          bare object/ref store
#   <root>/.git           file pointing at the store
#   <root>/<branch>       one directory per worktree
BARE_DIRNAME = ".bare"
GIT_POINTER_NAME = ".git"
GIT_POINTER_CONTENT = f"gitdir: ./{BARE_DIRNAME}\n"
LOCK_FILENAME = ".git-wt.lock"

# Registry cache, kept inside the bare store
CACHE_DIRNAME = "git-wt"
CACHE_FILENAME = "registry.json"

RESERVED_NAMES: FrozenSet[str] = frozenset({BARE_DIRNAME, GIT_POINTER_NAME, LOCK_FILENAME})

# Sanitized branch names use this in place of path separators
PATH_SEPARATOR_SUBSTITUTE = "-"

# Environment for git calls that may reach the network
NETWORK_ENV = {"GIT_TERMINAL_PROMPT": "0"}
# Keep read-only queries from refreshing the index
READ_ONLY_ENV = {"GIT_OPTIONAL_LOCKS": "0"}

# Substrings of git stderr (lowercased) used to classify failures
AUTH_FAILURE_MARKERS: Tuple[str, ...] = (
    "authentication failed",
    "could not read username",
    "could not read password",
    "terminal prompts disabled",
    "permission denied (publickey",
    "invalid username or password",
    "access denied",
    "the requested url returned error: 401",
    "the requested url returned error: 403",
)

TRANSIENT_NETWORK_MARKERS: Tuple[str, ...] = (
    "could not resolve host",
    "connection reset",
    "connection refused",
    "connection timed out",
    "operation timed out",
    "timed out",
    "failed to connect",
    "network is unreachable",
    "temporary failure in name resolution",
    "the remote end hung up unexpectedly",
    "early eof",
    "rpc failed",
    "the requested url returned error: 502",
    "the requested url returned error: 503",
    "the requested url returned error: 504",
)

NOT_FOUND_MARKERS: Tuple[str, ...] = (
    "repository not found",
    "does not appear to be a git repository",
    "does not exist",
    "the requested url returned error: 404",
)

ALREADY_CHECKED_OUT_MARKERS: Tuple[str, ...] = (
    "is already checked out at",
    "is already used by worktree at",
)

GIT_ALIAS_NAME = "alias.wt"
GIT_ALIAS_VALUE = "!git-wt"
