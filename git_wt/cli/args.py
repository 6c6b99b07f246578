"""Command-line argument parsing for git-wt."""

import argparse
from git_wt.__version__ import __version__


def positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-wt",
        description="Enhanced workflows for Git worktrees",
        epilog="Run 'git-wt setup-alias' once to use it as 'git wt'.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument("--version", action="version", version=f"git-wt {__version__}")
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Do not write the registry cache inside the bare store",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    subparsers.required = True

    clone_parser = subparsers.add_parser(
        "clone", help="Clone a repository directly into a worktree layout"
    )
    clone_parser.add_argument("url", help="Repository URL")
    clone_parser.add_argument(
        "directory", nargs="?", help="Destination (default: name derived from the URL)"
    )
    clone_parser.add_argument(
        "-b", "--branch", help="Branch for the first worktree (default: the remote's HEAD)"
    )
    clone_parser.add_argument(
        "--clone-attempts",
        type=positive_int,
        metavar="N",
        help="Attempts on transient network errors (default: 3, or git config wt.cloneAttempts)",
    )

    init_parser = subparsers.add_parser(
        "init", help="Reorganize an existing repository into a worktree layout"
    )
    init_parser.add_argument("path", nargs="?", help="Repository root (default: current directory)")

    list_parser = subparsers.add_parser("list", help="List the worktrees of a managed repository")
    list_parser.add_argument("path", nargs="?", help="Any path inside the repository")

    prune_parser = subparsers.add_parser("prune", help="Remove stale worktrees")
    prune_parser.add_argument("path", nargs="?", help="Any path inside the repository")
    prune_parser.add_argument(
        "--force",
        action="store_true",
        help="Also remove worktrees with abandoned locks that hold uncommitted changes",
    )
    prune_parser.add_argument(
        "--lock-stale-days",
        type=positive_int,
        metavar="N",
        help="Days after which a worktree lock counts as abandoned (default: 30)",
    )

    subparsers.add_parser("setup-alias", help="Configure 'git wt' as an alias for git-wt")

    return parser


def parse_args(argv=None):
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)
