"""Command-line interface for git-wt"""

import os
import signal
import sys
from typing import List, Optional

from rich.console import Console

from git_wt.cli.args import parse_args
from git_wt.config import Config
from git_wt.core import WorktreeManager
from git_wt.exceptions import AliasSetupFailed, GitWtError
from git_wt.logging_config import setup_logging
from git_wt.services.alias import MANUAL_ALIAS_COMMAND, setup_alias
from git_wt.services.display_service import DisplayService

console = Console()

EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def _raise_interrupt(signum, frame):
    raise KeyboardInterrupt


def run_clone(manager: WorktreeManager, display: DisplayService, args) -> int:
    worktree = manager.clone(args.url, args.directory, branch=args.branch)
    display.display_worktree_created(worktree, "Cloned")
    return 0


def run_init(manager: WorktreeManager, display: DisplayService, args) -> int:
    worktree = manager.init(args.path)
    display.display_worktree_created(worktree, "Converted")
    return 0


def run_list(manager: WorktreeManager, display: DisplayService, args) -> int:
    layout = manager.locate(args.path)
    display.display_worktree_table(manager.list(layout.root), layout.root)
    return 0


def run_prune(manager: WorktreeManager, display: DisplayService, args) -> int:
    layout = manager.locate(args.path)
    report = manager.prune(layout.root, force=args.force)
    display.display_prune_report(report, layout.root)
    return 0


def run_setup_alias(manager: WorktreeManager, display: DisplayService, args) -> int:
    try:
        changed = setup_alias()
    except AliasSetupFailed as e:
        console.print(f"Error: {e}", style="red", markup=False)
        console.print("Set the alias manually with:")
        console.print(f"  {MANUAL_ALIAS_COMMAND}", markup=False)
        return e.exit_code

    if changed:
        console.print("[green]✓[/green] 'git wt' now runs git-wt")
    else:
        console.print("[dim]'git wt' alias already configured[/dim]")
    return 0


COMMANDS = {
    "clone": run_clone,
    "init": run_init,
    "list": run_list,
    "prune": run_prune,
    "setup-alias": run_setup_alias,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    parsed_args = parse_args(argv)
    setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

    # Treat SIGTERM like Ctrl-C so in-flight rollbacks still run
    signal.signal(signal.SIGTERM, _raise_interrupt)

    try:
        config = Config.from_git_config(
            cwd=os.getcwd(),
            clone_attempts=getattr(parsed_args, "clone_attempts", None),
            lock_stale_days=getattr(parsed_args, "lock_stale_days", None),
            use_cache=False if parsed_args.no_cache else None,
            force=getattr(parsed_args, "force", None),
            verbose=parsed_args.verbose,
            debug=parsed_args.debug,
        )

        if parsed_args.debug:
            console.print("[yellow]Debug mode enabled[/yellow]")
            console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                console.print(f"  {key}: {value}")

        manager = WorktreeManager(config)
        display = DisplayService(verbose=config.verbose)
        return COMMANDS[parsed_args.command](manager, display, parsed_args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return EXIT_INTERRUPTED
    except GitWtError as e:
        console.print(f"Error: {e}", style="red", markup=False)
        if parsed_args.debug:
            console.print_exception()
        return e.exit_code
    except ValueError as e:
        console.print(f"Error: {e}", style="red", markup=False)
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
