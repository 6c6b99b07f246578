"""Display and formatting service for worktree information"""
import os
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from git_wt.models.worktree import PruneReport, Worktree

console = Console()


def format_status(worktree: Worktree) -> Text:
    if worktree.stale:
        return Text("stale", style="red")
    if worktree.locked:
        label = "locked"
        if worktree.lock_reason:
            label += f" ({worktree.lock_reason})"
        return Text(label, style="yellow")
    return Text("active", style="green")


def format_path(path: str, root: Optional[Path]) -> str:
    if root is None:
        return path
    try:
        return os.path.relpath(path, root)
    except ValueError:
        # Different drive on Windows
        return path


class DisplayService:
    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def display_worktree_table(self, worktrees: List[Worktree], root: Optional[Path] = None) -> None:
        """Display a table of worktrees."""
        if not worktrees:
            console.print("[dim]No worktrees[/dim]")
            return

        table = Table()
        table.add_column("Branch")
        table.add_column("Path")
        table.add_column("HEAD")
        table.add_column("Status")

        for wt in sorted(worktrees, key=lambda w: w.path):
            branch = Text(wt.branch) if wt.branch else Text("(detached)", style="dim")
            table.add_row(branch, format_path(wt.path, root), wt.head[:7], format_status(wt))

        console.print(table)

    def display_worktree_created(self, worktree: Worktree, action: str) -> None:
        console.print(Text.assemble(
            ("✓ ", "green"),
            f"{action}: ",
            (worktree.branch or "(detached)", "bold"),
            f" at {worktree.path}",
        ))

    def display_prune_report(self, report: PruneReport, root: Optional[Path] = None) -> None:
        """Summarize a prune run."""
        for path in report.pruned:
            console.print(f"[red]-[/red] {format_path(path, root)}")
        for skipped in report.skipped:
            line = Text(f"  skipped {format_path(skipped.path, root)} ({skipped.reason})", style="yellow")
            if self.verbose and skipped.detail:
                line.append(f": {skipped.detail}", style="dim")
            console.print(line)
        console.print(f"Pruned {report.pruned_count}, skipped {report.skipped_count}")
