"""Services implementing the worktree lifecycle."""
