"""Version information for git-wt."""

__version__ = "0.1.0"
