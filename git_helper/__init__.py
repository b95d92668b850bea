"""git-helper: stage, commit, push and pull with optional AI commit messages."""

__version__ = "0.1.0"
