"""Commit history access."""

from .git_source import GitDiffSource

__all__ = ["GitDiffSource"]
