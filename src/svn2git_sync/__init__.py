"""Replay Subversion revisions into a Git repository, one commit each."""

__version__ = "0.1.0"
