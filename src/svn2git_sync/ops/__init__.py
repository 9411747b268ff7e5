"""Version-control backends: git (process and in-memory) and svn."""

from .git import (
    GitOperations,
    RealGitOperations,
    create_git_operations,
    find_conflicts,
)
from .mock_git import SimulatedGitOperations
from .svn import RealSvnOperations, SvnOperations, parse_svn_log_xml

__all__ = [
    "GitOperations",
    "RealGitOperations",
    "RealSvnOperations",
    "SimulatedGitOperations",
    "SvnOperations",
    "create_git_operations",
    "find_conflicts",
    "parse_svn_log_xml",
]
