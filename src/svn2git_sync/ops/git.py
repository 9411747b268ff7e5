"""Git operations used by the sync engine.

Provides:

- ``GitOperations``: Protocol both backends satisfy.
- ``RealGitOperations``: Runs the ``git`` executable.
- ``find_conflicts()``: Extracts unmerged entries from porcelain status.
- ``create_git_operations()``: Maps a backend name to an implementation.

The in-memory backend lives in ``svn2git_sync.ops.mock_git``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from svn2git_sync.errors import RepositoryStateError
from svn2git_sync.ops.mock_git import SimulatedGitOperations
from svn2git_sync.ops.shell import decode_output, run_command

logger = logging.getLogger(__name__)

# Two-letter porcelain codes for unmerged paths (see git-status(1)).
CONFLICT_CODES = frozenset({"DD", "AU", "UD", "UA", "DU", "AA", "UU"})


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class GitOperations(Protocol):
    """Capabilities the sync engine needs from a Git repository."""

    def init(self, path: Path) -> None:
        """Create a repository at *path*; fails if one already exists."""
        ...  # pragma: no cover

    def config_identity(self, path: Path, name: str, email: str) -> None:
        """Set the committer name and email for the repository."""
        ...  # pragma: no cover

    def stage_all(self, path: Path) -> None:
        """Stage every untracked and modified file."""
        ...  # pragma: no cover

    def commit(self, path: Path, message: str) -> None:
        """Commit the staged files; fails if nothing is staged."""
        ...  # pragma: no cover

    def status(self, path: Path) -> str:
        """Return porcelain status lines, empty when nothing is pending."""
        ...  # pragma: no cover

    def log(self, path: Path, count: int | None = None) -> str:
        """Return one-line commit summaries, most recent first."""
        ...  # pragma: no cover

    def is_clean(self, path: Path) -> bool:
        """Return ``True`` if nothing is pending."""
        ...  # pragma: no cover


def find_conflicts(status_output: str) -> list[str]:
    """Return the status lines whose two-character code marks a conflict."""
    return [
        line
        for line in status_output.splitlines()
        if line[:2] in CONFLICT_CODES
    ]


# ---------------------------------------------------------------------------
# Process-backed implementation
# ---------------------------------------------------------------------------


class RealGitOperations:
    """Git operations backed by the ``git`` command-line tool.

    Args:
        command: Name or path of the git executable.
        timeout: Seconds to wait for each invocation (``None`` waits
            forever).
    """

    def __init__(
        self, command: str = "git", timeout: float | None = None
    ) -> None:
        self.command = command
        self.timeout = timeout

    def _run(self, path: Path | None, *args: str) -> str:
        proc = run_command(
            [self.command, *args], cwd=path, timeout=self.timeout
        )
        return decode_output(proc.stdout)

    def check_available(self) -> str:
        """Return the ``git --version`` banner; raises if git is missing."""
        return self._run(None, "--version").strip()

    def init(self, path: Path) -> None:
        if (Path(path) / ".git").exists():
            raise RepositoryStateError(
                f"Git repository already initialized: {path}"
            )
        self._run(path, "init")
        logger.info("Initialized git repository in %s", path)

    def config_identity(self, path: Path, name: str, email: str) -> None:
        self._run(path, "config", "user.name", name)
        self._run(path, "config", "user.email", email)
        logger.debug("Configured git identity %s <%s>", name, email)

    def stage_all(self, path: Path) -> None:
        self._run(path, "add", ".")

    def commit(self, path: Path, message: str) -> None:
        self._run(path, "commit", "-m", message)

    def status(self, path: Path) -> str:
        return self._run(path, "status", "--porcelain")

    def log(self, path: Path, count: int | None = None) -> str:
        args = ["log", "--oneline"]
        if count is not None:
            args += ["-n", str(count)]
        return self._run(path, *args)

    def is_clean(self, path: Path) -> bool:
        return not self.status(path).strip()


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

_BACKEND_MAP: dict[str, type] = {
    "process": RealGitOperations,
    "memory": SimulatedGitOperations,
}


def create_git_operations(backend: str, **kwargs) -> GitOperations:
    """Create the Git backend selected by configuration.

    Args:
        backend: ``"process"`` or ``"memory"`` (case-insensitive).
        **kwargs: Passed to the process backend (``command``,
            ``timeout``); ignored by the memory backend.

    Returns:
        A ``GitOperations`` implementation instance.

    Raises:
        ValueError: If the backend name is not recognised.
    """
    cls = _BACKEND_MAP.get(backend.lower())
    if cls is None:
        raise ValueError(
            f"Unknown git backend: '{backend}'. Valid backends: {sorted(_BACKEND_MAP.keys())}"
        )
    if cls is SimulatedGitOperations:
        return SimulatedGitOperations()
    return cls(**kwargs)  # type: ignore[return-value]
