"""In-memory Git backend.

``SimulatedGitOperations`` keeps one ``SimulatedRepository`` per repository
path in a plain dict and enforces the same preconditions as the process
backend, so the sync engine can be exercised without a real repository.

File lifecycle::

    untracked --stage_all--> staged --commit--> committed
    committed --modify_file--> modified --stage_all--> staged
    any --mark_conflicted--> conflicted   (never staged automatically)

Files only enter the repository through the test hooks ``add_file``,
``modify_file`` and ``mark_conflicted``.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from svn2git_sync.errors import RepositoryStateError


class FileStatus(str, Enum):
    """State of one file in a simulated repository."""

    UNTRACKED = "untracked"
    STAGED = "staged"
    MODIFIED = "modified"
    COMMITTED = "committed"
    CONFLICTED = "conflicted"


@dataclass(frozen=True)
class SimulatedCommit:
    """One entry of a simulated commit log."""

    hash: str
    message: str
    timestamp: str
    files: tuple[str, ...]


@dataclass
class SimulatedRepository:
    """State machine for a single simulated repository."""

    path: str
    initialized: bool = False
    branch: str = "main"
    files: dict[str, FileStatus] = field(default_factory=dict)
    commits: list[SimulatedCommit] = field(default_factory=list)
    identity: tuple[str, str] | None = None
    _conflict_codes: dict[str, str] = field(default_factory=dict)
    _ever_committed: set[str] = field(default_factory=set)

    def init(self) -> None:
        if self.initialized:
            raise RepositoryStateError(
                f"Git repository already initialized: {self.path}"
            )
        self.initialized = True

    def add_file(self, file_path: str) -> None:
        """Create (or recreate) *file_path* as an untracked file."""
        self.files[file_path] = FileStatus.UNTRACKED
        self._conflict_codes.pop(file_path, None)

    def modify_file(self, file_path: str) -> None:
        """Mark a committed file as modified in the working tree."""
        status = self.files.get(file_path)
        if status is None:
            raise RepositoryStateError(f"File not found: {file_path}")
        if status != FileStatus.COMMITTED:
            raise RepositoryStateError(
                f"File {file_path} is {status.value}, only committed "
                f"files can be modified"
            )
        self.files[file_path] = FileStatus.MODIFIED

    def mark_conflicted(self, file_path: str, code: str = "UU") -> None:
        """Put *file_path* into an unmerged state with status *code*."""
        self.files[file_path] = FileStatus.CONFLICTED
        self._conflict_codes[file_path] = code

    def stage_all(self) -> None:
        self._require_initialized()
        for file_path, status in self.files.items():
            if status in (FileStatus.UNTRACKED, FileStatus.MODIFIED):
                self.files[file_path] = FileStatus.STAGED

    def commit(self, message: str) -> SimulatedCommit:
        self._require_initialized()
        staged = sorted(
            p for p, s in self.files.items() if s == FileStatus.STAGED
        )
        if not staged:
            raise RepositoryStateError(
                f"Nothing staged to commit in {self.path}"
            )

        number = len(self.commits) + 1
        digest = hashlib.sha1(
            f"{self.path}\0{number}\0{message}".encode("utf-8")
        ).hexdigest()
        commit = SimulatedCommit(
            hash=digest[:7],
            message=message,
            timestamp=datetime.now(timezone.utc).isoformat(),
            files=tuple(staged),
        )
        self.commits.append(commit)
        for file_path in staged:
            self.files[file_path] = FileStatus.COMMITTED
            self._ever_committed.add(file_path)
        return commit

    def status_lines(self) -> list[str]:
        """Porcelain-style status lines, sorted by path."""
        lines = []
        for file_path in sorted(self.files):
            code = self._status_code(file_path)
            if code is not None:
                lines.append(f"{code} {file_path}")
        return lines

    def is_clean(self) -> bool:
        return all(
            s == FileStatus.COMMITTED for s in self.files.values()
        )

    def _status_code(self, file_path: str) -> str | None:
        status = self.files[file_path]
        if status == FileStatus.COMMITTED:
            return None
        if status == FileStatus.UNTRACKED:
            return "??"
        if status == FileStatus.MODIFIED:
            return " M"
        if status == FileStatus.CONFLICTED:
            return self._conflict_codes.get(file_path, "UU")
        # Staged
        return "M " if file_path in self._ever_committed else "A "

    def _require_initialized(self) -> None:
        if not self.initialized:
            raise RepositoryStateError(
                f"Git repository not initialized: {self.path}"
            )


class SimulatedGitOperations:
    """Git operations over in-memory repositories keyed by path."""

    def __init__(self) -> None:
        self._repos: dict[str, SimulatedRepository] = {}

    # ------------------------------------------------------------------
    # GitOperations
    # ------------------------------------------------------------------

    def init(self, path: Path) -> None:
        self._repository(path).init()

    def config_identity(self, path: Path, name: str, email: str) -> None:
        self._repository(path).identity = (name, email)

    def stage_all(self, path: Path) -> None:
        self._repository(path).stage_all()

    def commit(self, path: Path, message: str) -> None:
        self._repository(path).commit(message)

    def status(self, path: Path) -> str:
        lines = self._repository(path).status_lines()
        return "\n".join(lines) + "\n" if lines else ""

    def log(self, path: Path, count: int | None = None) -> str:
        commits = list(reversed(self._repository(path).commits))
        if count is not None:
            commits = commits[:count]
        return "".join(
            f"{c.hash} {c.message.splitlines()[0] if c.message else ''}\n"
            for c in commits
        )

    def is_clean(self, path: Path) -> bool:
        return self._repository(path).is_clean()

    # ------------------------------------------------------------------
    # Test hooks
    # ------------------------------------------------------------------

    def add_file(self, path: Path, file_path: str) -> None:
        """Record a new untracked file in the repository at *path*."""
        self._repository(path).add_file(file_path)

    def modify_file(self, path: Path, file_path: str) -> None:
        """Record a change to a committed file."""
        self._repository(path).modify_file(file_path)

    def mark_conflicted(
        self, path: Path, file_path: str, code: str = "UU"
    ) -> None:
        """Record an unmerged file with the given status code."""
        self._repository(path).mark_conflicted(file_path, code)

    def get_repository(self, path: Path) -> SimulatedRepository | None:
        """Return the repository state at *path*, or ``None``."""
        return self._repos.get(str(path))

    def _repository(self, path: Path) -> SimulatedRepository:
        key = str(path)
        repo = self._repos.get(key)
        if repo is None:
            repo = SimulatedRepository(path=key)
            self._repos[key] = repo
        return repo
