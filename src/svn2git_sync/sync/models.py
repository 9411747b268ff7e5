"""Pydantic models for the SVN-to-Git sync engine.

Defines the core data contracts used across all sync modules:

- ``RevisionLogEntry``: One SVN revision and its log message.
- ``HistoryRecord``: A remembered (SVN, Git) directory pairing.
- ``SyncConfiguration``: The directories and backend for one run.
- ``SyncRunOptions``: Dry-run and limit controls.
- ``SyncOutcome``: How a run ended.
- ``RevisionResult``: Outcome of replaying one revision.
- ``SyncReport``: Aggregate results for a full sync run.

All models are frozen (immutable).
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Literal

from pydantic import AwareDatetime, BaseModel, Field

COMMIT_PREFIX = "SVN: "

Backend = Literal["process", "memory"]


class RevisionLogEntry(BaseModel):
    """A single entry of the SVN log.

    Attributes:
        revision: SVN revision identifier (as printed by ``svn log``).
        message: Log message, possibly empty.
    """

    revision: str
    message: str = ""

    model_config = {"frozen": True}

    @property
    def commit_message(self) -> str:
        """Git commit message for this revision."""
        return COMMIT_PREFIX + self.message


class HistoryRecord(BaseModel):
    """A remembered sync configuration.

    Attributes:
        id: Position of the record in the stored list.
        svn_path: SVN working copy directory.
        git_path: Git repository directory.
        last_used: UTC timestamp of the last time this pair was used.
    """

    id: int
    svn_path: str
    git_path: str
    last_used: AwareDatetime

    model_config = {"frozen": True}

    def path_eq(self, svn_path: str | Path, git_path: str | Path) -> bool:
        """Return ``True`` if this record holds exactly the given pair."""
        return self.svn_path == str(svn_path) and self.git_path == str(
            git_path
        )

    def to_sync_config(
        self, backend: Backend = "process"
    ) -> SyncConfiguration:
        """Build a ``SyncConfiguration`` from this record."""
        return SyncConfiguration(
            svn_dir=Path(self.svn_path),
            git_dir=Path(self.git_path),
            backend=backend,
        )


class SyncConfiguration(BaseModel):
    """Directories and backend for one sync invocation.

    Attributes:
        svn_dir: SVN working copy to read revisions from.
        git_dir: Git repository that receives one commit per revision.
        backend: ``"process"`` for real tools, ``"memory"`` for the
            simulated repository.
    """

    svn_dir: Path
    git_dir: Path
    backend: Backend = "process"

    model_config = {"frozen": True}


class SyncRunOptions(BaseModel):
    """Safety controls for a sync run.

    Attributes:
        dry_run: Preview the pending revisions without applying them.
        limit: Apply at most this many revisions (``None`` for all).
    """

    dry_run: bool = False
    limit: int | None = Field(default=None, ge=0)

    model_config = {"frozen": True}


class SyncOutcome(str, Enum):
    """How a sync run ended."""

    NOTHING_TO_DO = "nothing_to_do"
    DRY_RUN = "dry_run"
    DECLINED = "declined"
    COMPLETED = "completed"


class RevisionResult(BaseModel):
    """Result of replaying one revision.

    Attributes:
        step: 1-based position in the run.
        revision: SVN revision applied.
        message: Original SVN log message.
        commit_message: Message of the Git commit created.
    """

    step: int
    revision: str
    message: str
    commit_message: str

    model_config = {"frozen": True}


class SyncReport(BaseModel):
    """Aggregate report for a sync run.

    Attributes:
        svn_dir: SVN working copy used.
        git_dir: Git repository used.
        outcome: How the run ended.
        dry_run: Whether this was a dry run.
        available: Number of revisions reported by ``svn log``.
        pending: Revisions selected for this run (after ``limit``).
        results: One result per committed revision.
        started_at: ISO 8601 timestamp when the run started.
        completed_at: ISO 8601 timestamp when the run finished.
    """

    svn_dir: str
    git_dir: str
    outcome: SyncOutcome
    dry_run: bool = False
    available: int = 0
    pending: list[RevisionLogEntry] = []
    results: list[RevisionResult] = []
    started_at: str
    completed_at: str | None = None

    model_config = {"frozen": True}

    @property
    def committed(self) -> int:
        """Number of revisions committed to Git."""
        return len(self.results)

    @property
    def skipped_by_limit(self) -> int:
        """Number of available revisions left out by ``limit``."""
        return self.available - len(self.pending)

    def summary(self) -> str:
        """Format a short human-readable summary of the run.

        Returns:
            Multi-line summary string with counts.
        """
        lines = [
            f"Sync {self.svn_dir} -> {self.git_dir}"
            + (" (dry run)" if self.dry_run else ""),
            f"  Outcome:   {self.outcome.value}",
            f"  Available: {self.available}",
            f"  Pending:   {len(self.pending)}",
            f"  Committed: {self.committed}",
        ]
        return "\n".join(lines)
