"""Core sync engine that replays SVN revisions into a Git repository.

The ``SyncEngine`` ties together the SVN and Git operation backends, the
interaction port and the history store into a complete sync run.  It:

1. Fetches the ordered revision log from the SVN working copy.
2. Truncates it to the configured ``limit``.
3. Previews (dry run) or asks the operator to confirm, then runs the
   optional ``before_apply`` hook.
4. For each revision: updates the working copy, checks the destination for
   unresolved conflicts, stages everything and commits with the SVN message.
5. Saves the history store and returns a ``SyncReport``.

Error handling is fail-fast: the first failing revision aborts the run with
a ``RevisionApplyError`` (or ``ConflictError``) naming its step and
revision.  Commits made for earlier revisions are kept.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TYPE_CHECKING, TextIO, TypeVar

from svn2git_sync.errors import ConflictError, RevisionApplyError, Svn2GitError
from svn2git_sync.ops.git import find_conflicts
from svn2git_sync.sync.models import (
    RevisionLogEntry,
    RevisionResult,
    SyncConfiguration,
    SyncOutcome,
    SyncReport,
    SyncRunOptions,
)
from svn2git_sync.sync.reporter import format_dry_run_preview

if TYPE_CHECKING:
    from svn2git_sync.interactor import UserInteractor
    from svn2git_sync.ops.git import GitOperations
    from svn2git_sync.ops.svn import SvnOperations
    from svn2git_sync.sync.history import HistoryStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SyncEngine:
    """Replay pending SVN revisions as Git commits.

    Args:
        svn: SVN operations for the source working copy.
        git: Git operations for the destination repository.
        interactor: Asks the operator to confirm the run.
        history: History store, saved after a completed run.
        output: Stream that receives the dry-run preview.
        before_apply: Called with the configuration once the run is
            confirmed, before the first revision is replayed.
    """

    def __init__(
        self,
        svn: SvnOperations,
        git: GitOperations,
        interactor: UserInteractor,
        history: HistoryStore,
        output: TextIO | None = None,
        before_apply: Callable[[SyncConfiguration], None] | None = None,
    ) -> None:
        self.svn = svn
        self.git = git
        self.interactor = interactor
        self.history = history
        self.output = output if output is not None else sys.stdout
        self.before_apply = before_apply

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    def run(
        self,
        config: SyncConfiguration,
        options: SyncRunOptions | None = None,
    ) -> SyncReport:
        """Execute a sync run.

        Args:
            config: Source and destination directories.
            options: Dry-run and limit controls (defaults apply everything).

        Returns:
            A ``SyncReport`` describing what was (or would be) done.

        Raises:
            Svn2GitError: If the log cannot be fetched, or any revision
                fails to apply (``RevisionApplyError`` / ``ConflictError``).
        """
        options = options or SyncRunOptions()
        started_at = _now()

        entries = self.svn.fetch_ordered_log(config.svn_dir)
        available = len(entries)
        if options.limit is not None:
            entries = entries[: options.limit]

        def report(
            outcome: SyncOutcome, results: list[RevisionResult] | None = None
        ) -> SyncReport:
            return SyncReport(
                svn_dir=str(config.svn_dir),
                git_dir=str(config.git_dir),
                outcome=outcome,
                dry_run=options.dry_run,
                available=available,
                pending=entries,
                results=results or [],
                started_at=started_at,
                completed_at=_now(),
            )

        if not entries:
            logger.info("No pending revisions for %s", config.svn_dir)
            return report(SyncOutcome.NOTHING_TO_DO)

        logger.info(
            "%d pending revision(s) (r%s..r%s), %d available",
            len(entries),
            entries[0].revision,
            entries[-1].revision,
            available,
        )

        if options.dry_run:
            print(format_dry_run_preview(entries, available), file=self.output)
            return report(SyncOutcome.DRY_RUN)

        if not self.interactor.confirm_sync(entries):
            logger.info("Sync declined by user")
            return report(SyncOutcome.DECLINED)

        if self.before_apply is not None:
            self.before_apply(config)

        results: list[RevisionResult] = []
        for step, entry in enumerate(entries, start=1):
            results.append(self._apply_entry(config, step, entry))

        self.history.save()
        logger.info("Committed %d revision(s) to %s", len(results), config.git_dir)
        return report(SyncOutcome.COMPLETED, results)

    # ------------------------------------------------------------------
    # Per-revision replay
    # ------------------------------------------------------------------

    def _apply_entry(
        self, config: SyncConfiguration, step: int, entry: RevisionLogEntry
    ) -> RevisionResult:
        extra = {"step": step, "revision": entry.revision}
        logger.info(
            "[%d] Applying r%s", step, entry.revision, extra=extra
        )

        self._phase(
            step,
            entry,
            "update",
            lambda: self.svn.update_to_revision(config.svn_dir, entry.revision),
        )

        status = self._phase(
            step, entry, "status", lambda: self.git.status(config.git_dir)
        )
        conflicts = find_conflicts(status)
        if conflicts:
            logger.error(
                "[%d] r%s: destination has %d conflicted path(s)",
                step,
                entry.revision,
                len(conflicts),
                extra=extra,
            )
            raise ConflictError(step, entry.revision, conflicts)

        self._phase(
            step, entry, "stage", lambda: self.git.stage_all(config.git_dir)
        )
        commit_message = entry.commit_message
        self._phase(
            step,
            entry,
            "commit",
            lambda: self.git.commit(config.git_dir, commit_message),
        )
        logger.debug(
            "[%d] Committed r%s as %r",
            step,
            entry.revision,
            commit_message,
            extra=extra,
        )

        return RevisionResult(
            step=step,
            revision=entry.revision,
            message=entry.message,
            commit_message=commit_message,
        )

    def _phase(
        self,
        step: int,
        entry: RevisionLogEntry,
        phase: str,
        action: Callable[[], T],
    ) -> T:
        try:
            return action()
        except Svn2GitError as exc:
            logger.error(
                "[%d] r%s failed during %s: %s",
                step,
                entry.revision,
                phase,
                exc,
                extra={"step": step, "revision": entry.revision},
            )
            raise RevisionApplyError(step, entry.revision, phase, exc) from exc
