"""Sync report formatting functions.

Provides human-readable output for sync operations:

- ``format_pending_entries`` -- numbered list of revisions awaiting replay.
- ``format_dry_run_preview`` -- what a real run would commit.
- ``format_sync_report`` -- full post-sync summary.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import RevisionLogEntry, SyncReport

from .models import SyncOutcome

_OUTCOME_TEXT = {
    SyncOutcome.NOTHING_TO_DO: "Nothing to do: the working copy is up to date.",
    SyncOutcome.DRY_RUN: "Dry run: no changes were made.",
    SyncOutcome.DECLINED: "Sync cancelled by user.",
    SyncOutcome.COMPLETED: "Sync completed.",
}


def _first_line(message: str) -> str:
    return message.splitlines()[0] if message else ""


# ------------------------------------------------------------------
# Pending revisions
# ------------------------------------------------------------------


def format_pending_entries(entries: list[RevisionLogEntry]) -> str:
    """Format revisions as a numbered list, one per line.

    Only the first line of each message is shown.
    """
    width = len(str(len(entries)))
    return "\n".join(
        f"  {step:>{width}}. r{entry.revision}: {_first_line(entry.message)}".rstrip()
        for step, entry in enumerate(entries, start=1)
    )


def format_dry_run_preview(
    entries: list[RevisionLogEntry], available: int | None = None
) -> str:
    """Format the dry-run preview of pending revisions.

    Args:
        entries: Revisions that a real run would apply, in order.
        available: Total revisions reported by ``svn log``; mentioned when
            ``limit`` left some out.

    Returns:
        Multi-line string, one line per revision with the commit message
        it would produce.
    """
    lines = [f"Dry run: {len(entries)} revision(s) would be applied"]
    if available is not None and available > len(entries):
        lines[0] += f" ({available - len(entries)} more beyond --limit)"
    for step, entry in enumerate(entries, start=1):
        lines.append(
            f"  [{step}] r{entry.revision} -> "
            f"{_first_line(entry.commit_message)!r}"
        )
    return "\n".join(lines)


# ------------------------------------------------------------------
# Post-sync summary
# ------------------------------------------------------------------


def format_sync_report(report: SyncReport) -> str:
    """Format a complete sync report as human-readable text.

    Args:
        report: The finished sync report.

    Returns:
        Multi-line formatted string.
    """
    lines = [report.summary()]
    if report.skipped_by_limit > 0:
        lines.append(f"  Left for next run: {report.skipped_by_limit}")
    lines.append(f"Started: {report.started_at}")
    if report.completed_at:
        lines.append(f"Completed: {report.completed_at}")

    if report.results:
        lines.append("")
        lines.append("Committed:")
        for r in report.results:
            lines.append(f"  r{r.revision}: {_first_line(r.commit_message)}")

    lines.append("")
    lines.append(_OUTCOME_TEXT[report.outcome])
    return "\n".join(lines)

