"""History of sync configurations.

``HistoryStore`` remembers which (SVN, Git) directory pairs were synced and
when, so the operator can pick one instead of typing paths again.  Byte-level
persistence goes through a ``FileStorage`` port; ``JsonFileStorage`` is the
on-disk implementation.

Records are kept sorted ascending by ``last_used`` (most recent last).  A
record's position in that list is its identifier: ``history list`` prints
it and ``history delete`` takes it.  The persisted ``id`` field is rewritten
to the position whenever the list is loaded or changes, so the two never
disagree.

Key design choices:

* **Atomic writes** -- ``JsonFileStorage.save()`` writes to a temp file then
  calls ``os.replace()`` so readers never see partial data.
* **Missing file is empty history** -- first use needs no setup.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from svn2git_sync.errors import HistoryIndexError, ParseError, StorageError
from svn2git_sync.sync.models import HistoryRecord

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Storage port
# ---------------------------------------------------------------------------


class FileStorage(Protocol):
    """Persistence port for history records."""

    def load(self) -> list[HistoryRecord]:
        """Return stored records; an absent store yields ``[]``."""
        ...  # pragma: no cover

    def save(self, records: list[HistoryRecord]) -> None:
        """Replace the stored records with *records*."""
        ...  # pragma: no cover


class JsonFileStorage:
    """Store history records as a JSON array in a single file.

    Args:
        path: Location of the history file.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> list[HistoryRecord]:
        if not self.path.exists():
            return []

        try:
            with open(self.path, encoding="utf-8") as fh:
                data = json.load(fh)
        except OSError as exc:
            raise StorageError(
                f"Cannot read history file {self.path}: {exc}", cause=exc
            ) from exc
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ParseError(
                f"History file {self.path} is not valid JSON: {exc}",
                cause=exc,
            ) from exc

        if not isinstance(data, list):
            raise ParseError(
                f"History file {self.path} must contain a JSON array"
            )
        try:
            return [HistoryRecord.model_validate(item) for item in data]
        except ValidationError as exc:
            raise ParseError(
                f"History file {self.path} has an invalid record: {exc}",
                cause=exc,
            ) from exc

    def save(self, records: list[HistoryRecord]) -> None:
        """Persist *records* atomically, creating parent directories."""
        payload = [r.model_dump(mode="json") for r in records]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.path.parent), suffix=".tmp"
            )
        except OSError as exc:
            raise StorageError(
                f"Cannot write history file {self.path}: {exc}", cause=exc
            ) from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException as exc:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            if isinstance(exc, OSError):
                raise StorageError(
                    f"Cannot write history file {self.path}: {exc}",
                    cause=exc,
                ) from exc
            raise


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

_TITLE = ("#", "SVN Path", "Git Path", "Last Used")


class HistoryStore:
    """Recency-ordered collection of sync configurations.

    Args:
        storage: Persistence port; loaded immediately.
        clock: Source of ``last_used`` timestamps.
    """

    def __init__(
        self,
        storage: FileStorage,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._records: list[HistoryRecord] = _ordered(storage.load())

    @property
    def records(self) -> list[HistoryRecord]:
        """Records in stored order (oldest first)."""
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def is_empty(self) -> bool:
        return not self._records

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> list[HistoryRecord]:
        """Reload records from storage, discarding unsaved changes."""
        self._records = _ordered(self._storage.load())
        return self.records

    def save(self) -> None:
        self._storage.save(self._records)
        logger.debug("Saved %d history record(s)", len(self._records))

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, svn_path: str | Path, git_path: str | Path) -> HistoryRecord:
        """Record a use of (*svn_path*, *git_path*) as the most recent.

        Any existing record with the same pair is replaced.  Not persisted
        until ``save()`` is called.

        Returns:
            The newly stored record.
        """
        kept = [r for r in self._records if not r.path_eq(svn_path, git_path)]
        record = HistoryRecord(
            id=len(kept),
            svn_path=str(svn_path),
            git_path=str(git_path),
            last_used=self._clock(),
        )
        kept.append(record)
        kept.sort(key=lambda r: r.last_used)
        self._records = _renumber(kept)
        return next(
            r for r in self._records if r.path_eq(svn_path, git_path)
        )

    def remove(self, index: int) -> HistoryRecord:
        """Delete the record at position *index* and persist immediately.

        Raises:
            HistoryIndexError: If *index* is out of range.
        """
        if not 0 <= index < len(self._records):
            raise HistoryIndexError(
                f"History index {index} out of range "
                f"({_range_hint(len(self._records))})"
            )
        removed = self._records[index]
        self._records = _renumber(
            self._records[:index] + self._records[index + 1 :]
        )
        self.save()
        logger.info(
            "Deleted history record %d: %s -> %s",
            index,
            removed.svn_path,
            removed.git_path,
        )
        return removed

    def get(self, index: int) -> HistoryRecord:
        """Return the record at position *index*.

        Raises:
            HistoryIndexError: If *index* is out of range.
        """
        if not 0 <= index < len(self._records):
            raise HistoryIndexError(
                f"History index {index} out of range "
                f"({_range_hint(len(self._records))})"
            )
        return self._records[index]

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def list(self) -> str:
        """Render all records as a table with a header row."""
        if not self._records:
            return "No history records yet."
        return format_history_table(self._records)


def format_history_table(records: list[HistoryRecord]) -> str:
    """Format records as an aligned table, one row per record."""
    rows = [_TITLE] + [
        (
            str(r.id),
            r.svn_path,
            r.git_path,
            r.last_used.astimezone().strftime("%Y-%m-%d %H:%M:%S"),
        )
        for r in records
    ]
    widths = [max(len(row[i]) for row in rows) for i in range(len(_TITLE))]
    return "\n".join(
        "  ".join(cell.ljust(w) for cell, w in zip(row, widths)).rstrip()
        for row in rows
    )


def _ordered(records: list[HistoryRecord]) -> list[HistoryRecord]:
    """Sort loaded records by ``last_used`` and make ids positional."""
    return _renumber(sorted(records, key=lambda r: r.last_used))


def _renumber(records: list[HistoryRecord]) -> list[HistoryRecord]:
    return [
        r if r.id == i else r.model_copy(update={"id": i})
        for i, r in enumerate(records)
    ]


def _range_hint(length: int) -> str:
    if length == 0:
        return "history is empty"
    return f"valid: 0-{length - 1}"
