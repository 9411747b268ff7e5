"""Operator prompts.

``UserInteractor`` is the port the resolver and the sync engine talk to;
``ConsoleInteractor`` implements it with ``input()`` and a text stream, and
accepts replacements for both so tests can script the answers.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import Protocol, TextIO

from svn2git_sync.errors import InteractionError
from svn2git_sync.sync.history import format_history_table
from svn2git_sync.sync.models import HistoryRecord, RevisionLogEntry
from svn2git_sync.sync.reporter import format_pending_entries

logger = logging.getLogger(__name__)

_YES = ("y", "yes")


class UserInteractor(Protocol):
    """Questions asked of the operator during a sync."""

    def select_history_record(self, records: list[HistoryRecord]) -> int:
        """Return the index of the chosen record."""
        ...  # pragma: no cover

    def input_path(self, prompt: str) -> str:
        """Return a path typed by the operator (may be empty)."""
        ...  # pragma: no cover

    def confirm_sync(self, entries: list[RevisionLogEntry]) -> bool:
        """Return ``True`` if the operator approves replaying *entries*."""
        ...  # pragma: no cover


class ConsoleInteractor:
    """Interactive prompts on a terminal.

    Args:
        input_fn: Reads one line of input after showing a prompt.
        output: Stream for tables and listings.
    """

    def __init__(
        self,
        input_fn: Callable[[str], str] = input,
        output: TextIO | None = None,
    ) -> None:
        self._input = input_fn
        self.output = output if output is not None else sys.stdout

    def _ask(self, prompt: str) -> str:
        try:
            return self._input(prompt)
        except (EOFError, OSError) as exc:
            raise InteractionError(
                f"No input available for prompt {prompt.strip()!r}",
                cause=exc,
            ) from exc

    def select_history_record(self, records: list[HistoryRecord]) -> int:
        """Show the history table and read a record index.

        A blank answer selects the most recently used record.  Anything
        that is not an index into *records* asks again.

        Raises:
            InteractionError: If *records* is empty or input is closed.
        """
        if not records:
            raise InteractionError("No history records to choose from")

        print("Sync history:", file=self.output)
        print(format_history_table(records), file=self.output)
        last = len(records) - 1
        while True:
            answer = self._ask(
                f"Select a configuration [0-{last}, Enter for {last}]: "
            ).strip()
            if not answer:
                return last
            try:
                index = int(answer)
            except ValueError:
                index = -1
            if 0 <= index <= last:
                return index
            print(
                f"Invalid selection {answer!r}: enter a number from 0 to {last}.",
                file=self.output,
            )

    def input_path(self, prompt: str) -> str:
        return self._ask(prompt).strip()

    def confirm_sync(self, entries: list[RevisionLogEntry]) -> bool:
        """List *entries* and ask for a yes/no answer (default no).

        Closed or failing input is treated as a refusal.
        """
        print(f"{len(entries)} revision(s) will be replayed:", file=self.output)
        print(format_pending_entries(entries), file=self.output)
        try:
            answer = self._input("Proceed with sync? [y/N]: ")
        except (EOFError, OSError) as exc:
            logger.warning("Could not read confirmation, not syncing: %s", exc)
            return False
        return answer.strip().lower() in _YES
