"""Exception hierarchy for svn2git_sync.

Every failure raised by the operation backends, the history store and the
sync engine derives from ``Svn2GitError`` so the CLI can report it and exit
with a non-zero status.
"""

from __future__ import annotations

from typing import Any


class Svn2GitError(Exception):
    """Base exception for svn2git_sync.

    Attributes:
        details: Optional structured information about the failure.
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class StorageError(Svn2GitError):
    """Raised when the history file cannot be read or written."""


class CommandError(Svn2GitError):
    """Raised when an external tool is missing or exits with a failure.

    Attributes:
        command: The argument list that was executed.
        returncode: Process exit status, or ``None`` if it never ran.
        stdout: Captured standard output (decoded).
        stderr: Captured standard error (decoded).
    """

    def __init__(
        self,
        message: str,
        *,
        command: list[str] | None = None,
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(
            message,
            details={
                "command": command or [],
                "returncode": returncode,
            },
            cause=cause,
        )
        self.command = command or []
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class ParseError(Svn2GitError):
    """Raised for malformed tool output or history data."""


class ApplicationError(Svn2GitError):
    """Raised when an operation is not valid in the current state."""


class HistoryIndexError(ApplicationError):
    """Raised when a history position is out of range."""


class RepositoryStateError(ApplicationError):
    """Raised when a repository precondition is violated.

    Examples: initializing twice, committing with nothing staged.
    """


class ConflictError(ApplicationError):
    """Raised when the destination has unresolved merge conflicts.

    Attributes:
        step: 1-based position of the revision in the run.
        revision: SVN revision being applied.
        lines: The status lines carrying a conflict code.
    """

    def __init__(self, step: int, revision: str, lines: list[str]) -> None:
        super().__init__(
            f"Step {step} (r{revision}): unresolved conflicts in "
            f"destination: {', '.join(lines)}",
            details={"step": step, "revision": revision, "lines": lines},
        )
        self.step = step
        self.revision = revision
        self.lines = lines


class RevisionApplyError(Svn2GitError):
    """Raised when applying one revision fails.

    Attributes:
        step: 1-based position of the revision in the run.
        revision: SVN revision being applied.
        phase: ``"update"``, ``"status"``, ``"stage"`` or ``"commit"``.
    """

    def __init__(
        self,
        step: int,
        revision: str,
        phase: str,
        cause: BaseException,
    ) -> None:
        super().__init__(
            f"Step {step} (r{revision}) failed during {phase}: {cause}",
            details={"step": step, "revision": revision, "phase": phase},
            cause=cause,
        )
        self.step = step
        self.revision = revision
        self.phase = phase


class InteractionError(Svn2GitError):
    """Raised when a required prompt cannot be answered."""
