"""Shared pytest fixtures for svn2git-sync tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from svn2git_sync.errors import CommandError, InteractionError
from svn2git_sync.ops.mock_git import SimulatedGitOperations
from svn2git_sync.sync.history import HistoryStore
from svn2git_sync.sync.models import HistoryRecord, RevisionLogEntry

SVN_DIR = Path("/work/svn")
GIT_DIR = Path("/work/git")


def pytest_addoption(parser):
    """Add custom CLI options for test filtering."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run tests that require real svn and git binaries",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "live: mark test as requiring real svn and git binaries"
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is passed."""
    if config.getoption("--run-live"):
        return
    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class FakeSvnOperations:
    """SVN replacement serving a fixed log.

    Each successful update drops a file named after the revision into the
    simulated Git repository (when one is attached), mimicking the files
    ``svn update`` writes into a shared working directory.
    """

    def __init__(
        self,
        entries: list[RevisionLogEntry] | None = None,
        git: SimulatedGitOperations | None = None,
        git_dir: Path = GIT_DIR,
        fail_on: str | None = None,
    ) -> None:
        self.entries = entries or []
        self.git = git
        self.git_dir = git_dir
        self.fail_on = fail_on
        self.fetch_calls: list[Path] = []
        self.update_calls: list[tuple[Path, str]] = []

    def fetch_ordered_log(self, path: Path) -> list[RevisionLogEntry]:
        self.fetch_calls.append(path)
        return list(self.entries)

    def update_to_revision(self, path: Path, revision: str) -> None:
        self.update_calls.append((path, revision))
        if revision == self.fail_on:
            raise CommandError(
                f"svn: E155004: Working copy '{path}' locked",
                command=["svn", "update", "-r", revision],
                returncode=1,
                stderr=f"svn: E155004: Working copy '{path}' locked",
            )
        if self.git is not None:
            self.git.add_file(self.git_dir, f"file_r{revision}.txt")


class RecordingGitOperations(SimulatedGitOperations):
    """Simulated Git that also records every call in order."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple] = []

    def init(self, path: Path) -> None:
        self.calls.append(("init", path))
        super().init(path)

    def stage_all(self, path: Path) -> None:
        self.calls.append(("stage_all", path))
        super().stage_all(path)

    def commit(self, path: Path, message: str) -> None:
        self.calls.append(("commit", path, message))
        super().commit(path, message)

    def status(self, path: Path) -> str:
        self.calls.append(("status", path))
        return super().status(path)

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]


class ScriptedInteractor:
    """Interactor that answers from pre-set values and records questions."""

    def __init__(
        self,
        confirm: bool = True,
        selection: int = 0,
        paths: list[str] | None = None,
    ) -> None:
        self.confirm = confirm
        self.selection = selection
        self.paths = list(paths or [])
        self.confirm_calls: list[list[RevisionLogEntry]] = []
        self.select_calls: list[list[HistoryRecord]] = []
        self.prompts: list[str] = []

    def select_history_record(self, records: list[HistoryRecord]) -> int:
        self.select_calls.append(list(records))
        return self.selection

    def input_path(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.paths:
            raise InteractionError("No scripted answer left")
        return self.paths.pop(0)

    def confirm_sync(self, entries: list[RevisionLogEntry]) -> bool:
        self.confirm_calls.append(list(entries))
        return self.confirm


class MemoryStorage:
    """FileStorage keeping records in a list and counting saves."""

    def __init__(self, records: list[HistoryRecord] | None = None) -> None:
        self.records = list(records or [])
        self.save_count = 0

    def load(self) -> list[HistoryRecord]:
        return list(self.records)

    def save(self, records: list[HistoryRecord]) -> None:
        self.records = list(records)
        self.save_count += 1


class SteppingClock:
    """Clock advancing one minute per call."""

    def __init__(
        self, start: datetime = datetime(2026, 1, 1, tzinfo=timezone.utc)
    ) -> None:
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(minutes=1)
        return self.current


def make_entries(*pairs: tuple[str, str]) -> list[RevisionLogEntry]:
    """Build log entries from (revision, message) pairs."""
    return [RevisionLogEntry(revision=r, message=m) for r, m in pairs]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def git() -> RecordingGitOperations:
    """Recording simulated Git with an initialized repository at GIT_DIR."""
    ops = RecordingGitOperations()
    ops.init(GIT_DIR)
    ops.calls.clear()
    return ops


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def history(storage: MemoryStorage, clock: SteppingClock) -> HistoryStore:
    return HistoryStore(storage, clock=clock)
