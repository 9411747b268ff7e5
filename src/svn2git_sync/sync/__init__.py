"""Revision replay engine.

Public API for replaying the pending revisions of an SVN working copy as
commits in a Git repository, one commit per revision.

Architecture
------------
The engine never touches a process or a terminal directly.  SVN and Git
access goes through the ``SvnOperations`` / ``GitOperations`` protocols in
``svn2git_sync.ops``, prompts go through ``UserInteractor``, and remembered
directory pairs go through ``HistoryStore``.  All of them are passed to the
constructor, so a run can be driven entirely in memory.

Modules:

- ``engine``    -- ``SyncEngine``: fetch, confirm, then update / check /
  stage / commit per revision.
- ``history``   -- ``HistoryStore`` and ``JsonFileStorage``: remembered
  (SVN, Git) pairs, ordered by last use.
- ``resolver``  -- ``resolve_sync_config``: CLI paths, history pick or
  prompts.
- ``models``    -- ``RevisionLogEntry``, ``HistoryRecord``,
  ``SyncConfiguration``, ``SyncRunOptions``, ``SyncReport``: core data
  contracts.
- ``reporter``  -- Human-readable report formatting.

Usage example
-------------
::

    from pathlib import Path
    from svn2git_sync.interactor import ConsoleInteractor
    from svn2git_sync.ops import RealGitOperations, RealSvnOperations
    from svn2git_sync.sync import (
        HistoryStore, JsonFileStorage, SyncConfiguration, SyncEngine,
        SyncRunOptions, format_sync_report,
    )

    history = HistoryStore(JsonFileStorage(Path("history.json")))
    engine = SyncEngine(
        svn=RealSvnOperations(),
        git=RealGitOperations(),
        interactor=ConsoleInteractor(),
        history=history,
    )
    config = SyncConfiguration(svn_dir=Path("wc"), git_dir=Path("repo"))

    # Dry-run first to preview changes
    preview = engine.run(config, SyncRunOptions(dry_run=True))

    report = engine.run(config)
    print(format_sync_report(report))
"""

from .engine import SyncEngine
from .history import HistoryStore, JsonFileStorage
from .models import (
    HistoryRecord,
    RevisionLogEntry,
    RevisionResult,
    SyncConfiguration,
    SyncOutcome,
    SyncReport,
    SyncRunOptions,
)
from .reporter import format_dry_run_preview, format_sync_report
from .resolver import resolve_sync_config

__all__ = [
    "HistoryRecord",
    "HistoryStore",
    "JsonFileStorage",
    "RevisionLogEntry",
    "RevisionResult",
    "SyncConfiguration",
    "SyncEngine",
    "SyncOutcome",
    "SyncReport",
    "SyncRunOptions",
    "format_dry_run_preview",
    "format_sync_report",
    "resolve_sync_config",
]
