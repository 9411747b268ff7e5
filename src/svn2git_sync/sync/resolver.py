"""Choose the (SVN, Git) directory pair for a sync run.

Paths come from, in order: both command-line paths, a record picked from the
history store, or two prompts.  Whatever is chosen is recorded in the
history store and saved before the sync starts.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from svn2git_sync.errors import InteractionError
from svn2git_sync.sync.models import Backend, SyncConfiguration
from svn2git_sync.validators import validate_path_input

if TYPE_CHECKING:
    from svn2git_sync.interactor import UserInteractor
    from svn2git_sync.sync.history import HistoryStore

logger = logging.getLogger(__name__)


def resolve_sync_config(
    svn_dir: str | Path | None,
    git_dir: str | Path | None,
    history: HistoryStore,
    interactor: UserInteractor,
    backend: Backend = "process",
) -> SyncConfiguration:
    """Resolve the configuration for one sync run.

    Args:
        svn_dir: SVN working copy from the command line, if any.
        git_dir: Git repository from the command line, if any.
        history: Store of previously used pairs; updated and saved.
        interactor: Used to pick a history record or type paths.
        backend: Backend recorded in the resulting configuration.

    Returns:
        The resolved ``SyncConfiguration``.

    Raises:
        InteractionError: If the operator gives no source directory, or a
            prompt cannot be answered.
        HistoryIndexError: If the interactor returns an invalid index.
        StorageError: If the history cannot be saved.
    """
    if svn_dir and git_dir:
        config = SyncConfiguration(
            svn_dir=Path(svn_dir), git_dir=Path(git_dir), backend=backend
        )
    else:
        if svn_dir or git_dir:
            logger.warning(
                "Both --svn-dir and --git-dir are needed to skip the prompts; "
                "ignoring the one given"
            )
        config = _from_history(history, interactor, backend)
        if config is None:
            config = _from_prompts(interactor, backend)

    history.add(config.svn_dir, config.git_dir)
    history.save()
    logger.info("Using %s -> %s", config.svn_dir, config.git_dir)
    return config


def _from_history(
    history: HistoryStore, interactor: UserInteractor, backend: Backend
) -> SyncConfiguration | None:
    if history.is_empty():
        return None
    index = interactor.select_history_record(history.records)
    record = history.get(index)
    logger.debug("Selected history record %d", index)
    return record.to_sync_config(backend)


def _from_prompts(
    interactor: UserInteractor, backend: Backend
) -> SyncConfiguration:
    svn_path = interactor.input_path("SVN working copy directory: ")
    is_valid, error = validate_path_input(svn_path, "SVN working copy directory")
    if not is_valid:
        raise InteractionError(error)
    git_path = interactor.input_path(
        f"Git repository directory [{svn_path}]: "
    )
    if git_path:
        is_valid, error = validate_path_input(git_path, "Git repository directory")
        if not is_valid:
            raise InteractionError(error)
    return SyncConfiguration(
        svn_dir=Path(svn_path),
        git_dir=Path(git_path or svn_path),
        backend=backend,
    )
