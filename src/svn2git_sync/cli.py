"""Command-line interface for svn2git-sync.

Subcommands:

- ``sync``: replay pending SVN revisions into a Git repository.
- ``history list``: show remembered (SVN, Git) directory pairs.
- ``history delete <index>``: forget one pair.

Settings follow the precedence CLI args > env vars (.env loaded first) >
YAML config > defaults; see ``svn2git_sync.config``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

import yaml
from dotenv import load_dotenv

from svn2git_sync import __version__
from svn2git_sync.config import Config, load_config
from svn2git_sync.config_loader import load_hierarchical_config
from svn2git_sync.config_schema import UnifiedConfig, build_config
from svn2git_sync.errors import Svn2GitError
from svn2git_sync.interactor import ConsoleInteractor
from svn2git_sync.logger import setup_logging
from svn2git_sync.ops.git import (
    GitOperations,
    RealGitOperations,
    create_git_operations,
)
from svn2git_sync.ops.mock_git import SimulatedGitOperations
from svn2git_sync.ops.svn import RealSvnOperations, SvnOperations
from svn2git_sync.sync.engine import SyncEngine
from svn2git_sync.sync.history import HistoryStore, JsonFileStorage
from svn2git_sync.sync.models import (
    RevisionLogEntry,
    SyncConfiguration,
    SyncRunOptions,
)
from svn2git_sync.sync.reporter import format_sync_report
from svn2git_sync.sync.resolver import resolve_sync_config
from svn2git_sync.validators import validate_limit

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="svn2git-sync",
        description="Replay SVN revisions as Git commits, one commit per revision.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Pick a remembered pair (or type the paths) and sync
  svn2git-sync sync

  # Sync two explicit directories, previewing first
  svn2git-sync sync --svn-dir ~/wc/project --git-dir ~/git/project --dry-run

  # Apply at most 10 revisions
  svn2git-sync sync --limit 10

  # Manage remembered pairs
  svn2git-sync history list
  svn2git-sync history delete 0
        """,
    )
    parser.add_argument(
        "--history-file",
        help="History file path (takes precedence over SVN2GIT_HISTORY_FILE "
        "and config files)",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )
    parser.add_argument("--log-file", help="Also append log records to this file")
    parser.add_argument(
        "--log-format",
        choices=("text", "json"),
        help="Log record format (default: text)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"svn2git-sync version {__version__}",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sync = sub.add_parser("sync", help="Replay pending SVN revisions into Git")
    sync.add_argument("--svn-dir", help="SVN working copy directory")
    sync.add_argument("--git-dir", help="Git repository directory")
    sync.add_argument(
        "--dry-run",
        action="store_true",
        help="List the revisions that would be applied without changing anything",
    )
    sync.add_argument(
        "--limit", type=int, help="Apply at most N revisions (oldest first)"
    )
    sync.add_argument(
        "--backend",
        choices=("process", "memory"),
        help="Git backend (default: process)",
    )

    history = sub.add_parser("history", help="Manage remembered directory pairs")
    history_sub = history.add_subparsers(dest="history_command", required=True)
    history_sub.add_parser("list", help="Show remembered directory pairs")
    delete = history_sub.add_parser("delete", help="Forget one directory pair")
    delete.add_argument(
        "index", type=int, help="Record index as shown by 'history list'"
    )

    return parser


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def _yaml_fallbacks(unified: UnifiedConfig) -> dict:
    values = {
        **unified.sync.model_dump(),
        "git_user_name": unified.git.user_name,
        "git_user_email": unified.git.user_email,
    }
    return {k: v for k, v in values.items() if v is not None}


def _load_settings(args: argparse.Namespace) -> tuple[Config, UnifiedConfig]:
    """Merge .env, YAML files, environment and CLI args.

    Raises:
        ValueError: If any source holds an invalid value.
    """
    load_dotenv()
    try:
        unified = build_config(load_hierarchical_config())
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML config: {exc}") from exc
    config = load_config(
        history_file=args.history_file,
        backend=getattr(args, "backend", None),
        debug=args.debug,
        yaml_fallbacks=_yaml_fallbacks(unified),
    )
    return config, unified


# ---------------------------------------------------------------------------
# Memory backend support
# ---------------------------------------------------------------------------


class _RehearsalSvnOperations:
    """Real SVN log, simulated SVN updates.

    The memory backend leaves the working copy untouched: ``svn update`` is
    never run, so BASE does not move and a later process-backend run still
    sees every revision.  Each "applied" revision is recorded as a
    placeholder file to give the following commit something to stage.
    """

    def __init__(
        self, svn: SvnOperations, git: SimulatedGitOperations, git_dir: Path
    ) -> None:
        self._svn = svn
        self._git = git
        self._git_dir = git_dir

    def fetch_ordered_log(self, path: Path) -> list[RevisionLogEntry]:
        return self._svn.fetch_ordered_log(path)

    def update_to_revision(self, path: Path, revision: str) -> None:
        logger.debug("Simulating update of %s to r%s", path, revision)
        self._git.add_file(self._git_dir, f"r{revision}")


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


def _cmd_sync(
    args: argparse.Namespace,
    config: Config,
    history: HistoryStore,
    interactor: ConsoleInteractor,
    output: TextIO,
) -> int:
    sync_config = resolve_sync_config(
        args.svn_dir, args.git_dir, history, interactor, config.backend
    )

    real_svn = RealSvnOperations(
        command=config.svn_command, timeout=config.command_timeout
    )
    git = create_git_operations(
        sync_config.backend,
        command=config.git_command,
        timeout=config.command_timeout,
    )
    svn = _prepare_backends(real_svn, git, sync_config)

    engine = SyncEngine(
        svn,
        git,
        interactor,
        history,
        output=output,
        before_apply=_identity_hook(git, config),
    )
    report = engine.run(
        sync_config, SyncRunOptions(dry_run=args.dry_run, limit=args.limit)
    )
    print(format_sync_report(report), file=output)

    if isinstance(git, SimulatedGitOperations) and report.committed:
        print("\nSimulated git log:", file=output)
        print(git.log(sync_config.git_dir).rstrip(), file=output)
    return EXIT_OK


def _prepare_backends(
    real_svn: RealSvnOperations,
    git: GitOperations,
    sync_config: SyncConfiguration,
) -> SvnOperations:
    """Run preflight checks and return the SVN operations to use."""
    logger.debug("svn %s", real_svn.check_available())

    if isinstance(git, SimulatedGitOperations):
        git.init(sync_config.git_dir)
        return _RehearsalSvnOperations(real_svn, git, sync_config.git_dir)

    if isinstance(git, RealGitOperations):
        logger.debug("%s", git.check_available())
    return real_svn


def _identity_hook(
    git: GitOperations, config: Config
) -> Callable[[SyncConfiguration], None] | None:
    """Return a hook applying the configured committer identity, if any.

    The engine runs it only after confirmation, so declined, dry and empty
    runs leave the destination's git config alone.
    """
    if not config.has_git_identity:
        return None

    def apply_identity(sync_config: SyncConfiguration) -> None:
        git.config_identity(
            sync_config.git_dir, config.git_user_name, config.git_user_email
        )

    return apply_identity


def _cmd_history(
    args: argparse.Namespace, history: HistoryStore, output: TextIO
) -> int:
    if args.history_command == "list":
        print(history.list(), file=output)
        return EXIT_OK

    removed = history.remove(args.index)
    print(
        f"Deleted history record {args.index}: "
        f"{removed.svn_path} -> {removed.git_path}",
        file=output,
    )
    return EXIT_OK


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def main(
    argv: list[str] | None = None,
    input_fn: Callable[[str], str] = input,
    output: TextIO | None = None,
) -> int:
    """Parse *argv*, run the selected subcommand and return the exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    out = output if output is not None else sys.stdout

    if args.command == "sync":
        is_valid, error = validate_limit(args.limit)
        if not is_valid:
            parser.error(error)

    try:
        config, unified = _load_settings(args)
    except ValueError as exc:
        print(f"Error: invalid configuration: {exc}", file=sys.stderr)
        return EXIT_ERROR

    log_file = args.log_file or unified.logging.file
    try:
        setup_logging(
            debug=config.debug,
            log_file=log_file,
            log_format=args.log_format or unified.logging.format,
            default_level=unified.logging.level,
        )
    except OSError as exc:
        print(
            f"Error: cannot open log file {log_file}: {exc}", file=sys.stderr
        )
        return EXIT_ERROR
    logger.debug("Using history file %s", config.history_file)

    try:
        history = HistoryStore(JsonFileStorage(config.history_file))
        if args.command == "history":
            return _cmd_history(args, history, out)
        interactor = ConsoleInteractor(input_fn=input_fn, output=out)
        return _cmd_sync(args, config, history, interactor, out)
    except Svn2GitError as exc:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR


def run() -> None:
    """Entry point that handles errors gracefully and exits with a status."""
    try:
        status = main()
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        status = EXIT_INTERRUPTED
    sys.exit(status)


if __name__ == "__main__":
    run()
