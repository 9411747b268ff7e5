"""Tests for cli.py -- argument parsing, subcommands and exit statuses."""

from __future__ import annotations

import io
import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from conftest import FakeSvnOperations, make_entries

from svn2git_sync import __version__
from svn2git_sync.cli import main, run
from svn2git_sync.ops.git import RealGitOperations

_ENV_VARS = (
    "SVN2GIT_CONFIG",
    "SVN2GIT_HISTORY_FILE",
    "SVN2GIT_BACKEND",
    "SVN2GIT_SVN_COMMAND",
    "SVN2GIT_GIT_COMMAND",
    "SVN2GIT_COMMAND_TIMEOUT",
    "SVN2GIT_GIT_USER_NAME",
    "SVN2GIT_GIT_USER_EMAIL",
    "SVN2GIT_DEBUG",
    "LOG_LEVEL",
)


class CliSvn(FakeSvnOperations):
    """FakeSvnOperations with the preflight check of the real backend."""

    def check_available(self) -> str:
        return "1.14.3"


@pytest.fixture(autouse=True)
def isolated_cli(tmp_path, monkeypatch):
    """No YAML, .env or environment settings leak into CLI tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    with patch("svn2git_sync.cli.load_dotenv"), patch(
        "svn2git_sync.cli.setup_logging"
    ):
        yield


@pytest.fixture
def history_file(tmp_path) -> Path:
    return tmp_path / "state" / "history.json"


@pytest.fixture
def svn():
    fake = CliSvn(entries=make_entries(("1", "first"), ("2", "second")))
    with patch("svn2git_sync.cli.RealSvnOperations", return_value=fake):
        yield fake


def _main(history_file: Path, *args: str, answers=("y",)):
    queue = list(answers)
    out = io.StringIO()
    status = main(
        ["--history-file", str(history_file), *args],
        input_fn=lambda prompt: queue.pop(0),
        output=out,
    )
    return status, out.getvalue()


def _memory_sync(history_file: Path, *extra: str, answers=("y",)):
    return _main(
        history_file,
        "sync",
        "--svn-dir",
        "/work/svn",
        "--git-dir",
        "/work/git",
        "--backend",
        "memory",
        *extra,
        answers=answers,
    )


@pytest.fixture
def process_git():
    git = MagicMock(spec=RealGitOperations)
    git.status.return_value = ""
    with patch(
        "svn2git_sync.cli.create_git_operations", return_value=git
    ) as factory:
        git.factory = factory
        yield git


def _process_sync(history_file: Path, *extra: str, answers=("y",)):
    return _main(
        history_file,
        "sync",
        "--svn-dir",
        "/work/svn",
        "--git-dir",
        "/work/git",
        *extra,
        answers=answers,
    )


class TestSync:
    def test_memory_backend_full_run(self, svn, history_file):
        status, out = _memory_sync(history_file)

        assert status == 0
        assert "Sync completed." in out
        assert "Simulated git log:" in out
        assert "SVN: first" in out
        assert "SVN: second" in out

    def test_memory_backend_never_updates_working_copy(
        self, svn, history_file
    ):
        status, _ = _memory_sync(history_file)

        assert status == 0
        assert svn.fetch_calls == [Path("/work/svn")]
        assert svn.update_calls == []

    def test_records_history(self, svn, history_file):
        _memory_sync(history_file)

        data = json.loads(history_file.read_text(encoding="utf-8"))
        assert [(r["svn_path"], r["git_path"]) for r in data] == [
            (str(Path("/work/svn")), str(Path("/work/git")))
        ]

    def test_dry_run(self, svn, history_file):
        status, out = _memory_sync(history_file, "--dry-run", answers=())

        assert status == 0
        assert svn.update_calls == []
        assert "Dry run: 2 revision(s) would be applied" in out

    def test_limit(self, svn, history_file):
        status, out = _memory_sync(history_file, "--limit", "1")

        assert status == 0
        assert "Left for next run: 1" in out
        assert "SVN: first" in out
        assert "SVN: second" not in out

    def test_declined(self, svn, history_file):
        status, out = _memory_sync(history_file, answers=("n",))

        assert status == 0
        assert svn.update_calls == []
        assert "Sync cancelled by user." in out

    def test_revision_failure_exits_1(
        self, svn, process_git, history_file, capsys
    ):
        svn.fail_on = "2"

        status, _ = _process_sync(history_file)

        assert status == 1
        err = capsys.readouterr().err
        assert "Error: Step 2 (r2) failed during update" in err
        assert process_git.commit.call_count == 1

    def test_negative_limit_is_usage_error(self, history_file):
        with pytest.raises(SystemExit) as exc_info:
            _memory_sync(history_file, "--limit", "-1")
        assert exc_info.value.code == 2

    def test_uses_history_when_no_paths(self, svn, history_file):
        _memory_sync(history_file)

        # blank answer picks the most recent record, then confirm
        status, out = _main(
            history_file, "sync", "--backend", "memory", answers=("", "y")
        )

        assert status == 0
        assert "Sync /work/svn -> /work/git" in out

    def test_process_backend_preflight_and_identity(
        self, svn, process_git, history_file, monkeypatch
    ):
        monkeypatch.setenv("SVN2GIT_GIT_USER_NAME", "Sync Bot")
        monkeypatch.setenv("SVN2GIT_GIT_USER_EMAIL", "bot@example.com")

        status, _ = _process_sync(history_file)

        assert status == 0
        assert process_git.factory.call_args[0][0] == "process"
        process_git.check_available.assert_called_once()
        process_git.config_identity.assert_called_once_with(
            Path("/work/git"), "Sync Bot", "bot@example.com"
        )
        assert process_git.commit.call_count == 2
        assert [rev for _, rev in svn.update_calls] == ["1", "2"]

    @pytest.mark.parametrize(
        "extra, answers",
        [((), ("n",)), (("--dry-run",), ()), (("--limit", "0"), ())],
    )
    def test_identity_untouched_unless_confirmed(
        self, svn, process_git, history_file, monkeypatch, extra, answers
    ):
        monkeypatch.setenv("SVN2GIT_GIT_USER_NAME", "Sync Bot")
        monkeypatch.setenv("SVN2GIT_GIT_USER_EMAIL", "bot@example.com")

        status, _ = _process_sync(history_file, *extra, answers=answers)

        assert status == 0
        process_git.config_identity.assert_not_called()
        process_git.commit.assert_not_called()

    def test_naive_history_timestamp_exits_1(self, svn, history_file, capsys):
        history_file.parent.mkdir(parents=True)
        history_file.write_text(
            '[{"id": 0, "svn_path": "/old/svn", "git_path": "/old/git", '
            '"last_used": "2025-01-01T00:00:00"}]',
            encoding="utf-8",
        )

        status, _ = _memory_sync(history_file)

        assert status == 1
        assert "invalid record" in capsys.readouterr().err

    def test_missing_svn_tool_exits_1(self, history_file, capsys):
        with patch(
            "svn2git_sync.ops.shell.subprocess.run",
            side_effect=FileNotFoundError("svn"),
        ):
            status, _ = _memory_sync(history_file)

        assert status == 1
        assert "not found" in capsys.readouterr().err


class TestHistoryCommands:
    def test_list_empty(self, history_file):
        status, out = _main(history_file, "history", "list")

        assert status == 0
        assert "No history records yet." in out

    def test_list_and_delete(self, svn, history_file):
        _memory_sync(history_file)

        status, out = _main(history_file, "history", "list")
        assert status == 0
        assert "/work/svn" in out

        status, out = _main(history_file, "history", "delete", "0")
        assert status == 0
        assert "Deleted history record 0" in out
        assert json.loads(history_file.read_text(encoding="utf-8")) == []

    def test_delete_out_of_range(self, history_file, capsys):
        status, _ = _main(history_file, "history", "delete", "5")

        assert status == 1
        assert "out of range" in capsys.readouterr().err

    def test_corrupt_history_file(self, history_file, capsys):
        history_file.parent.mkdir(parents=True)
        history_file.write_text("{oops", encoding="utf-8")

        status, _ = _main(history_file, "history", "list")

        assert status == 1
        assert "not valid JSON" in capsys.readouterr().err


class TestConfiguration:
    def test_invalid_env_backend(self, history_file, monkeypatch, capsys):
        monkeypatch.setenv("SVN2GIT_BACKEND", "cloud")

        status, _ = _main(history_file, "history", "list")

        assert status == 1
        assert "invalid configuration" in capsys.readouterr().err

    def test_invalid_yaml(self, tmp_path, history_file, capsys):
        config_dir = tmp_path / ".svn2git"
        config_dir.mkdir()
        (config_dir / "config.yml").write_text(
            "sync: [unclosed\n", encoding="utf-8"
        )

        status, _ = _main(history_file, "history", "list")

        assert status == 1
        assert "Invalid YAML config" in capsys.readouterr().err

    def test_yaml_history_file(self, tmp_path, capsys):
        config_dir = tmp_path / ".svn2git"
        config_dir.mkdir()
        yaml_history = tmp_path / "from-yaml.json"
        (config_dir / "config.yml").write_text(
            f"sync:\n  history_file: {yaml_history}\n", encoding="utf-8"
        )
        yaml_history.write_text(
            '[{"id": 0, "svn_path": "/y/svn", "git_path": "/y/git", '
            '"last_used": "2026-01-01T00:00:00Z"}]',
            encoding="utf-8",
        )

        out = io.StringIO()
        status = main(["history", "list"], output=out)

        assert status == 0
        assert "/y/svn" in out.getvalue()


class TestLogFile:
    def test_unwritable_log_file_exits_1(self, tmp_path, history_file, capsys):
        log_file = tmp_path / "missing-dir" / "sync.log"

        with patch(
            "svn2git_sync.cli.setup_logging",
            side_effect=FileNotFoundError(2, "No such file or directory"),
        ):
            status, _ = _main(
                history_file, "--log-file", str(log_file), "history", "list"
            )

        assert status == 1
        err = capsys.readouterr().err
        assert f"Error: cannot open log file {log_file}" in err
        assert "Traceback" not in err


class TestEntryPoints:
    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_command_required(self):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2

    def test_run_exits_with_main_status(self):
        with patch("svn2git_sync.cli.main", return_value=1):
            with pytest.raises(SystemExit) as exc_info:
                run()
        assert exc_info.value.code == 1

    def test_run_interrupted(self, capsys):
        with patch("svn2git_sync.cli.main", side_effect=KeyboardInterrupt):
            with pytest.raises(SystemExit) as exc_info:
                run()

        assert exc_info.value.code == 130
        assert "Interrupted." in capsys.readouterr().err
