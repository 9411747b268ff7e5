"""Synchronous execution of external version-control tools.

``run_command()`` is the single place where ``svn`` and ``git`` processes are
spawned.  It blocks until the tool exits, captures both output streams and
turns every failure mode into a ``CommandError``:

* the executable is not installed,
* the working directory does not exist,
* the tool does not finish within ``timeout`` seconds,
* the tool exits with a non-zero status.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from pathlib import Path

from charset_normalizer import from_bytes

from svn2git_sync.errors import CommandError

logger = logging.getLogger(__name__)

# Keep tool messages in English so they are stable for diagnostics.
_TOOL_ENV = {"LC_MESSAGES": "C"}


def decode_output(raw: bytes) -> str:
    """Decode tool output for display.

    UTF-8 is tried first.  Tools running under a non-UTF-8 locale (for
    example a Windows code page) are handled with charset-normalizer
    detection, falling back to UTF-8 with replacement characters.
    """
    if not raw:
        return ""
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        pass

    result = from_bytes(raw).best()
    if result is None:
        return raw.decode("utf-8", errors="replace")
    return str(result)


def format_command(args: list[str]) -> str:
    """Render an argument list as a shell-like string for messages."""
    return " ".join(shlex.quote(a) for a in args)


def run_command(
    args: list[str],
    cwd: Path | None = None,
    timeout: float | None = None,
) -> subprocess.CompletedProcess[bytes]:
    """Run an external command and return the completed process.

    Output is captured as bytes; callers decode it (strictly for structured
    payloads, via ``decode_output()`` for human-readable text).

    Args:
        args: Executable followed by its arguments.
        cwd: Working directory; must exist if given.
        timeout: Seconds to wait before giving up (``None`` waits forever).

    Returns:
        The ``CompletedProcess`` of a successful (exit 0) run.

    Raises:
        CommandError: On any failure listed in the module docstring.
    """
    cmd_string = format_command(args)
    if cwd is not None and not Path(cwd).is_dir():
        raise CommandError(
            f"Working directory not found for '{cmd_string}': {cwd}",
            command=args,
        )

    logger.debug("$ %s (cwd=%s)", cmd_string, cwd or ".")
    try:
        proc = subprocess.run(
            args,
            cwd=str(cwd) if cwd is not None else None,
            capture_output=True,
            timeout=timeout,
            env={**os.environ, **_TOOL_ENV},
        )
    except FileNotFoundError as exc:
        raise CommandError(
            f"Failed running external program '{args[0]}': not found. "
            f"Ensure it is installed and on PATH.",
            command=args,
            cause=exc,
        ) from exc
    except subprocess.TimeoutExpired as exc:
        raise CommandError(
            f"External program timed out after {timeout}s: {cmd_string}",
            command=args,
            stdout=decode_output(exc.stdout or b""),
            stderr=decode_output(exc.stderr or b""),
            cause=exc,
        ) from exc
    except OSError as exc:
        raise CommandError(
            f"Failed running external program: {cmd_string}: {exc}",
            command=args,
            cause=exc,
        ) from exc

    if proc.returncode != 0:
        stdout = decode_output(proc.stdout)
        stderr = decode_output(proc.stderr)
        detail = stderr.strip() or stdout.strip() or "no output"
        raise CommandError(
            f"External program failed (return code {proc.returncode}): "
            f"{cmd_string}\n{detail}",
            command=args,
            returncode=proc.returncode,
            stdout=stdout,
            stderr=stderr,
        )

    return proc
