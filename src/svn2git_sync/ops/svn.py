"""SVN operations used by the sync engine.

Provides:

- ``SvnOperations``: Protocol for the two capabilities the engine needs.
- ``RealSvnOperations``: Runs the ``svn`` executable.
- ``parse_svn_log_xml()``: Turns ``svn log --xml`` output into
  ``RevisionLogEntry`` objects.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Protocol
from xml.etree import ElementTree

from svn2git_sync.errors import ParseError
from svn2git_sync.ops.shell import decode_output, run_command
from svn2git_sync.sync.models import RevisionLogEntry
from svn2git_sync.validators import validate_revision

logger = logging.getLogger(__name__)

# XML 1.0 forbids all control characters except tab, LF and CR.
_FORBIDDEN_XML_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


class SvnOperations(Protocol):
    """Capabilities the sync engine needs from an SVN working copy."""

    def fetch_ordered_log(self, path: Path) -> list[RevisionLogEntry]:
        """Return log entries from BASE to HEAD, oldest first."""
        ...  # pragma: no cover

    def update_to_revision(self, path: Path, revision: str) -> None:
        """Update the working copy at *path* to *revision*."""
        ...  # pragma: no cover


# ---------------------------------------------------------------------------
# Log parsing
# ---------------------------------------------------------------------------


def strip_forbidden_xml_chars(xml_string: str) -> str:
    """Remove characters that are not allowed in XML 1.0 documents."""
    return _FORBIDDEN_XML_CHARS.sub("", xml_string)


def _normalize_message(text: str | None) -> str:
    if not text:
        return ""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return text.strip()


def parse_svn_log_xml(raw: bytes) -> list[RevisionLogEntry]:
    """Parse the output of ``svn log --xml``.

    Entries are returned in document order, which for a ``BASE:HEAD``
    range is ascending revision order.

    Args:
        raw: Bytes written to stdout by ``svn log --xml``.

    Returns:
        One ``RevisionLogEntry`` per ``<logentry>``.

    Raises:
        ParseError: If the payload is not UTF-8, is not well-formed XML,
            has a root other than ``<log>``, or an entry has no
            ``revision`` attribute.
    """
    try:
        xml_string = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(
            f"svn log output is not valid UTF-8: {exc}", cause=exc
        ) from exc

    xml_string = strip_forbidden_xml_chars(xml_string)
    try:
        root = ElementTree.fromstring(xml_string)
    except ElementTree.ParseError as exc:
        raise ParseError(
            f"Malformed svn log XML: {exc}", cause=exc
        ) from exc

    if root.tag != "log":
        raise ParseError(
            f"Invalid svn log XML root <{root.tag}>, expected <log>"
        )

    entries: list[RevisionLogEntry] = []
    for element in root.findall("logentry"):
        revision = element.get("revision")
        if not revision:
            raise ParseError("svn log entry is missing the revision attribute")
        is_valid, error = validate_revision(revision)
        if not is_valid:
            raise ParseError(f"Invalid svn log entry: {error}")

        msg = element.find("msg")
        message = _normalize_message(msg.text if msg is not None else None)
        if not message:
            logger.warning("SVN revision %s has an empty log message", revision)

        entries.append(RevisionLogEntry(revision=revision, message=message))

    return entries


# ---------------------------------------------------------------------------
# Process-backed implementation
# ---------------------------------------------------------------------------


class RealSvnOperations:
    """SVN operations backed by the ``svn`` command-line client.

    Args:
        command: Name or path of the svn executable.
        timeout: Seconds to wait for each invocation (``None`` waits
            forever).
    """

    def __init__(
        self, command: str = "svn", timeout: float | None = None
    ) -> None:
        self.command = command
        self.timeout = timeout

    def check_available(self) -> str:
        """Return the svn client version; raises if svn is missing."""
        proc = run_command(
            [self.command, "--version", "--quiet"], timeout=self.timeout
        )
        return decode_output(proc.stdout).strip()

    def fetch_ordered_log(self, path: Path) -> list[RevisionLogEntry]:
        logger.info("Fetching SVN log for %s", path)
        proc = run_command(
            [self.command, "log", "--xml", "-r", "BASE:HEAD", str(path)],
            timeout=self.timeout,
        )
        entries = parse_svn_log_xml(proc.stdout)
        logger.info("Found %d revision(s) from BASE to HEAD", len(entries))
        return entries

    def update_to_revision(self, path: Path, revision: str) -> None:
        logger.debug("Updating %s to r%s", path, revision)
        run_command(
            [self.command, "update", "--non-interactive", "-r", revision],
            cwd=path,
            timeout=self.timeout,
        )
