"""
Input validation functions for svn2git-sync.

Checks command-line and prompt values before any svn or git process is
started.
"""

import re

_REVISION_PATTERN = re.compile(r"[0-9]+")


def format_validation_error(field_name: str, reason: str) -> str:
    """
    Generate consistent error message for validation failures.

    Args:
        field_name: Human-readable field name (e.g., "Limit")
        reason: Description of validation failure (e.g., "cannot be negative")

    Returns:
        Formatted error message string
    """
    return f"{field_name} {reason}"


def validate_limit(limit: int | None) -> tuple[bool, str]:
    """
    Validate the maximum number of revisions to apply.

    Returns:
        Tuple of (is_valid, error_message).
        ``None`` (no limit) and zero are valid.
    """
    if limit is None:
        return (True, "")
    if limit < 0:
        return (False, format_validation_error("Limit", "cannot be negative"))
    return (True, "")


def validate_path_input(path: str, field_name: str = "Path") -> tuple[bool, str]:
    """
    Validate a directory path typed by the user.

    Returns:
        Tuple of (is_valid, error_message).

    Validation rules:
        - Cannot be empty or whitespace-only
        - Cannot contain NUL characters
    """
    if not path or not path.strip():
        return (False, format_validation_error(field_name, "cannot be empty"))
    if "\0" in path:
        return (
            False,
            format_validation_error(field_name, "cannot contain NUL characters"),
        )
    return (True, "")


def validate_revision(revision: str) -> tuple[bool, str]:
    """
    Validate an SVN revision number as printed by ``svn log``.
    """
    if not revision:
        return (False, format_validation_error("Revision", "cannot be empty"))
    if not _REVISION_PATTERN.fullmatch(revision):
        return (
            False,
            format_validation_error(
                "Revision", f"'{revision}' must be a non-negative integer"
            ),
        )
    return (True, "")
