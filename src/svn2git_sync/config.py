"""Runtime configuration for svn2git-sync.

Reads settings from CLI args, environment variables, .env files, and YAML
config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    SVN2GIT_HISTORY_FILE: History file path (default: ~/.config/svn2git/history.json)
    SVN2GIT_BACKEND: Git backend, process or memory (default: process)
    SVN2GIT_SVN_COMMAND: svn executable (default: svn)
    SVN2GIT_GIT_COMMAND: git executable (default: git)
    SVN2GIT_COMMAND_TIMEOUT: Seconds per svn/git invocation (default: no limit)
    SVN2GIT_GIT_USER_NAME: Committer name applied to the destination
    SVN2GIT_GIT_USER_EMAIL: Committer email applied to the destination
    SVN2GIT_DEBUG: Enable debug logging (default: false)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_FILE = Path.home() / ".config" / "svn2git" / "history.json"

VALID_BACKENDS = ("process", "memory")


@dataclass
class Config:
    history_file: Path = DEFAULT_HISTORY_FILE
    backend: str = "process"
    svn_command: str = "svn"
    git_command: str = "git"
    command_timeout: float | None = None
    git_user_name: str | None = None
    git_user_email: str | None = None
    debug: bool = False

    @property
    def has_git_identity(self) -> bool:
        return bool(self.git_user_name and self.git_user_email)


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Args:
        config: Config instance to validate.

    Raises:
        ValueError: If the backend is unknown, a command is empty, or the
            timeout is not positive.
    """
    config.backend = config.backend.strip().lower()
    if config.backend not in VALID_BACKENDS:
        raise ValueError(
            f"Invalid backend '{config.backend}': must be one of "
            f"{', '.join(VALID_BACKENDS)}"
        )

    if not config.svn_command.strip():
        raise ValueError("svn command cannot be empty")
    if not config.git_command.strip():
        raise ValueError("git command cannot be empty")

    if config.command_timeout is not None and config.command_timeout <= 0:
        raise ValueError(
            f"Invalid command timeout '{config.command_timeout}': must be positive"
        )

    if bool(config.git_user_name) != bool(config.git_user_email):
        logger.warning(
            "Git identity needs both user name and email; ignoring the one given"
        )


def load_config(
    history_file: str | None = None,
    backend: str | None = None,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        history_file: Override history file path.
        backend: Override Git backend.
        debug: Enable debug logging (CLI flag).
        yaml_fallbacks: Flat dict of values from the YAML config file
            (keys match the ``Config`` fields).

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If a value cannot be parsed or fails validation.
    """
    fb = yaml_fallbacks or {}

    # --- String fields: CLI > env > YAML > default ---

    final_history = (
        history_file
        or os.getenv("SVN2GIT_HISTORY_FILE")
        or fb.get("history_file")
    )
    history_path = (
        Path(final_history).expanduser()
        if final_history
        else DEFAULT_HISTORY_FILE
    )

    final_backend = (
        backend or os.getenv("SVN2GIT_BACKEND") or fb.get("backend") or "process"
    )
    svn_command = (
        os.getenv("SVN2GIT_SVN_COMMAND") or fb.get("svn_command") or "svn"
    )
    git_command = (
        os.getenv("SVN2GIT_GIT_COMMAND") or fb.get("git_command") or "git"
    )
    git_user_name = os.getenv("SVN2GIT_GIT_USER_NAME") or fb.get(
        "git_user_name"
    )
    git_user_email = os.getenv("SVN2GIT_GIT_USER_EMAIL") or fb.get(
        "git_user_email"
    )

    # --- Boolean fields: CLI > env > YAML > default ---

    if debug:
        final_debug = True
    else:
        env_debug = os.getenv("SVN2GIT_DEBUG")
        if env_debug is not None:
            final_debug = env_debug.lower() in ("true", "1", "yes", "on")
        else:
            final_debug = bool(fb.get("debug", False))

    # --- Numeric fields: env > YAML > default ---

    timeout_raw = os.getenv("SVN2GIT_COMMAND_TIMEOUT")
    if timeout_raw is not None:
        try:
            final_timeout: float | None = float(timeout_raw)
        except ValueError:
            raise ValueError(
                f"Invalid SVN2GIT_COMMAND_TIMEOUT '{timeout_raw}': must be a number of seconds"
            ) from None
    elif fb.get("command_timeout") is not None:
        final_timeout = float(fb["command_timeout"])
    else:
        final_timeout = None

    config = Config(
        history_file=history_path,
        backend=final_backend,
        svn_command=svn_command,
        git_command=git_command,
        command_timeout=final_timeout,
        git_user_name=git_user_name,
        git_user_email=git_user_email,
        debug=final_debug,
    )

    validate_config(config)

    return config
