"""Unified configuration schema for svn2git_sync.

Defines Pydantic models for the YAML config structure with dedicated
sections for sync behaviour, the Git committer identity and logging.

Usage:
    from svn2git_sync.config_schema import UnifiedConfig, build_config

    raw = load_hierarchical_config()
    unified = build_config(raw)
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class SyncSettings(BaseModel):
    """Sync behaviour and external tool settings.

    All fields are optional; env vars and CLI args can supply them at
    runtime instead.
    """

    history_file: str | None = Field(
        default=None, description="Path of the JSON history file"
    )
    backend: Literal["process", "memory"] = Field(
        default="process", description="Git backend: process or memory"
    )
    svn_command: str = Field(default="svn", description="svn executable")
    git_command: str = Field(default="git", description="git executable")
    command_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Seconds to wait for each svn/git invocation",
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {"frozen": True}


class GitIdentityConfig(BaseModel):
    """Committer identity applied to the destination repository.

    Only used when both fields are set.
    """

    user_name: str | None = Field(default=None, description="git user.name")
    user_email: str | None = Field(
        default=None, description="git user.email"
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
        format: ``text`` or ``json``.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")
    format: Literal["text", "json"] = Field(
        default="text", description="Log record format"
    )

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Every section has sensible defaults, so ``UnifiedConfig()``
    (zero-config) is always valid.
    """

    sync: SyncSettings = Field(default_factory=SyncSettings)
    git: GitIdentityConfig = Field(default_factory=GitIdentityConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Missing sections get defaults.

    Raises:
        pydantic.ValidationError: If a value has the wrong type or range.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)
