"""
Centralized configuration for cargo-newdeps.

Uses Pydantic BaseSettings for environment variable integration
and validation.

Configuration sources (in order of precedence):
1. Explicit constructor arguments
2. Environment variables (CARGO_NEWDEPS_*)
3. .env file
4. Default values

Example:
    from cargo_newdeps.config import get_config

    config = get_config()
    print(config.cargo_bin)  # From CARGO_NEWDEPS_CARGO_BIN or default

    # Override at runtime
    config = get_config(git_remote="upstream")
"""

from __future__ import annotations

import logging
import os
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class NewDepsConfig(BaseSettings):
    """
    Central configuration for cargo-newdeps.

    All settings can be overridden via environment variables
    prefixed with CARGO_NEWDEPS_.

    Example:
        export CARGO_NEWDEPS_CARGO_BIN=/opt/rust/bin/cargo
        export CARGO_NEWDEPS_LOG_LEVEL=debug
    """

    model_config = SettingsConfigDict(
        env_prefix="CARGO_NEWDEPS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # External tools
    cargo_bin: str = Field(
        default="cargo",
        description="Cargo executable used to resolve the dependency graph",
    )
    git_bin: str = Field(
        default="git",
        description="Git executable used for worktrees and branch lookup",
    )
    git_remote: str = Field(
        default="origin",
        description="Remote whose HEAD is the default 'from' revision",
    )
    metadata_format_version: int = Field(
        default=1,
        ge=1,
        description="Value passed to cargo metadata --format-version",
    )
    command_timeout_s: float = Field(
        default=600.0,
        ge=1.0,
        description="Timeout for a single external command, in seconds",
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="warning",
        description="Logging level for cargo-newdeps",
    )

    # Output
    output_format: Literal["text", "json"] = Field(
        default="text",
        description="Default report format",
    )

    @field_validator("cargo_bin", "git_bin")
    @classmethod
    def expand_path(cls, v: str) -> str:
        """Expand ~ and environment variables in executable paths."""
        return os.path.expanduser(os.path.expandvars(v))

    @field_validator("log_level", mode="before")
    @classmethod
    def lower_log_level(cls, v: object) -> object:
        if isinstance(v, str):
            return v.lower()
        return v

    def get_log_level(self) -> int:
        """Return the configured level as a ``logging`` constant."""
        return getattr(logging, self.log_level.upper())


# Global singleton
_config: Optional[NewDepsConfig] = None


def get_config(**overrides) -> NewDepsConfig:
    """
    Get the global configuration instance.

    Creates a singleton on first call. Subsequent calls return
    the same instance unless overrides are provided.

    Args:
        **overrides: Override any config values

    Returns:
        NewDepsConfig instance
    """
    global _config

    if overrides or _config is None:
        _config = NewDepsConfig(**overrides)

    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
