"""Runtime configuration: env-driven via pydantic-settings.

Reads ``CAIRN_*`` environment variables or a ``.env`` file.

Examples
--------
Override via environment::

    export CAIRN_LOG_LEVEL=DEBUG
    export CAIRN_DEFAULT_BRANCH=main
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class CairnConfig(BaseSettings):
    """Repository and CLI settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CAIRN_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Repository layout
    repo_dir_name: str = ".cairn"

    # New repositories
    default_branch: str = "master"
    initial_message: str = "initial commit"

    # Merge
    conflict_head_label: str = "HEAD"

    # Observability
    log_level: str = "WARNING"


# Module-level singleton: import as `from cairn.config import config`
config = CairnConfig()
