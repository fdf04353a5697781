"""Unified configuration schema for locale_sync.

Defines Pydantic models for the YAML config structure with dedicated
sections for the remote project, sync behaviour and logging, plus an
adapter that turns a parsed config into fallbacks for ``load_options()``.

Usage:
    from locale_sync.config_schema import build_config, to_option_fallbacks

    raw = load_hierarchical_config()
    unified = build_config(raw)
    options = load_options(yaml_fallbacks=to_option_fallbacks(unified))
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class ProjectConfig(BaseModel):
    """Remote project settings.

    All fields are optional to support zero-config: env vars and CLI args
    can supply them at runtime instead.
    """

    id: str | None = Field(default=None, description="Remote project id")
    version: str | None = Field(
        default=None, description="Project version, e.g. latest"
    )
    api_path: str | None = Field(default=None, description="API base URL")
    api_key: str | None = Field(
        default=None, description="Credential for private projects and pushes"
    )

    model_config = {"frozen": True}


class SyncConfig(BaseModel):
    """Local tree layout and sync policy."""

    path: str | None = Field(default=None, description="Local root directory")
    reference_language: str | None = Field(
        default=None, description="Source-of-truth language code"
    )
    format: str | None = Field(default=None, description="File format")
    language_folder_prefix: str | None = Field(
        default=None, description="Prefix of every language folder"
    )
    skip_empty: bool = Field(
        default=False, description="Do not write empty namespaces"
    )
    update_values: bool = Field(
        default=False, description="Push changed values, not only new keys"
    )
    omit_reference: bool = Field(
        default=False,
        description="Skip pulling the reference language when nothing changed",
    )
    settle_delay: float | None = Field(
        default=None,
        ge=0,
        description="Seconds to wait between push and pull",
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Every section has sensible defaults, so ``UnifiedConfig()`` is valid.
    """

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the merged raw config dict.

    Missing sections get defaults.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)


def to_option_fallbacks(unified: UnifiedConfig) -> dict[str, Any]:
    """Flatten the ``project`` and ``sync`` sections into the keyword names
    understood by ``load_options(yaml_fallbacks=...)``.

    Unset (``None``) values are dropped so they never shadow defaults.
    """
    project = unified.project
    fallbacks: dict[str, Any] = {
        "project_id": project.id,
        "version": project.version,
        "api_path": project.api_path,
        "api_key": project.api_key,
    }
    fallbacks.update(unified.sync.model_dump())
    return {k: v for k, v in fallbacks.items() if v is not None}
