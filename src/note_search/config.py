"""Centralized configuration for note-search using Pydantic Settings."""

from __future__ import annotations

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from ``NOTE_SEARCH_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="NOTE_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Worker channel
    request_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Fail a pending request after this many seconds (unset = wait forever)",
    )
    worker_thread_name: str = Field(default="note-search-worker", description="Name of the engine thread")
    inbound_queue_size: int = Field(
        default=0, ge=0, description="Maximum queued requests before new ones fail with WorkerBusyError (0 = unbounded)"
    )
    shutdown_timeout_seconds: float = Field(
        default=5.0, gt=0, description="How long close() waits for the worker thread to drain"
    )

    # Ranking
    bm25_k1: float = Field(default=1.2, ge=0.0, description="BM25 term frequency saturation")
    bm25_b: float = Field(default=0.75, ge=0.0, le=1.0, description="BM25 length normalization")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        if not isinstance(logging.getLevelName(value.upper()), int):
            raise ValueError(f"Unknown log level '{value}'")
        return value.lower()
