"""
Configuration management for bisect-memo.

This module provides the MemoSettings class, which loads defaults for
MemoizedTask instances and the demo CLI from environment variables, .env
files, or explicit keyword arguments.

Environment variables are automatically loaded with the BISECT_MEMO_ prefix.
Example: BISECT_MEMO_EXPIRY_MS=30000
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class MemoSettings(BaseSettings):
    """
    Configuration settings for bisect-memo with environment variable support.

    Example:
        # From environment
        export BISECT_MEMO_EXPIRY_MS=500
        export BISECT_MEMO_LOG_LEVEL=DEBUG

        # In code
        settings = MemoSettings()
        task = MemoizedTask(fetch, transform, settings=settings)
    """

    expiry_ms: Optional[float] = Field(
        default=None,
        gt=0,
        description="Lifetime of a cached result in milliseconds; unset means never expire",
    )
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="BISECT_MEMO_", env_file=".env", extra="ignore"
    )
