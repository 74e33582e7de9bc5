# ==============================================================================
# Application Configuration
# ==============================================================================
"""
Configuration management using pydantic-settings.

All configuration is loaded from environment variables (prefix SESSIONIZE_),
with support for .env files via python-dotenv. Settings are read once and
treated as read-only for the lifetime of a run.
"""

from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file before any settings are instantiated
load_dotenv()


class SessionizeSettings(BaseSettings):
    """Sessionization engine settings."""

    model_config = SettingsConfigDict(env_prefix="SESSIONIZE_", extra="ignore")

    timeout_minutes: float = Field(
        default=30,
        description="Inactivity gap (minutes) that starts a new session",
    )
    reducer: str = Field(
        default="count",
        description="Built-in reducer (count, sum, first, last, collect, distinct)",
    )
    reducer_field: Optional[str] = Field(
        default=None,
        description="Payload key the reducer is applied to (dict payloads)",
    )
    error_policy: Literal["fail_fast", "collect"] = Field(
        default="fail_fast",
        description="Reducer failure policy (fail_fast or collect)",
    )
    timestamp_unit: Literal["ms", "s"] = Field(
        default="ms",
        description="Unit of numeric timestamps (ms or s)",
    )
    workers: int = Field(
        default=1,
        description="Worker threads for parallel sessionization (1 = sequential)",
    )
    summary_interval_seconds: float = Field(
        default=30.0,
        description="Interval between periodic throughput log summaries",
    )

    # General settings
    log_level: str = Field(default="INFO", description="Logging level")


@lru_cache
def get_settings() -> SessionizeSettings:
    """
    Get cached application settings.

    Settings are loaded once and cached for subsequent calls.
    """
    return SessionizeSettings()
