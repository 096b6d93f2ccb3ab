"""Settings for the model registration bootstrap.

Values come from environment variables prefixed with ``DATALAYER_`` or from a
``.env`` file in the working directory:
    from datalayer.settings import get_settings
    settings = get_settings()
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Bootstrap settings loaded from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="DATALAYER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    models_dir: Optional[Path] = Field(
        default=None,
        description="Directory holding one schema definition file per model",
    )
    verbose: bool = Field(
        default=False,
        description="Emit a diagnostic line for every registration decision",
    )
    database_url: str = Field(
        default="sqlite:///:memory:",
        description="SQLAlchemy URL used when creating tables",
    )
    echo_sql: bool = Field(
        default=False,
        description="Echo emitted SQL statements",
    )
    log_level: str = Field(
        default="INFO",
        description="Loguru level for the stderr sink",
    )

    @field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        return value.strip().upper()


@lru_cache()
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
