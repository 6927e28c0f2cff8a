"""
Client configuration using Pydantic Settings.

All environment variables are accessed through this config object.
Never use os.getenv() directly in business logic.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Render service
    TRENDMAKER_API_BASE: str = Field(
        default="https://bigtrendmaker-production.up.railway.app",
        description="Render service base URL",
    )
    REQUEST_TIMEOUT_SECONDS: Optional[float] = Field(
        default=None,
        gt=0,
        description="Per-request timeout in seconds (None waits indefinitely)",
    )

    # Job lifecycle
    POLL_INTERVAL_SECONDS: float = Field(
        default=2.0,
        gt=0,
        description="Seconds between status polls",
    )
    MAX_POLL_ATTEMPTS: Optional[int] = Field(
        default=None,
        gt=0,
        description="Give up after this many status polls (None polls forever)",
    )

    # Render request defaults
    DEFAULT_DURATION_SECONDS: int = Field(
        default=5,
        gt=0,
        description="Duration used when the form value is empty or invalid",
    )
    RENDER_FORMAT: str = Field(
        default="mp4",
        description="Output container requested from the render service",
    )

    # Development
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Log level for the command line client",
    )
    MOCK_POLLS_TO_COMPLETE: int = Field(
        default=2,
        ge=1,
        description="Status polls the mock render service answers before finishing a job",
    )


# Global settings instance
settings = Settings()
