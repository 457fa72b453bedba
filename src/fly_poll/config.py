"""Application configuration using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="FLY_POLL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", gt=0, le=65535)
    reload: bool = Field(default=True, description="Enable auto-reload in development")

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )

    # Transport settings
    search_api_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the remote search service",
    )
    request_timeout: float | None = Field(
        default=None,
        description="Per-request timeout in seconds (None waits indefinitely)",
        gt=0,
    )

    # Search session settings
    poll_interval: float = Field(
        default=3.0,
        description="Delay between automatic polls while the search is incomplete (seconds)",
        gt=0,
        le=300,
    )
    page_size: int = Field(
        default=10,
        description="Number of results requested per page",
        gt=0,
        le=100,
    )

    # Search store settings
    search_store_ttl: int = Field(
        default=3600,
        description="Lifetime of a remote search job in seconds (1 hour)",
        gt=0,
        le=86400,
    )
    search_store_size: int = Field(
        default=1000,
        description="Maximum number of stored search jobs",
        gt=0,
        le=100000,
    )

    # Demo backend settings
    mock_total_results: int = Field(
        default=50,
        description="Number of flights a demo search eventually finds",
        ge=0,
        le=10000,
    )
    mock_search_duration: float = Field(
        default=15.0,
        description="Time until a demo search reports full progress (seconds)",
        gt=0,
        le=3600,
    )
    mock_initialize_delay: float = Field(
        default=0.5,
        description="Simulated latency of search creation (seconds)",
        ge=0,
        le=60,
    )
    mock_page_delay_min: float = Field(
        default=1.0,
        description="Lower bound of simulated page latency (seconds)",
        ge=0,
        le=60,
    )
    mock_page_delay_max: float = Field(
        default=3.0,
        description="Upper bound of simulated page latency (seconds)",
        ge=0,
        le=60,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get application settings (singleton).

    Returns:
        Settings instance
    """
    return Settings()
