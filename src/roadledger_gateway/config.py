"""Configuration management using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server settings
    host: str = Field(default="0.0.0.0", description="Server bind host")
    port: int = Field(default=8080, description="Server port")
    log_level: str = Field(default="info", description="Logging level")

    # Primary provider (OpenAI). No key means the provider is never used.
    openai_api_key: str = Field(default="", description="OpenAI API key")
    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="OpenAI API base URL",
    )
    openai_model: str = Field(default="gpt-4o", description="OpenAI vision model")

    # Secondary provider (Anthropic)
    anthropic_api_key: str = Field(default="", description="Anthropic API key")
    anthropic_base_url: str = Field(
        default="https://api.anthropic.com/v1",
        description="Anthropic API base URL",
    )
    anthropic_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Anthropic vision model",
    )
    anthropic_version: str = Field(
        default="2023-06-01",
        description="Value of the anthropic-version header",
    )

    # Provider call settings
    request_timeout: float = Field(default=60.0, description="Provider call timeout in seconds")
    max_output_tokens: int = Field(default=1500, description="Max tokens per extraction")

    # Circuit breaker settings
    circuit_failure_threshold: int = Field(
        default=3,
        description="Failures before a provider circuit opens",
    )
    circuit_reset_seconds: float = Field(
        default=300.0,
        description="Seconds after the last failure before an open circuit resets",
    )
    trip_circuit_on_auth_failure: bool = Field(
        default=True,
        description="Open a provider circuit immediately on 401/403",
    )

    # Upload limits
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Largest accepted decoded document size",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
