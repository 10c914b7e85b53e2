"""
Configuration management.

Centralized environment variable management and validation.
"""

from typing import List, Literal
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from shared.errors import ConfigError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # Allow case-insensitive env var matching
        extra="ignore"
    )

    # Render collaborator (director server)
    render_server_url: str = "http://localhost:3001"
    render_request_timeout_seconds: float = 30.0

    # Generation backend (OpenAI-compatible endpoint)
    generation_api_key: str = ""
    generation_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    preferred_model: str = "gemini-3-flash-preview"
    fallback_models: List[str] = ["gemini-2.0-flash", "gemini-1.5-pro"]
    generation_max_retries: int = 1
    generation_retry_cooldown_seconds: float = 30.0
    script_timeout_seconds: float = 300.0

    # JIT visual sync
    clip_length_seconds: float = 5.0
    words_per_second: float = 2.5
    min_estimated_duration_seconds: float = 5.0
    measure_audio_duration: bool = True

    # Progress channel
    stream_reconnect_delay_seconds: float = 3.0

    # Artifacts
    download_dir: str = "downloads"

    # Provider used by the render collaborator
    video_source: Literal["meta", "grok"] = "meta"

    # Operator surface
    frontend_url: str = "http://localhost:5173"

    # Environment
    environment: Literal["development", "staging", "production", "test"] = "development"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @field_validator("render_server_url")
    @classmethod
    def validate_render_server_url(cls, v: str) -> str:
        """Validate render server URL format."""
        if not v:
            raise ConfigError("RENDER_SERVER_URL is required")
        if not v.startswith(("http://", "https://")):
            raise ConfigError("RENDER_SERVER_URL must be a valid HTTP/HTTPS URL")
        return v.rstrip("/")

    @field_validator("generation_base_url")
    @classmethod
    def validate_generation_base_url(cls, v: str) -> str:
        """Validate generation endpoint format."""
        if not v.startswith(("http://", "https://")):
            raise ConfigError("GENERATION_BASE_URL must be a valid HTTP/HTTPS URL")
        return v

    @field_validator("preferred_model")
    @classmethod
    def validate_preferred_model(cls, v: str) -> str:
        if not v.strip():
            raise ConfigError("PREFERRED_MODEL must not be empty")
        return v.strip()

    @field_validator("generation_max_retries")
    @classmethod
    def validate_generation_max_retries(cls, v: int) -> int:
        """Every retry path needs a fixed ceiling."""
        if v < 0 or v > 5:
            raise ConfigError("GENERATION_MAX_RETRIES must be between 0 and 5")
        return v

    @field_validator("clip_length_seconds", "words_per_second")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ConfigError("Clip length and speaking rate must be positive")
        return v

    @field_validator(
        "generation_retry_cooldown_seconds",
        "stream_reconnect_delay_seconds",
        "script_timeout_seconds",
        "min_estimated_duration_seconds",
    )
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ConfigError("Delays, timeouts and duration floors cannot be negative")
        return v


# Singleton instance
try:
    settings = Settings()
except Exception as e:
    # Re-raise as ConfigError for consistency
    if isinstance(e, ConfigError):
        raise
    raise ConfigError(f"Failed to load configuration: {str(e)}") from e
