"""Application settings.

Every tunable value is read from the environment (or a .env file) through
pydantic-settings; each concern has its own section with an env prefix.
"""

from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SYSTEM_PROMPT = (
    "You are a professional translator. Translate the following German blog post to English. "
    "Keep all HTML tags exactly as they are. Do not add or remove any HTML tags. "
    "Translate only the text content within the tags."
)


class AIConfig(BaseSettings):
    """AI provider configuration settings.

    The API key may be given either as AI_API_KEY or as the provider-wide
    ANTHROPIC_API_KEY variable.
    """

    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("AI_API_KEY", "ANTHROPIC_API_KEY"),
        description="Provider API key (translation is disabled when unset)"
    )
    model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Model identifier used for translation requests"
    )
    system_prompt: str = Field(
        default=DEFAULT_SYSTEM_PROMPT,
        description="Translation instructions placed in the system prompt"
    )

    # Generation Settings
    # Bounds follow the provider limits
    max_tokens: int = Field(
        default=4096,
        ge=1024,
        le=128000,
        description="Maximum tokens the model may generate"
    )
    temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Sampling temperature"
    )

    # Transport Settings
    base_url: str = Field(
        default="https://api.anthropic.com",
        description="Provider API base URL"
    )
    api_version: str = Field(
        default="2023-06-01",
        description="Value of the anthropic-version header"
    )
    # Translating a long post can take minutes
    request_timeout: float = Field(
        default=120.0,
        ge=5.0,
        le=600.0,
        description="Timeout for provider requests in seconds"
    )

    # Diagnostics
    verbose_errors: bool = Field(
        default=False,
        description="Log raw provider error text (never shown to end users)"
    )

    model_config = SettingsConfigDict(env_prefix="AI_", populate_by_name=True)

    @field_validator("api_key")
    @classmethod
    def blank_key_is_missing(cls, v):
        """Treat an empty or whitespace-only key as not configured."""
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v


class CacheConfig(BaseSettings):
    """Cache configuration for the provider model list."""

    # 12 hours
    models_ttl: int = Field(
        default=12 * 3600,
        ge=60,
        le=7 * 24 * 3600,
        description="Seconds a fetched model list stays cached"
    )

    model_config = SettingsConfigDict(env_prefix="CACHE_")


class RedisConfig(BaseSettings):
    """Redis configuration for the shared model-list cache."""

    redis_uri: str | None = Field(
        default=None,
        validation_alias=AliasChoices("REDIS_URI", "REDIS_REDIS_URI"),
        description="Redis connection URI (e.g., redis://localhost:6379); in-memory cache when unset"
    )

    max_connections: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum Redis connections in pool"
    )

    model_config = SettingsConfigDict(env_prefix="REDIS_", populate_by_name=True)


class AuthConfig(BaseSettings):
    """Authentication configuration."""

    api_key: str | None = Field(
        default=None,
        alias="WPTOMEDIUM_KEY",
        description="API key for authentication (if None, auth is disabled)"
    )

    model_config = SettingsConfigDict(case_sensitive=True)


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingConfig(BaseSettings):
    """Log levels, output targets and file rotation."""

    log_level: LogLevel = Field(default="INFO", description="Level for application loggers")
    access_log_level: LogLevel = Field(default="INFO", description="Level for uvicorn.access")
    json_logs: bool = Field(default=False, description="Emit one JSON object per log line")

    # Unset paths log to the console
    access_log_file: str | None = Field(default=None, description="Access log path (stdout if unset)")
    error_log_file: str | None = Field(default=None, description="Application log path (stderr if unset)")

    log_rotation_size: int = Field(
        default=10 * 1024 * 1024,
        ge=1024 * 1024,
        description="Bytes written before a log file is rotated"
    )
    log_rotation_count: int = Field(default=5, ge=1, le=100, description="Rotated files kept per log")

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    """Main application settings combining all configuration sections."""

    app_name: str = Field(
        default="WPtoMedium",
        description="Application name"
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version"
    )

    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Runtime environment"
    )

    ai: AIConfig = Field(default_factory=AIConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    redis: RedisConfig = Field(default_factory=RedisConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def validate_settings(self) -> list[str]:
        """Validate settings and return list of warnings/info messages."""
        messages = []

        if not self.ai.api_key:
            messages.append("WARNING: No AI API key configured - translation requests will fail")

        if self.environment == "production":
            if not self.auth.api_key:
                messages.append("WARNING: No API key configured in production")

            if not self.logging.json_logs:
                messages.append("INFO: JSON logs recommended for production")

            if self.ai.verbose_errors:
                messages.append("WARNING: Verbose provider errors enabled in production")

        messages.append(f"INFO: Model: {self.ai.model}")
        messages.append(f"INFO: Max tokens: {self.ai.max_tokens}, temperature: {self.ai.temperature}")
        messages.append(f"INFO: Model list cache: {'redis' if self.redis.redis_uri else 'memory'}")
        messages.append(f"INFO: Auth: {'enabled' if self.auth.api_key else 'disabled'}")

        return messages


# Loaded lazily by get_settings()
_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Discard the cached settings and read the environment again."""
    global _settings
    _settings = Settings()
    return _settings
