"""Configuration and settings management using pydantic-settings."""
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CLERK_API_BASE_URL = "https://api.clerk.com/v1"


class Settings(BaseSettings):
    """Node runtime settings with environment variable loading."""

    model_config = SettingsConfigDict(
        env_prefix="CLERK_NODE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    env: str = Field(default="development", description="Environment name")
    log_level: str = Field(default="INFO", description="Log level")

    clerk_api_base_url: str = Field(
        default=DEFAULT_CLERK_API_BASE_URL,
        description="Clerk Backend API base URL used when the credential sets none",
    )
    http_timeout_s: float = Field(
        default=30.0,
        description="Timeout for each outbound HTTP request in seconds",
    )

    @field_validator("http_timeout_s")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate that the timeout is positive."""
        if v <= 0:
            raise ValueError("http_timeout_s must be positive")
        return v

    @field_validator("clerk_api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (useful for testing)."""
    global _settings
    _settings = None
