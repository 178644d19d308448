"""Configuration management for PhysioPro."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Data store
    database_url: str = Field(
        default="sqlite+aiosqlite:///:memory:",
        description="SQLAlchemy async URL; the in-memory default is lost on restart",
    )
    seed_demo_data: bool = Field(
        default=True,
        description="Load the demo fixture records on startup",
    )
    demo_password: str = Field(
        default="PhysioPro!2024",
        description="Password given to every seeded demo account",
    )

    # Hosted LLM (OpenAI-compatible)
    llm_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="OpenAI-compatible endpoint for the primary model",
    )
    llm_api_key: str = Field(default="", description="API key for the primary model")
    llm_model: str = Field(default="gpt-4o-mini", description="Primary model name")
    llm_timeout: int = Field(default=60, description="Timeout in seconds for LLM requests")

    # Anthropic Claude (fallback)
    anthropic_api_key: str = Field(
        default="",
        description="Anthropic API key for Claude fallback",
    )
    anthropic_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Claude model to use",
    )

    # Auth
    jwt_secret: str = Field(default="change-me-in-production")
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60 * 12)
    cookie_secure: bool = Field(default=False)
    cookie_domain: str = Field(default="")

    # API Settings
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8080)
    api_key: str = Field(
        default="",
        description="API key for machine clients; enables the API key middleware",
    )
    ai_rate_limit_per_minute: int = Field(
        default=20,
        description="Max AI flow requests per client per minute",
    )

    # CORS
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:9002"],
        description="Allowed CORS origins",
    )

    # Notifications
    max_notifications_per_list: int = Field(
        default=20,
        description="Notifications kept per recipient; older ones are dropped",
    )

    # Observability
    observability_enabled: bool = Field(default=True)
    observability_log_dir: Path = Field(default=Path("./data/logs"))

    # Debug
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode (exposes error details in responses)",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    # Flow Settings
    max_retries: int = Field(default=3, description="Max retries for LLM calls")

    @property
    def has_anthropic_key(self) -> bool:
        """Check if Anthropic API key is configured."""
        return bool(self.anthropic_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
