# notifier/config.py
"""
Centralized configuration with validation.

Uses pydantic-settings to load and validate all environment variables at startup.
Fail fast with clear error messages if required config is missing.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = Field(
        ...,
        description="SQLAlchemy connection URL (PostgreSQL in production, SQLite for local/tests)",
    )

    # Authentication
    ADMIN_API_KEY: str | None = Field(
        default=None,
        description="API key for admin endpoints (unset = admin endpoints refuse every call)",
    )

    # CORS
    CORS_ORIGINS: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins",
    )

    # Application
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: development, staging, production",
    )

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level: DEBUG, INFO, WARNING, ERROR",
    )
    LOG_JSON: bool = Field(
        default=True,
        description="Emit single-line JSON logs (False = human-readable)",
    )

    # Text repair
    TEXT_REPAIR_ENABLED: bool = Field(
        default=True,
        description="Repair mojibake and missing accents in notification text",
    )
    TEXT_REPAIR_CACHE_SIZE: int = Field(
        default=10_000,
        ge=0,
        description="Maximum cached repairs (LRU). 0 = unbounded",
    )

    # LanguageTool enrichment
    LANGUAGETOOL_URL: str | None = Field(
        default=None,
        description="LanguageTool check endpoint, e.g. https://api.languagetool.org/v2/check. Unset = local rules only",
    )
    LANGUAGETOOL_LANGUAGE: str = Field(
        default="pt-BR",
        description="Language code sent with every check",
    )
    LANGUAGETOOL_TIMEOUT: float = Field(
        default=3.0,
        gt=0,
        description="Hard timeout for one remote check, in seconds",
    )
    LANGUAGETOOL_FAILURE_THRESHOLD: int = Field(
        default=5,
        ge=1,
        description="Consecutive failures before the circuit opens",
    )
    LANGUAGETOOL_RESET_SECONDS: float = Field(
        default=60.0,
        gt=0,
        description="Cooldown before an open circuit lets a test call through",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @field_validator("DATABASE_URL")
    @classmethod
    def fix_database_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but SQLAlchemy needs postgresql+psycopg2://"""
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+psycopg2://", 1)
        return v

    @field_validator("LANGUAGETOOL_URL")
    @classmethod
    def blank_url_is_unset(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings. Call at startup to validate config."""
    return Settings()
