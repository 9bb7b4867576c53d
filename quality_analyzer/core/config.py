# Data Quality Analyzer - Core Configuration
# Typed configuration with validation and environment management

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment enumeration."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging level enumeration."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class OpenAIConfig(BaseSettings):
    """OpenAI API configuration for the recommendation service."""

    model_config = SettingsConfigDict(env_prefix="OPENAI_")

    # An empty key disables the external service; recommendations then come
    # from the rule-based generator only.
    api_key: SecretStr = Field(default=SecretStr(""), description="OpenAI API key")
    organization: Optional[str] = Field(default=None, description="OpenAI organization ID")
    base_url: Optional[str] = Field(default=None, description="Override for the API base URL")

    # Model settings
    default_model: str = Field(default="gpt-4o-mini", description="Model used for recommendations")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1024, ge=100, le=128000)

    # One attempt per analysis run, bounded by an explicit timeout
    timeout: float = Field(default=10.0, gt=0, le=300)
    max_retries: int = Field(default=0, ge=0, le=10)

    @property
    def is_configured(self) -> bool:
        """Whether an API key is available."""
        return bool(self.api_key.get_secret_value())


class AnalysisConfig(BaseSettings):
    """Dataset analysis configuration."""

    model_config = SettingsConfigDict(env_prefix="ANALYSIS_")

    preview_rows: int = Field(default=5, ge=1, le=100, description="Rows kept in the data preview")
    sample_values: int = Field(default=5, ge=1, le=50, description="Distinct sample values per column")


class SecurityConfig(BaseSettings):
    """HTTP surface configuration."""

    model_config = SettingsConfigDict(env_prefix="SECURITY_")

    cors_origins: list[str] = Field(default=["http://localhost:3000"])
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: list[str] = Field(default=["*"])
    cors_allow_headers: list[str] = Field(default=["*"])


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application metadata
    app_name: str = Field(default="Data Quality Analyzer", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Environment = Field(default=Environment.DEVELOPMENT)
    debug: bool = Field(default=False)

    # Server settings
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1000, le=65535)

    # Logging
    log_level: LogLevel = Field(default=LogLevel.INFO)
    log_format: str = Field(default="text")  # json or text

    # Upload settings
    max_upload_size_mb: int = Field(default=10, ge=1, le=1000)
    allowed_formats: list[str] = Field(default=["csv", "json"])

    # Nested configurations
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment == Environment.DEVELOPMENT


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache so that a single Settings instance is shared by the
    HTTP layer and the services it wires together.
    """
    return Settings()


# Export for easy access
settings = get_settings()
