"""Centralized REMic configuration using Pydantic Settings."""

import os
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


REWRITE_PROVIDERS = ("auto", "backend", "llm")


class RemicConfig(BaseSettings):
    """Centralized configuration for the dream store and its rewrite providers."""

    model_config = SettingsConfigDict(
        env_prefix="REMIC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"
    log_file: Path | None = None
    log_rotation: str = "5 MB"
    log_retention: str = "14 days"
    service_name: str = "remic"
    service_version: str = "0.1.0"

    # Local Storage
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".remic")
    store_filename: str = "dreams.json"

    # Rewrite Configuration
    rewrite_provider: str = "auto"
    rewrite_timeout: float = 60.0  # seconds per rewrite, including retries
    rewrite_max_attempts: int = 3
    rewrite_retry_wait: float = 1.0

    # Dream backend (POST /ai/dream-rewrite)
    backend_url: str = "http://localhost:3002/api"
    backend_token: str = ""
    backend_model: str = ""

    # OpenAI-compatible language model
    llm_base_url: str = "https://api.openai.com/v1"
    llm_api_key: str = ""
    llm_model: str = "gpt-4o-mini"
    llm_temperature: float = 0.8

    @field_validator("rewrite_provider", mode="before")
    @classmethod
    def validate_rewrite_provider(cls, v):
        """Normalize provider name and reject unknown providers."""
        value = str(v).strip().lower()
        if value not in REWRITE_PROVIDERS:
            raise ValueError(f"rewrite_provider must be one of {', '.join(REWRITE_PROVIDERS)}")
        return value

    @field_validator("rewrite_max_attempts")
    @classmethod
    def validate_max_attempts(cls, v):
        return max(1, v)

    def __init__(self, **kwargs):
        """Initialize with support for standard (unprefixed) API key variables."""
        super().__init__(**kwargs)

        self._parse_special_env_vars()

    def _parse_special_env_vars(self):
        """Parse environment variables that need special handling."""
        if not self.llm_api_key and not os.getenv("REMIC_LLM_API_KEY"):
            openai_key = os.getenv("OPENAI_API_KEY")
            if openai_key:
                self.llm_api_key = openai_key

    @property
    def store_path(self) -> Path:
        """Location of the persisted dream collection."""
        return Path(self.data_dir).expanduser() / self.store_filename

    @property
    def backend_configured(self) -> bool:
        return bool(self.backend_url and self.backend_token)

    @property
    def llm_configured(self) -> bool:
        return bool(self.llm_base_url and self.llm_api_key)

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() in ("production", "prod")

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() in ("development", "dev")

    @property
    def is_testing(self) -> bool:
        """Check if running in test environment."""
        return self.environment.lower() in ("test", "testing")


# Global configuration instance
config = RemicConfig()
