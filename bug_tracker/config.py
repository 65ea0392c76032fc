"""
Configuration management for Bug Tracker.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Application
    app_name: str = Field(default="Bug Tracker")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # API
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=5000)
    api_workers: int = Field(default=1)
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed origins for the browser client.",
    )

    # Database
    database_url: str = Field(default="sqlite:///./bug_tracker.db")

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="'json' or 'console'")

    def cors_origin_list(self) -> List[str]:
        """Split ``cors_origins`` into a list, dropping blanks."""
        origins = [origin.strip() for origin in self.cors_origins.split(",")]
        return [o for o in origins if o]


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get application settings."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> Settings:
    """Re-read settings from the current process environment."""
    global _settings
    _settings = Settings()
    return _settings
