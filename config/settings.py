"""Configuration management for the remotewd client."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_URL_PREFIX = "http://127.0.0.1:4444/wd/hub"


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote end
    webdriver_url_prefix: str = DEFAULT_URL_PREFIX
    webdriver_browser_name: str = "firefox"

    # Transport
    webdriver_http_timeout: float = Field(default=60.0, gt=0)
    webdriver_debug: bool = False  # mirror wire traffic to the transport logger

    # Logging Configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    log_format: Literal["json", "text"] = "text"

    @property
    def url_prefix(self) -> str:
        """URL prefix with any trailing slash removed."""
        return self.webdriver_url_prefix.rstrip("/") or DEFAULT_URL_PREFIX


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
