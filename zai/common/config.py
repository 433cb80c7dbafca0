"""
Configuration management for the ZAI SDK.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ZAISettings(BaseSettings):
    """Settings read from ``ZAI_*`` environment variables or a ``.env`` file."""

    model_config = SettingsConfigDict(
        env_prefix="ZAI_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: Optional[str] = Field(default=None)
    base_url: Optional[str] = Field(default=None)
    log_level: str = Field(default="warning")


def get_settings() -> ZAISettings:
    """Read settings fresh from the environment."""
    return ZAISettings()
