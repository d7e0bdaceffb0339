"""
Shared configuration management for the platform plugin client.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_BASE_URL = "https://app.envoy.com"


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="PLATFORM_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")


class PlatformConfig(BaseConfig):
    """Settings for talking to the platform API."""

    base_url: str = Field(default=DEFAULT_BASE_URL)
    http_timeout: float = Field(default=10.0, gt=0)

    # Resource loader
    loader_max_batch_size: Optional[int] = Field(default=None, ge=1)
    cache_max_entries: Optional[int] = Field(default=None, ge=1)
    share_include_variants: bool = Field(default=False)


def get_config(**overrides) -> PlatformConfig:
    """Get client configuration, letting explicit overrides win over the environment."""
    return PlatformConfig(**overrides)
