"""
Shared configuration management for the gamepass proxy.
"""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="GAMEPASS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = "local"
    log_level: str = "info"

    # Upstream
    inventory_base_url: str = "https://inventory.roblox.com"
    games_base_url: str = "https://games.roblox.com"

    # Fetch policy
    request_timeout_ms: int = Field(default=10_000, gt=0)
    max_retries: int = Field(default=3, ge=0)
    retry_base_delay_ms: int = Field(default=400, ge=0)
    max_page_limit: int = Field(default=100, gt=0)
    max_pages: int = Field(default=500, gt=0)

    # Result cache
    cache_ttl_ms: int = Field(default=60_000, ge=0)
    cache_max_entries: int = Field(default=10_000, gt=0)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int) -> ServiceConfig:
    """Get configuration for a specific service.

    ``PORT`` overrides the default port, the way hosting platforms inject it.
    """
    env_port = os.getenv("PORT")
    if env_port and env_port.isdigit():
        port = int(env_port)
    return ServiceConfig(service_name=service_name, port=port)
