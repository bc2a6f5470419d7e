"""
Shared configuration management for the Travel Itinerary API.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="ITINERARY_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = "local"
    log_level: str = "info"

    # Key/value cache service
    redis_url: str = "redis://localhost:6379/0"
    redis_password: Optional[str] = None
    cache_enabled: bool = True
    cache_operation_timeout: float = 0.5
    cache_bulk_timeout: float = 2.0
    cache_scan_batch_size: int = 100

    # Startup connection backoff
    cache_connect_attempts: int = 5
    cache_connect_base_delay: float = 0.1
    cache_connect_max_delay: float = 3.0

    # Namespace TTLs (seconds)
    user_cache_ttl: int = 3600
    itinerary_cache_ttl: int = 1800
    itinerary_list_cache_ttl: int = 600
    public_itinerary_list_cache_ttl: int = 300


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
