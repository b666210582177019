"""
Shared configuration management for the Trivsel gateway.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TRIVSEL_",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")
    version: str = Field(default="1.0.0")

    # Upstream providers
    met_user_agent: str = Field(default="TrivselSchoolProject/1.0 (contact: student@school.no)")
    climate_api_url: str = Field(default="https://api.met.no/weatherapi/locationforecast/2.0/compact")
    pollution_api_url: str = Field(default="https://api.met.no/weatherapi/airqualityforecast/0.1/")
    elevation_api_url: str = Field(default="https://ws.geonorge.no/hoydedata/v1/punkt")

    # Upstream fetch policy
    upstream_timeout_seconds: float = Field(default=8.0)
    upstream_max_retries: int = Field(default=1)
    upstream_backoff_base_seconds: float = Field(default=0.5)

    # Rate limiting
    global_rate_limit: int = Field(default=60)
    global_rate_window_seconds: float = Field(default=600.0)
    grid_rate_limit: int = Field(default=1)
    grid_rate_window_seconds: float = Field(default=120.0)


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
