"""
Configuration management for the Resource Listing Registry.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = Field(default="Resource Listing Registry", env="APP_NAME")
    debug: bool = Field(default=False, env="DEBUG")
    environment: str = Field(default="development", env="ENVIRONMENT")

    # API
    api_host: str = Field(default="0.0.0.0", env="API_HOST")
    api_port: int = Field(default=8000, env="API_PORT")
    api_workers: int = Field(default=1, env="API_WORKERS")

    # Database
    database_url: str = Field(
        default="sqlite:///./resource_registry.db", env="DATABASE_URL"
    )

    # Logging
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    log_format: str = Field(default="json", env="LOG_FORMAT")

    # Registry
    registry_deployer: str = Field(
        default="deployer",
        env="REGISTRY_DEPLOYER",
        description="Identity that becomes admin when the registry state is first created.",
    )
    registry_initial_height: int = Field(
        default=0,
        env="REGISTRY_INITIAL_HEIGHT",
        description="Ledger height used as the first time marker.",
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings


def reset_settings(override: Optional[Settings] = None) -> Settings:
    """Re-read settings from the environment (or install an explicit override)."""
    global settings
    settings = override or Settings()
    return settings
