# ==== APPLICATION SETTINGS CONFIGURATION ==== #

"""
Application settings configuration for Boxship.

This module provides centralized configuration management using Pydantic Settings
with environment variable loading for the database, currency formatting and
observability components.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


# ==== MAIN SETTINGS CLASS ==== #


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Provides configuration for the database connection, currency display,
    logging and tracing with validation and type safety.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra='ignore'
    )

    # --► CORE APPLICATION SETTINGS
    APP_ENV: str = "dev"
    SERVICE_NAME: str = "boxship"
    SERVICE_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_DIR: str = "logs"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # --► DATABASE CONFIGURATION
    DATABASE_URL: str = "sqlite+aiosqlite:///./boxship.db"
    DATABASE_ECHO: bool = False

    # --► CURRENCY DISPLAY
    CURRENCY_CODE: str = "INR"
    CURRENCY_LOCALE: str = "en_IN"

    # --► OBSERVABILITY CONFIGURATION
    OTEL_EXPORTER_OTLP_ENDPOINT: str | None = None
    OTEL_EXPORTER_OTLP_HEADERS: str | None = None
    OTEL_SERVICE_NAME: str | None = None
    OTEL_RESOURCE_ATTRIBUTES: str | None = None

    # --► METRICS CONFIGURATION
    PROMETHEUS_SCRAPE_PATH: str = "/metrics"


# ==== GLOBAL SETTINGS INSTANCE ==== #


# Global settings instance for application-wide access
settings = Settings()


def get_settings() -> Settings:
    """
    Get global settings instance.

    Returns:
        Settings: Global application settings instance
    """
    return settings
