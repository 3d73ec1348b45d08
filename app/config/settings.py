# app/config/settings.py
#
# Description:
# This module defines and manages all configuration settings for the recipe search service.
# It uses Pydantic's BaseSettings to load configuration from environment variables
# or a .env file, providing a centralized and type-safe way to handle settings.
#
# Key Responsibilities:
# - Define the application's configuration schema.
# - Load settings from environment variables or a specified .env file.
# - Provide a singleton `settings` object for the composition root and entry points.

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Defines the application's configuration settings.
    Pydantic automatically reads values from environment variables or the .env file.
    """
    # --- General Application Settings ---
    app_env: str = "dev"
    port: int = 8000

    # --- Relational Store (system of record) ---
    database_url: str = "sqlite:///./storage/cookbook.db"  # Any SQLAlchemy URL, e.g. postgresql+psycopg://...
    database_echo: bool = False
    database_auto_create: bool = True  # Create tables at startup (dev only)

    # --- OpenSearch Settings ---
    opensearch_host: str = "localhost"
    opensearch_port: int = 9200
    opensearch_username: str = "admin"
    opensearch_password: str = "admin"
    opensearch_use_ssl: bool = False
    opensearch_verify_certs: bool = False
    opensearch_index_prefix: str = "cookbook"  # Aliases become <prefix>_recipes / <prefix>_ingredients
    opensearch_schema_version: int = 1  # Physical index suffix; bump to roll out a new mapping
    opensearch_request_timeout: float = 30.0  # Seconds for regular engine requests
    opensearch_ping_timeout: float = 3.0  # Seconds for connectivity probes

    # --- Search Settings ---
    search_default_take: int = 20
    search_max_take: int = 100
    autocomplete_default_limit: int = 10
    search_fallback_enabled: bool = True  # Serve reads from the relational store when the engine fails
    search_circuit_failure_threshold: int = 3  # Consecutive engine failures before skipping the engine
    search_circuit_reset_seconds: float = 30.0  # How long to skip the engine before probing again

    # --- Index Sync Settings ---
    sync_bulk_batch_size: int = 500  # Recipes per page during a full reindex

    # --- Logging Configuration ---
    log_level: str = "INFO"

    # Pydantic model configuration to specify the source of the settings
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"  # Ignore extra fields in .env that are not defined here
    )


# Create a singleton instance of the Settings class to be used across the application
settings = Settings()
