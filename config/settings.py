"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )
    catalog_commit_function: str = Field(
        default="apply_catalog_changes",
        description="Database function that applies one unit of work in a transaction"
    )

    # ===================
    # IMPORT SETTINGS
    # ===================
    import_price_source: str = Field(
        default="IMPORT_EXCEL",
        description="Price history source tag for catalog imports"
    )
    sync_price_source: str = Field(
        default="INVENTORY_SYNC",
        description="Price history source tag for inventory count sync"
    )
    decimal_epsilon: Decimal = Field(
        default=Decimal("0.0001"),
        gt=0,
        description="Tolerance when comparing imported decimals with stored ones"
    )
    preview_ttl_minutes: int = Field(
        default=30,
        ge=1,
        le=1440,
        description="Minutes an import preview stays available for apply"
    )
    max_upload_mb: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Maximum accepted upload size in MB"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
