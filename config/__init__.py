"""
Configuration and storage access.

settings holds the import tolerances, price source tags and preview TTL.
get_supabase_client backs every CatalogSession; check_connection feeds
/health and the startup log.
"""

from config.settings import settings, get_settings, Settings
from config.database import (
    get_supabase_client,
    check_connection,
    ConnectionError
)

__all__ = [
    # Settings
    "settings",
    "get_settings",
    "Settings",

    # Database
    "get_supabase_client",
    "check_connection",
    "ConnectionError",
]
