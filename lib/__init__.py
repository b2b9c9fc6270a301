# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - cache.py: In-memory TTL cache (JWKS keys, message of the day)
# - utils.py: Shared utilities (error base class, UUIDs, UTC dates)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.cache import TTLCache
from lib.utils import (
    ApplicationError,
    normalize_date_key,
    normalize_uuid,
    parse_timestamp,
    today_key_utc,
    utc_now,
)

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Cache
    "TTLCache",
    # Utils
    "ApplicationError",
    "normalize_date_key",
    "normalize_uuid",
    "parse_timestamp",
    "today_key_utc",
    "utc_now",
]
