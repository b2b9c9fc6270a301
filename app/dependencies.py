# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# Caches are created once per process here and handed to the code that uses
# them, so tests can override them with app.dependency_overrides.
# =============================================================================

from typing import Annotated

from fastapi import Depends

from app.config import settings
from lib.cache import TTLCache
from lib.supabase_client import SupabaseClient

# JWKS documents rarely change; one entry per Supabase project
JWKS_CACHE_TTL_SECONDS = 3600

_jwks_cache = TTLCache(default_ttl_seconds=JWKS_CACHE_TTL_SECONDS, max_keys=8)
_daily_message_cache = TTLCache(
    default_ttl_seconds=settings.DAILY_MESSAGE_CACHE_TTL_SECONDS,
    max_keys=10_000,
)


def get_supabase_client() -> type[SupabaseClient]:
    """
    Get Supabase client instance.

    Returns the singleton client wrapper.
    """
    return SupabaseClient


def get_jwks_cache() -> TTLCache:
    """Cache of Supabase JWKS documents keyed by URL."""
    return _jwks_cache


def get_daily_message_cache() -> TTLCache:
    """Cache of messages of the day keyed by "couple_id:YYYY-MM-DD"."""
    return _daily_message_cache


# Type aliases for dependency injection
SupabaseDep = Annotated[type[SupabaseClient], Depends(get_supabase_client)]
DailyMessageCacheDep = Annotated[TTLCache, Depends(get_daily_message_cache)]
