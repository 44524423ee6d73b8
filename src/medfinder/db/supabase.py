"""Supabase client access for catalog reads."""

import logging
from functools import lru_cache
from supabase import create_client, Client
from ..config import settings


class CatalogUnavailableError(RuntimeError):
    """Raised when the catalog backend is not configured or a query fails."""


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get cached Supabase client instance.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logging.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logging.error(f"Failed to create Supabase client: {e}")
        return None


def require_supabase_client() -> Client:
    client = get_supabase_client()
    if client is None:
        raise CatalogUnavailableError(
            "Supabase not configured. Set MEDFINDER_SUPABASE_URL and MEDFINDER_SUPABASE_KEY environment variables."
        )
    return client
