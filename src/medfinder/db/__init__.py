"""Database clients and utilities."""

from .supabase import CatalogUnavailableError, get_supabase_client, require_supabase_client

__all__ = ["CatalogUnavailableError", "get_supabase_client", "require_supabase_client"]
