"""Supabase data access layer."""

from hypurrspot.data.supabase.client import (
    ConnectionState,
    SupabaseClient,
    close_supabase_client,
    get_supabase_client,
)

__all__ = [
    "ConnectionState",
    "SupabaseClient",
    "close_supabase_client",
    "get_supabase_client",
]
