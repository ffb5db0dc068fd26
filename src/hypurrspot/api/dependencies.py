"""FastAPI dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends

from hypurrspot.config.settings import Settings, get_settings
from hypurrspot.core.exceptions import DatabaseConnectionError
from hypurrspot.core.sync.token_sync import TokenSyncService, get_token_sync_service
from hypurrspot.data.supabase.client import SupabaseClient, get_current_supabase_client
from hypurrspot.data.supabase.repositories.token_repo import TokenRepository
from hypurrspot.data.supabase.repositories.user_repo import UserRepository

SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_connected_supabase() -> SupabaseClient:
    """Get the Supabase client connected at startup.

    Raises:
        DatabaseConnectionError: If startup has not connected the store.
    """
    client = get_current_supabase_client()
    if client is None:
        raise DatabaseConnectionError("Supabase: Client not connected")
    return client


SupabaseDep = Annotated[SupabaseClient, Depends(get_connected_supabase)]


def get_token_repo(client: SupabaseDep) -> TokenRepository:
    """Get token repository dependency."""
    return TokenRepository(client)


def get_user_repo(client: SupabaseDep) -> UserRepository:
    """Get user repository dependency."""
    return UserRepository(client)


TokenRepoDep = Annotated[TokenRepository, Depends(get_token_repo)]
UserRepoDep = Annotated[UserRepository, Depends(get_user_repo)]
SyncServiceDep = Annotated[TokenSyncService, Depends(get_token_sync_service)]
