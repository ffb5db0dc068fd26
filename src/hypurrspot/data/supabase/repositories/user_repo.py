"""Admin user repository for Supabase.

Table schema expected:
    users (
        username TEXT UNIQUE NOT NULL,
        password_hash TEXT NOT NULL,
        role TEXT NOT NULL DEFAULT 'admin'
    )
"""

import structlog

from hypurrspot.core.exceptions import StoreError
from hypurrspot.data.models.user import AdminUser
from hypurrspot.data.supabase.client import SupabaseClient

log = structlog.get_logger(__name__)


class UserRepository:
    """Repository for the users table."""

    TABLE_NAME = "users"

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def get_by_username(self, username: str) -> AdminUser | None:
        """Get a user by username, or None if absent."""
        try:
            result = await (
                self._client.client.table(self.TABLE_NAME)
                .select("*")
                .eq("username", username)
                .limit(1)
                .execute()
            )
        except Exception as e:
            log.error("user_get_failed", username=username, error=str(e))
            raise StoreError(operation="users.get_by_username", message=str(e)) from e

        if result.data:
            return AdminUser.model_validate(result.data[0])
        return None

    async def create(self, user: AdminUser) -> None:
        """Insert a new user."""
        try:
            await (
                self._client.client.table(self.TABLE_NAME)
                .insert(user.model_dump())
                .execute()
            )
        except Exception as e:
            log.error("user_create_failed", username=user.username, error=str(e))
            raise StoreError(operation="users.create", message=str(e)) from e

        log.info("user_created", username=user.username, role=user.role)
