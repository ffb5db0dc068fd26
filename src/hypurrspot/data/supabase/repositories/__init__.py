"""Repository pattern implementations."""

from hypurrspot.data.supabase.repositories.reference_price_repo import (
    ReferencePriceRepository,
)
from hypurrspot.data.supabase.repositories.token_repo import TokenRepository
from hypurrspot.data.supabase.repositories.user_repo import UserRepository

__all__ = [
    "ReferencePriceRepository",
    "TokenRepository",
    "UserRepository",
]
