"""Token API routes."""

from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from hypurrspot.api.dependencies import TokenRepoDep
from hypurrspot.api.security import AdminDep
from hypurrspot.core.exceptions import StoreError
from hypurrspot.data.models.token import TokenRecord, TokenUpdate

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/tokens", tags=["tokens"])


class TokenUpdateResponse(BaseModel):
    """Response for an admin token edit."""

    message: str
    token: TokenRecord


@router.get("", response_model=list[TokenRecord])
async def list_tokens(repo: TokenRepoDep) -> list[TokenRecord]:
    """List every tracked token, ordered by token index."""
    try:
        return await repo.get_all()
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error reading token data",
        ) from e


@router.put("/{token_index}", response_model=TokenUpdateResponse)
async def update_token(
    token_index: int,
    update: TokenUpdate,
    repo: TokenRepoDep,
    admin: AdminDep,
) -> TokenUpdateResponse:
    """
    Edit the curated fields of a token.

    Only curated fields (social links, comment, allocations, flags) are
    accepted. Sets lastUpdated.
    """
    changes = update.changes()
    if not changes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No curated fields provided",
        )

    try:
        token = await repo.update_curated(token_index, changes, datetime.now(UTC))
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error updating token data",
        ) from e

    if token is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Token not found")

    log.info(
        "token_edited",
        token_index=token_index,
        fields=sorted(changes),
        admin=admin.get("sub"),
    )
    return TokenUpdateResponse(message="Token updated successfully", token=token)
