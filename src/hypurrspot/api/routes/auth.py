"""Admin login/logout routes."""

import asyncio

import structlog
from fastapi import APIRouter, HTTPException, Response, status
from pydantic import BaseModel

from hypurrspot.api.dependencies import SettingsDep, UserRepoDep
from hypurrspot.api.security import AdminDep
from hypurrspot.core.exceptions import StoreError
from hypurrspot.core.security import create_session_token, verify_password

log = structlog.get_logger(__name__)

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    """Admin credentials."""

    username: str
    password: str


@router.post("/login")
async def login(
    credentials: LoginRequest,
    response: Response,
    repo: UserRepoDep,
    settings: SettingsDep,
) -> dict[str, str]:
    """Verify credentials and set the session cookie."""
    try:
        user = await repo.get_by_username(credentials.username)
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from e

    # PBKDF2 is CPU-bound; keep it off the event loop
    valid = user is not None and await asyncio.to_thread(
        verify_password, credentials.password, user.password_hash
    )
    if not valid or user is None:
        log.warning("login_failed", username=credentials.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials"
        )

    token = create_session_token(
        username=user.username,
        role=user.role,
        secret=settings.session_secret.get_secret_value(),
        ttl_seconds=settings.session_ttl_seconds,
    )
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=not settings.debug,
    )
    log.info("login_succeeded", username=user.username)
    return {"message": "Login successful"}


@router.post("/logout")
async def logout(response: Response, settings: SettingsDep) -> dict[str, str]:
    """Clear the session cookie."""
    response.delete_cookie(key=settings.session_cookie_name)
    return {"message": "Logged out successfully"}


@router.get("/check-auth")
async def check_auth(_admin: AdminDep) -> dict[str, bool]:
    """Confirm the caller holds a valid admin session."""
    return {"authenticated": True}
