"""Admin authentication dependencies.

The admin session is an HMAC-signed token carried in an http-only cookie
(see hypurrspot.core.security). External schedulers may instead trigger
the sync with ``Authorization: Bearer <CRON_SECRET>``.
"""

import hmac
from typing import Annotated, Any

import structlog
from fastapi import Depends, HTTPException, Request, status

from hypurrspot.api.dependencies import SettingsDep
from hypurrspot.core.exceptions import AuthenticationError
from hypurrspot.core.security import decode_session_token

log = structlog.get_logger(__name__)

ADMIN_ROLE = "admin"
CRON_CALLER = "cron"


def _unauthorized() -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def _admin_claims(request: Request, settings: SettingsDep) -> dict[str, Any] | None:
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None

    try:
        claims = decode_session_token(token, settings.session_secret.get_secret_value())
    except AuthenticationError as e:
        log.warning("admin_session_rejected", reason=str(e))
        return None

    if claims.get("role") != ADMIN_ROLE or claims.get("sub") != settings.admin_username:
        log.warning("admin_session_wrong_identity", sub=claims.get("sub"))
        return None
    return claims


def require_admin(request: Request, settings: SettingsDep) -> dict[str, Any]:
    """Require a valid admin session cookie.

    Returns:
        The session claims.

    Raises:
        HTTPException: 401 if the cookie is missing, invalid or expired.
    """
    claims = _admin_claims(request, settings)
    if claims is None:
        raise _unauthorized()
    return claims


def require_sync_trigger(request: Request, settings: SettingsDep) -> str:
    """Allow the sync trigger for an admin session or the cron bearer secret.

    Returns:
        The caller identity ("cron" or the admin username).
    """
    cron_secret = settings.cron_secret.get_secret_value()
    authorization = request.headers.get("Authorization", "")
    if cron_secret and authorization.startswith("Bearer "):
        presented = authorization.removeprefix("Bearer ")
        if hmac.compare_digest(presented, cron_secret):
            return CRON_CALLER
        log.warning("cron_secret_mismatch")

    claims = _admin_claims(request, settings)
    if claims is None:
        raise _unauthorized()
    return str(claims["sub"])


AdminDep = Annotated[dict[str, Any], Depends(require_admin)]
SyncTriggerDep = Annotated[str, Depends(require_sync_trigger)]
