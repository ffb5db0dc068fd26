"""Password hashing and signed admin session tokens.

Passwords are stored as PBKDF2-SHA256 hashes in the form
``pbkdf2_sha256$<iterations>$<salt_hex>$<hash_hex>``.

Session tokens are ``<payload_b64>.<signature_hex>`` where the payload is a
compact JSON object ``{"sub", "role", "exp"}`` in unpadded urlsafe base64
(a legal cookie value) and the signature is an HMAC-SHA256 of it.
"""

import base64
import hashlib
import hmac
import json
import secrets
import time
from typing import Any

from hypurrspot.core.exceptions import AuthenticationError

PASSWORD_SCHEME = "pbkdf2_sha256"
PASSWORD_ITERATIONS = 600_000
SALT_BYTES = 16


def hash_password(password: str, iterations: int = PASSWORD_ITERATIONS) -> str:
    """Hash a password with a random salt.

    Args:
        password: Plain text password.
        iterations: PBKDF2 iteration count.

    Returns:
        Encoded hash string suitable for storage.
    """
    salt = secrets.token_bytes(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, iterations)
    return f"{PASSWORD_SCHEME}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    """Check a plain text password against a stored hash.

    Returns:
        True if the password matches, False otherwise (including malformed hashes).
    """
    try:
        scheme, iterations, salt_hex, hash_hex = encoded.split("$")
        if scheme != PASSWORD_SCHEME:
            return False
        digest = hashlib.pbkdf2_hmac(
            "sha256", password.encode(), bytes.fromhex(salt_hex), int(iterations)
        )
    except ValueError:
        return False
    return hmac.compare_digest(digest.hex(), hash_hex)


def _sign(payload: bytes, secret: str) -> str:
    return hmac.new(key=secret.encode(), msg=payload, digestmod=hashlib.sha256).hexdigest()


def create_session_token(
    username: str,
    role: str,
    secret: str,
    ttl_seconds: int,
    now: float | None = None,
) -> str:
    """Issue a signed session token.

    Args:
        username: Subject of the session.
        role: Role granted to the session (e.g. "admin").
        secret: HMAC signing key.
        ttl_seconds: Lifetime of the token.
        now: Current unix time (defaults to time.time()).

    Returns:
        Token string to be stored in the session cookie.
    """
    issued_at = time.time() if now is None else now
    claims = {"sub": username, "role": role, "exp": int(issued_at + ttl_seconds)}
    payload = base64.urlsafe_b64encode(
        json.dumps(claims, separators=(",", ":"), sort_keys=True).encode()
    ).rstrip(b"=")
    return f"{payload.decode()}.{_sign(payload, secret)}"


def decode_session_token(token: str, secret: str, now: float | None = None) -> dict[str, Any]:
    """Verify a session token and return its claims.

    Raises:
        AuthenticationError: If the token is malformed, tampered with or expired.
    """
    try:
        payload_b64, signature = token.split(".")
    except ValueError as e:
        raise AuthenticationError("Malformed session token") from e

    payload = payload_b64.encode()
    if not hmac.compare_digest(signature, _sign(payload, secret)):
        raise AuthenticationError("Invalid session signature")

    try:
        padded = payload + b"=" * (-len(payload) % 4)
        claims: dict[str, Any] = json.loads(base64.urlsafe_b64decode(padded))
    except ValueError as e:
        raise AuthenticationError("Malformed session payload") from e

    current = time.time() if now is None else now
    if int(claims.get("exp", 0)) <= current:
        raise AuthenticationError("Session expired")
    return claims
