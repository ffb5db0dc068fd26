#!/usr/bin/env python3
"""
Create the admin user.

The password is read from --password or the ADMIN_PASSWORD environment
variable and stored as a PBKDF2 hash. Running the script again for an
existing user does nothing.

Usage:
    python scripts/create_admin.py --password <PASSWORD>

    ADMIN_PASSWORD=<PASSWORD> python scripts/create_admin.py --username admin
"""

import argparse
import asyncio
import os
import sys

import structlog

# Configure logging
structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(colors=True),
    ],
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
)

log = structlog.get_logger()


async def create_admin(username: str, password: str) -> bool:
    """Create the admin user unless it already exists.

    Returns:
        True if a user was created.
    """
    from hypurrspot.core.security import hash_password  # noqa: PLC0415
    from hypurrspot.data.models.user import AdminUser  # noqa: PLC0415
    from hypurrspot.data.supabase.client import (  # noqa: PLC0415
        close_supabase_client,
        get_supabase_client,
    )
    from hypurrspot.data.supabase.repositories.user_repo import (  # noqa: PLC0415
        UserRepository,
    )

    client = await get_supabase_client()
    try:
        repo = UserRepository(client)
        if await repo.get_by_username(username) is not None:
            log.info("admin_user_exists", username=username)
            return False

        password_hash = await asyncio.to_thread(hash_password, password)
        await repo.create(AdminUser(username=username, password_hash=password_hash))
        return True
    finally:
        await close_supabase_client()


def main() -> int:
    parser = argparse.ArgumentParser(description="Create the HypurrSpot admin user")
    parser.add_argument("--username", default=None, help="Admin username (default: ADMIN_USERNAME)")
    parser.add_argument("--password", default=None, help="Admin password (default: ADMIN_PASSWORD)")
    args = parser.parse_args()

    from hypurrspot.config import get_settings  # noqa: PLC0415

    username = args.username or get_settings().admin_username
    password = args.password or os.environ.get("ADMIN_PASSWORD")
    if not password:
        print("[ERROR] Provide --password or set ADMIN_PASSWORD")
        return 1

    created = asyncio.run(create_admin(username, password))
    print(f"[OK] Admin user '{username}' {'created' if created else 'already exists'}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
