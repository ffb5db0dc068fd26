"""Admin user model."""

from pydantic import BaseModel


class AdminUser(BaseModel):
    """Row of the ``users`` table."""

    username: str
    password_hash: str
    role: str = "admin"
