"""
Auth Schemas
============

Request schema for the admin login endpoint.
"""

from pydantic import Field

from app.schemas.common import RequestModel


class LoginRequest(RequestModel):
    """Login form; the browser client posts ``adminId``."""

    admin_id: str | None = Field(default=None, alias="adminId", max_length=150, description="Admin username")
    password: str | None = Field(default=None, max_length=1024, description="Plaintext password")
