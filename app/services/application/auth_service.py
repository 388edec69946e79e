"""
User Authentication Service
===========================
Manages administrator accounts with bcrypt hashing.

Store failures propagate as ``StoreUnavailableError``; only a missing user
or a wrong password yields ``False`` from :meth:`UserAuthManager.authenticate_user`.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import bcrypt

from app.domain.exceptions import ValidationError
from infrastructure.database.repositories.auth import AuthRepository

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


@dataclass
class UserAuthManager:
    """
    Credential verifier for the admin login flow.
    """

    database_handler: Any
    # Optional injection for tests/composition; lazily initialized from database_handler.
    auth_repo: Optional[AuthRepository] = field(default=None, repr=False)
    bcrypt_rounds: int = 12

    def __post_init__(self) -> None:
        if self.auth_repo is None and self.database_handler is not None:
            self.auth_repo = AuthRepository(self.database_handler)

    def _repo(self) -> AuthRepository:
        if self.auth_repo is None:
            raise RuntimeError("AuthRepository is not configured")
        return self.auth_repo

    def hash_password(self, password: str) -> str:
        """Hash the provided password using bcrypt."""
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def check_password(self, stored_password: str, provided_password: str) -> bool:
        """Validate a plaintext password against the stored hash."""
        try:
            return bcrypt.checkpw(provided_password.encode("utf-8"), stored_password.encode("utf-8"))
        except ValueError:
            logger.error("Stored password hash is not a valid bcrypt hash")
            return False

    def register_user(self, username: str, password: str) -> int:
        """Create an administrator and return the new user id.

        Raises ValidationError for a blank username or short password and
        ConflictError when the username is taken.
        """
        username = (username or "").strip()
        if not username:
            raise ValidationError("Username is required")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        user_id = self._repo().create_user(username, self.hash_password(password))
        logger.info("User '%s' registered successfully.", username)
        return user_id

    def authenticate_user(self, username: str, password: str) -> bool:
        if not username or not password:
            return False
        user = self._repo().get_user_auth_by_username(username)
        if not user:
            logger.warning("Authentication failed for user '%s': user not found.", username)
            return False

        if not self.check_password(user["password_hash"], password):
            logger.warning("Authentication failed for user '%s': invalid credentials.", username)
            return False

        logger.info("User '%s' authenticated successfully.", username)
        return True

    def change_password(self, username: str, new_password: str) -> bool:
        if len(new_password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        user = self._repo().get_user_auth_by_username(username)
        if not user:
            return False
        return self._repo().update_password(user["id"], self.hash_password(new_password))
