from __future__ import annotations

import logging
from typing import Optional

from taskboard.app.auth import (
    AuthSettings,
    hash_password,
    issue_token,
    validate_email,
    validate_password,
    verify_password,
    verify_token,
)
from taskboard.app.core.errors import InvalidCredentials, InvalidToken, RegistrationError
from taskboard.app.schemas import UserOut
from taskboard.ports.user_repository import IUserRepository

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    """Email/password accounts with HMAC-signed bearer tokens."""

    def __init__(self, users: IUserRepository, auth_settings: AuthSettings) -> None:
        self.users = users
        self.auth_settings = auth_settings

    async def register(self, email: str, password: str) -> UserOut:
        if not validate_email(email):
            raise RegistrationError("Please provide a valid email address")
        min_length = self.auth_settings.password_min_length
        if not validate_password(password, min_length):
            raise RegistrationError(f"Password must be at least {min_length} characters long")

        normalized = _normalize_email(email)
        if await self.users.get_by_email(normalized) is not None:
            raise RegistrationError("Email already exists")

        user = await self.users.create(normalized, hash_password(password))
        logger.info("registered user id=%s", user.id)
        return user.public()

    async def login(self, email: str, password: str) -> tuple[str, UserOut]:
        user = None
        if isinstance(email, str):
            user = await self.users.get_by_email(_normalize_email(email))
        if user is None or not isinstance(password, str) or not verify_password(password, user.password_hash):
            raise InvalidCredentials()

        token = issue_token(
            user.id,
            self.auth_settings.session_ttl_seconds,
            self.auth_settings.session_secret,
        )
        return token, user.public()

    async def validate(self, token: Optional[str]) -> UserOut:
        if not token:
            raise InvalidToken()
        payload = verify_token(token, self.auth_settings.session_secret)
        if payload is None:
            raise InvalidToken()
        user = await self.users.get(str(payload["sub"]))
        if user is None:
            raise InvalidToken()
        return user.public()

    async def clear(self) -> None:
        await self.users.clear()
        logger.warning("all users cleared")
