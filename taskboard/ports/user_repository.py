"""Port interface for user accounts."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from taskboard.app.schemas import UserRecord


@runtime_checkable
class IUserRepository(Protocol):
    async def create(self, email: str, password_hash: str) -> UserRecord:
        """Store a new user; raises RegistrationError if the normalized email is taken."""

    async def get(self, user_id: str) -> Optional[UserRecord]:
        """Return a user by id or None."""

    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        """Return a user by normalized email or None."""

    async def clear(self) -> None:
        """Remove every user."""
