"""In-memory user store."""

from __future__ import annotations

from typing import Dict, Optional
from uuid import uuid4

from taskboard.app.core.errors import RegistrationError
from taskboard.app.schemas import UserRecord
from taskboard.app.utils.timing import utcnow
from taskboard.ports.user_repository import IUserRepository


class InMemoryUserRepository(IUserRepository):
    def __init__(self) -> None:
        self._users: Dict[str, UserRecord] = {}

    async def create(self, email: str, password_hash: str) -> UserRecord:
        if any(u.email == email for u in self._users.values()):
            raise RegistrationError("Email already exists")
        user = UserRecord(id=uuid4().hex, email=email, password_hash=password_hash, created_at=utcnow())
        self._users[user.id] = user
        return user

    async def get(self, user_id: str) -> Optional[UserRecord]:
        return self._users.get(user_id)

    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        for user in self._users.values():
            if user.email == email:
                return user
        return None

    async def clear(self) -> None:
        self._users.clear()
