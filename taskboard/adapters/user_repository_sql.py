"""SQLAlchemy-backed user store."""

from __future__ import annotations

import asyncio
from typing import Optional
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from taskboard.app import models
from taskboard.app.core.errors import RegistrationError
from taskboard.app.schemas import UserRecord
from taskboard.ports.user_repository import IUserRepository


class SQLUserRepository(IUserRepository):
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def _create(self, email: str, password_hash: str) -> UserRecord:
        with self.session_factory() as session:
            row = models.User(id=uuid4().hex, email=email, password_hash=password_hash)
            session.add(row)
            try:
                session.commit()
            except IntegrityError as exc:
                # a concurrent registration claimed the email after the lookup
                session.rollback()
                raise RegistrationError("Email already exists", cause=exc) from exc
            session.refresh(row)
            return UserRecord.model_validate(row)

    def _get(self, user_id: str) -> Optional[UserRecord]:
        with self.session_factory() as session:
            row = session.get(models.User, user_id)
            return UserRecord.model_validate(row) if row else None

    def _get_by_email(self, email: str) -> Optional[UserRecord]:
        with self.session_factory() as session:
            row = session.execute(select(models.User).where(models.User.email == email)).scalar_one_or_none()
            return UserRecord.model_validate(row) if row else None

    def _clear(self) -> None:
        with self.session_factory() as session:
            session.query(models.User).delete()
            session.commit()

    async def create(self, email: str, password_hash: str) -> UserRecord:
        return await asyncio.to_thread(self._create, email, password_hash)

    async def get(self, user_id: str) -> Optional[UserRecord]:
        return await asyncio.to_thread(self._get, user_id)

    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        return await asyncio.to_thread(self._get_by_email, email)

    async def clear(self) -> None:
        await asyncio.to_thread(self._clear)
