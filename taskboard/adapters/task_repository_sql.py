"""SQLAlchemy-backed task repository.

ORM work is blocking, so every call runs in a worker thread with its own
session; rows never leave this module, callers get ``schemas.Task``.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from taskboard.app import models
from taskboard.app.schemas import ListOptions, SortField, SortOrder, Task, TaskPage, TaskStatus
from taskboard.ports.task_repository import ITaskRepository


def _order_by(options: ListOptions) -> list:
    column = models.Task.due_date if options.sort_by is SortField.DUE_DATE else models.Task.created_at
    direction = column.asc() if options.sort_order is SortOrder.ASC else column.desc()
    clauses = []
    if options.sort_by is SortField.DUE_DATE:
        # Tasks without a due date go last regardless of direction
        clauses.append(models.Task.due_date.is_(None))
    clauses.append(direction)
    if options.sort_by is SortField.DUE_DATE:
        clauses.append(models.Task.created_at.desc())
    clauses.append(models.Task.id.asc())
    return clauses


class SQLTaskRepository(ITaskRepository):
    backend = "sql"

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    # -- sync implementations, run via asyncio.to_thread -----------------

    def _create(self, fields: dict[str, Any]) -> Task:
        with self.session_factory() as session:
            row = models.Task(id=uuid4().hex, **fields)
            session.add(row)
            session.commit()
            session.refresh(row)
            return Task.model_validate(row)

    def _get(self, task_id: str) -> Optional[Task]:
        with self.session_factory() as session:
            row = session.get(models.Task, task_id)
            return Task.model_validate(row) if row else None

    def _count(self, status: Optional[TaskStatus] = None) -> int:
        with self.session_factory() as session:
            return self._count_in(session, status)

    @staticmethod
    def _count_in(session: Session, status: Optional[TaskStatus]) -> int:
        query = select(func.count()).select_from(models.Task)
        if status is not None:
            query = query.where(models.Task.status == status)
        return int(session.execute(query).scalar_one())

    def _list(self, options: ListOptions) -> TaskPage:
        with self.session_factory() as session:
            query = select(models.Task)
            if options.status_filter is not None:
                query = query.where(models.Task.status == options.status_filter)
            query = query.order_by(*_order_by(options)).offset(options.offset).limit(options.limit)
            rows = session.execute(query).scalars().all()
            total = self._count_in(session, options.status_filter)

        tasks = [Task.model_validate(row) for row in rows]
        return TaskPage(tasks=tasks, count=total, has_more=options.offset + len(tasks) < total)

    def _update(self, task_id: str, changes: dict[str, Any]) -> Optional[Task]:
        with self.session_factory() as session:
            row = session.get(models.Task, task_id)
            if row is None:
                return None
            for key, value in changes.items():
                if key in ("id", "created_at"):
                    continue
                if hasattr(row, key):
                    setattr(row, key, value)
            session.commit()
            session.refresh(row)
            return Task.model_validate(row)

    def _delete(self, task_id: str) -> bool:
        with self.session_factory() as session:
            row = session.get(models.Task, task_id)
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True

    def _clear(self) -> None:
        with self.session_factory() as session:
            session.query(models.Task).delete()
            session.commit()

    # -- port -------------------------------------------------------------

    async def create(self, fields: dict[str, Any]) -> Task:
        return await asyncio.to_thread(self._create, fields)

    async def get(self, task_id: str) -> Optional[Task]:
        return await asyncio.to_thread(self._get, task_id)

    async def count(self, status: Optional[TaskStatus] = None) -> int:
        return await asyncio.to_thread(self._count, status)

    async def list(self, options: ListOptions) -> TaskPage:
        return await asyncio.to_thread(self._list, options)

    async def update(self, task_id: str, changes: dict[str, Any]) -> Optional[Task]:
        return await asyncio.to_thread(self._update, task_id, changes)

    async def delete(self, task_id: str) -> bool:
        return await asyncio.to_thread(self._delete, task_id)

    async def clear(self) -> None:
        await asyncio.to_thread(self._clear)
