"""In-memory task repository.

Each instance owns its own dict of tasks; nothing is shared at module level,
so tests reset state by building a new instance or calling ``clear()``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional
from uuid import uuid4

from taskboard.app.schemas import ListOptions, Task, TaskPage, TaskStatus
from taskboard.app.task_repo_utils import paginate
from taskboard.ports.task_repository import ITaskRepository


class InMemoryTaskRepository(ITaskRepository):
    backend = "memory"

    def __init__(self) -> None:
        self._tasks: Dict[str, Task] = {}

    async def create(self, fields: dict[str, Any]) -> Task:
        task_id = uuid4().hex
        task = Task(id=task_id, **fields)
        self._tasks[task_id] = task
        return task.model_copy()

    async def get(self, task_id: str) -> Optional[Task]:
        task = self._tasks.get(task_id)
        return task.model_copy() if task else None

    async def count(self, status: Optional[TaskStatus] = None) -> int:
        if status is None:
            return len(self._tasks)
        return sum(1 for t in self._tasks.values() if t.status == status)

    async def list(self, options: ListOptions) -> TaskPage:
        page = paginate(self._tasks.values(), options)
        page.tasks = [t.model_copy() for t in page.tasks]
        return page

    async def update(self, task_id: str, changes: dict[str, Any]) -> Optional[Task]:
        current = self._tasks.get(task_id)
        if current is None:
            return None
        changes = {k: v for k, v in changes.items() if k not in ("id", "created_at")}
        updated = current.model_copy(update=changes)
        self._tasks[task_id] = updated
        return updated.model_copy()

    async def delete(self, task_id: str) -> bool:
        return self._tasks.pop(task_id, None) is not None

    async def clear(self) -> None:
        self._tasks.clear()
