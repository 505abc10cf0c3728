"""Port interface for task persistence (repository boundary)."""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from taskboard.app.schemas import ListOptions, Task, TaskPage, TaskStatus


@runtime_checkable
class ITaskRepository(Protocol):
    """Async task store: create/get/count/list/update/delete."""

    backend: str

    async def create(self, fields: dict[str, Any]) -> Task:
        """Insert a task built from ``fields``; the store assigns the id."""

    async def get(self, task_id: str) -> Optional[Task]:
        """Return a task by id or None when missing."""

    async def count(self, status: Optional[TaskStatus] = None) -> int:
        """Count tasks, optionally restricted to one status."""

    async def list(self, options: ListOptions) -> TaskPage:
        """Return one filtered, sorted page plus the unpaginated match count."""

    async def update(self, task_id: str, changes: dict[str, Any]) -> Optional[Task]:
        """Apply ``changes`` to an existing task; None when the id is unknown."""

    async def delete(self, task_id: str) -> bool:
        """Remove a task permanently; False when the id is unknown."""

    async def clear(self) -> None:
        """Remove every task."""
