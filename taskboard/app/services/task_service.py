"""Task CRUD orchestration.

Validation runs before any store access; the ceiling is checked before any
write; storage errors are logged and surfaced as ``PersistenceFailure``;
every successful mutation tells the view layer to drop cached listings.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Awaitable, Callable, Mapping, Optional, TypeVar

from taskboard.app.config import Settings, get_settings
from taskboard.app.core.errors import (
    FieldValidationError,
    InvalidTaskId,
    PersistenceFailure,
    TaskboardError,
    TaskLimitExceeded,
    TaskNotFound,
)
from taskboard.app.core.limits import TASKS_PATH
from taskboard.app.schemas import ListOptions, Task, TaskPage, TaskStatus
from taskboard.app.services.validation import (
    FieldLimits,
    is_valid_task_id,
    parse_list_options,
    validate_create,
    validate_update,
)
from taskboard.app.utils.timing import log_op_timing, utcnow
from taskboard.ports.task_repository import ITaskRepository
from taskboard.ports.view_invalidator import IViewInvalidator, NullInvalidator

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TaskService:
    def __init__(
        self,
        repository: ITaskRepository,
        invalidator: Optional[IViewInvalidator] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.repository = repository
        self.invalidator = invalidator or NullInvalidator()
        self.settings = settings or get_settings()
        self.clock = clock
        self.field_limits = FieldLimits.from_settings(self.settings)

    @property
    def backend(self) -> str:
        return getattr(self.repository, "backend", "-")

    async def _persist(self, op: str, call: Awaitable[T], task_id: Optional[str] = None) -> T:
        try:
            return await call
        except TaskboardError:
            raise
        except Exception as exc:
            logger.exception(
                "task store call failed",
                extra={"op": op, "task": task_id or "-", "backend": self.backend},
            )
            raise PersistenceFailure(cause=exc) from exc

    def _invalidate(self) -> None:
        self.invalidator.invalidate(TASKS_PATH)

    @staticmethod
    def _require_id(task_id: Any) -> str:
        if not is_valid_task_id(task_id):
            raise InvalidTaskId()
        return task_id

    async def create_task(self, raw: Mapping[str, Any]) -> Task:
        """Validate, check the ceiling, then insert a TODO task.

        The ceiling check and the insert are separate store calls with no
        lock between them, so creates racing at ``task_limit - 1`` can each
        pass the check and leave the store slightly over the ceiling.
        """
        start = time.perf_counter()
        result = validate_create(raw, self.field_limits)
        if not result.ok:
            raise FieldValidationError(result.errors)

        existing = await self._persist("create", self.repository.count())
        if existing >= self.settings.task_limit:
            logger.info(
                "task limit reached count=%s limit=%s",
                existing,
                self.settings.task_limit,
                extra={"op": "create", "backend": self.backend},
            )
            raise TaskLimitExceeded(self.settings.task_limit)

        now = self.clock()
        data = result.data
        task = await self._persist(
            "create",
            self.repository.create(
                {
                    "title": data.title,
                    "description": data.description,
                    "due_date": data.due_date,
                    "status": TaskStatus.TODO,
                    "created_at": now,
                    "updated_at": now,
                }
            ),
        )
        self._invalidate()
        log_op_timing(logger, op="create", start_time=start, task_id=task.id, backend=self.backend)
        return task

    async def list_tasks(self, raw_options: Optional[Mapping[str, Any] | ListOptions] = None) -> TaskPage:
        start = time.perf_counter()
        options = parse_list_options(
            raw_options,
            max_limit=self.settings.list_max_limit,
            max_offset=self.settings.list_max_offset,
        )
        page = await self._persist("list", self.repository.list(options))
        log_op_timing(logger, op="list", start_time=start, backend=self.backend, count=len(page.tasks))
        return page

    async def get_task(self, task_id: str) -> Task:
        task_id = self._require_id(task_id)
        task = await self._persist("get", self.repository.get(task_id), task_id)
        if task is None:
            raise TaskNotFound()
        return task

    async def update_task(self, task_id: str, raw: Mapping[str, Any]) -> Task:
        start = time.perf_counter()
        task_id = self._require_id(task_id)
        result = validate_update(raw, self.field_limits)
        if not result.ok:
            raise FieldValidationError(result.errors)

        current = await self._persist("update", self.repository.get(task_id), task_id)
        if current is None:
            raise TaskNotFound()

        changes = dict(result.data.changes)
        changes["updated_at"] = max(self.clock(), current.created_at)
        task = await self._persist("update", self.repository.update(task_id, changes), task_id)
        if task is None:
            # deleted between the lookup and the write
            raise TaskNotFound()
        self._invalidate()
        log_op_timing(logger, op="update", start_time=start, task_id=task_id, backend=self.backend)
        return task

    async def update_task_status(self, task_id: str, status: Any) -> Task:
        return await self.update_task(task_id, {"status": status})

    async def delete_task(self, task_id: str) -> None:
        start = time.perf_counter()
        task_id = self._require_id(task_id)
        deleted = await self._persist("delete", self.repository.delete(task_id), task_id)
        if not deleted:
            raise TaskNotFound()
        self._invalidate()
        log_op_timing(logger, op="delete", start_time=start, task_id=task_id, backend=self.backend)
