from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from taskboard.app.core.limits import LIST_DEFAULT_LIMIT


class TaskStatus(str, Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"

    @classmethod
    def parse(cls, value: object) -> "TaskStatus":
        """Accept ``TODO`` as well as ``todo``; raise ValueError otherwise."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise ValueError(f"Unknown task status: {value!r}")


class CamelModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True, alias_generator=to_camel)


class SortField(str, Enum):
    CREATED_AT = "created_at"
    DUE_DATE = "due_date"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ListOptions(BaseModel):
    """Normalized listing query; ``status_filter=None`` means all statuses."""

    status_filter: Optional[TaskStatus] = None
    sort_by: SortField = SortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC
    limit: int = LIST_DEFAULT_LIMIT
    offset: int = 0


class Task(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TaskPage(CamelModel):
    tasks: List[Task]
    count: int
    has_more: bool


class DeleteTaskResponse(BaseModel):
    success: bool = True


class UserOut(CamelModel):
    id: str
    email: str


class UserRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    password_hash: str
    created_at: datetime

    def public(self) -> UserOut:
        return UserOut(id=self.id, email=self.email)


class RegisterBody(BaseModel):
    email: str = ""
    password: str = ""


class LoginBody(BaseModel):
    email: str = ""
    password: str = ""
