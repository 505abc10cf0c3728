from sqlalchemy import Column, DateTime, Enum, String, Text

from taskboard.app.db import Base
from taskboard.app.schemas import TaskStatus
from taskboard.app.utils.timing import utcnow


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(64), primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(
        Enum(TaskStatus, native_enum=False, length=16, name="task_status"),
        nullable=False,
        default=TaskStatus.TODO,
    )
    due_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow)


class User(Base):
    __tablename__ = "users"

    id = Column(String(64), primary_key=True, index=True)
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
