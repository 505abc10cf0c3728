from __future__ import annotations

import os
from datetime import datetime, timedelta

os.environ.setdefault("TASK_REPO_BACKEND", "memory")
os.environ.setdefault("SESSION_SECRET", "test-secret")
os.environ.setdefault("ALLOW_AUTH_RESET", "true")

import pytest
from fastapi.testclient import TestClient

from taskboard.adapters.task_repository_memory import InMemoryTaskRepository
from taskboard.adapters.task_repository_sql import SQLTaskRepository
from taskboard.adapters.user_repository_memory import InMemoryUserRepository
from taskboard.app.config import Settings
from taskboard.app.db import init_db, make_engine, make_sessionmaker


class FakeClock:
    """Returns a strictly increasing timestamp on every call."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 9, 0), step: timedelta = timedelta(minutes=1)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


class RecordingInvalidator:
    def __init__(self) -> None:
        self.paths: list[str] = []

    def invalidate(self, path: str) -> None:
        self.paths.append(path)


@pytest.fixture()
def settings() -> Settings:
    return Settings(task_repo_backend="memory", session_secret="test-secret")


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def invalidator() -> RecordingInvalidator:
    return RecordingInvalidator()


@pytest.fixture()
def sql_session_factory():
    engine = make_engine("sqlite://")
    init_db(engine)
    yield make_sessionmaker(engine)
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def task_repo(request):
    """Each repository contract test runs against both adapters."""
    if request.param == "memory":
        return InMemoryTaskRepository()
    return SQLTaskRepository(request.getfixturevalue("sql_session_factory"))


@pytest.fixture()
def client():
    """App client on fresh in-memory stores with a deterministic clock."""
    from taskboard.app.config import get_settings
    from taskboard.app.deps import (
        get_listing_cache,
        get_task_repository,
        get_task_service,
        get_user_repository,
    )
    from taskboard.app.main import app
    from taskboard.app.services.task_service import TaskService

    task_repo = InMemoryTaskRepository()
    user_repo = InMemoryUserRepository()
    clock = FakeClock()
    app.dependency_overrides[get_task_repository] = lambda: task_repo
    app.dependency_overrides[get_user_repository] = lambda: user_repo
    app.dependency_overrides[get_task_service] = lambda: TaskService(
        task_repo, invalidator=get_listing_cache(), settings=get_settings(), clock=clock
    )
    get_listing_cache().clear()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        get_listing_cache().clear()
