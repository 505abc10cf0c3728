from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from taskboard.app.core import limits


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Relational store (used when TASK_REPO_BACKEND=sql)
    database_url: str = "sqlite:///./taskboard.db"

    # Task persistence backend: "sql" or "memory"
    task_repo_backend: str = "sql"

    # Task limits
    task_limit: int = Field(limits.TASK_LIMIT, ge=1)
    title_max_length: int = Field(limits.TITLE_MAX_LENGTH, ge=1)
    description_max_length: int = Field(limits.DESCRIPTION_MAX_LENGTH, ge=0)
    list_max_limit: int = Field(limits.LIST_MAX_LIMIT, ge=1)
    list_max_offset: int = Field(limits.LIST_MAX_OFFSET, ge=0, le=limits.LIST_MAX_OFFSET)

    # Auth
    # Required for auth; load_auth_settings refuses to sign tokens without it.
    session_secret: str = ""
    session_ttl_seconds: int = Field(limits.SESSION_TTL_SECONDS, ge=1)
    password_min_length: int = Field(limits.PASSWORD_MIN_LENGTH, ge=1)
    # Exposes POST /api/auth/clear, meant for test environments only.
    allow_auth_reset: bool = False

    cors_allow_origins: List[str] = Field(default_factory=list)

    app_log_level: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


# ============================================================
#  Repository factories
# ============================================================

def create_task_repository(settings: Settings | None = None):
    """
    Build the task repository selected by TASK_REPO_BACKEND.
    Imports are local so the memory backend never touches SQLAlchemy engines.
    """
    settings = settings or get_settings()
    backend = (settings.task_repo_backend or "sql").strip().lower()

    if backend == "memory":
        from taskboard.adapters.task_repository_memory import InMemoryTaskRepository

        return InMemoryTaskRepository()
    if backend == "sql":
        from taskboard.adapters.task_repository_sql import SQLTaskRepository
        from taskboard.app.db import SessionLocal

        return SQLTaskRepository(SessionLocal)
    raise RuntimeError(f"Unsupported TASK_REPO_BACKEND: {settings.task_repo_backend!r}")


def create_user_repository(settings: Settings | None = None):
    """User store follows the task backend so both live in the same place."""
    settings = settings or get_settings()
    backend = (settings.task_repo_backend or "sql").strip().lower()

    if backend == "memory":
        from taskboard.adapters.user_repository_memory import InMemoryUserRepository

        return InMemoryUserRepository()
    if backend == "sql":
        from taskboard.adapters.user_repository_sql import SQLUserRepository
        from taskboard.app.db import SessionLocal

        return SQLUserRepository(SessionLocal)
    raise RuntimeError(f"Unsupported TASK_REPO_BACKEND: {settings.task_repo_backend!r}")
