"""Dependency providers for repositories and services."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends

from taskboard.app.auth import load_auth_settings
from taskboard.app.config import create_task_repository, create_user_repository, get_settings
from taskboard.app.services.auth_service import AuthService
from taskboard.app.services.task_service import TaskService
from taskboard.app.web.listing_cache import ListingCache
from taskboard.ports.task_repository import ITaskRepository
from taskboard.ports.user_repository import IUserRepository

logger = logging.getLogger(__name__)

_task_repository: Optional[ITaskRepository] = None
_user_repository: Optional[IUserRepository] = None
_listing_cache = ListingCache()


def set_task_repository(repository: Optional[ITaskRepository]) -> None:
    global _task_repository
    _task_repository = repository


def set_user_repository(repository: Optional[IUserRepository]) -> None:
    global _user_repository
    _user_repository = repository


def get_task_repository() -> ITaskRepository:
    """Return the configured task repository, building it on first use."""
    global _task_repository
    if _task_repository is None:
        _task_repository = create_task_repository()
        logger.info("TaskRepository backend=%s", _task_repository.backend)
    return _task_repository


def get_user_repository() -> IUserRepository:
    global _user_repository
    if _user_repository is None:
        _user_repository = create_user_repository()
    return _user_repository


def get_listing_cache() -> ListingCache:
    return _listing_cache


def get_task_service(
    repo: ITaskRepository = Depends(get_task_repository),
    cache: ListingCache = Depends(get_listing_cache),
) -> TaskService:
    return TaskService(repo, invalidator=cache, settings=get_settings())


def get_auth_service(users: IUserRepository = Depends(get_user_repository)) -> AuthService:
    return AuthService(users, load_auth_settings())
