from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Optional

from fastapi.templating import Jinja2Templates

from taskboard.app.config import get_settings
from taskboard.app.schemas import TaskStatus

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

STATUS_LABELS = {
    TaskStatus.TODO: "To do",
    TaskStatus.IN_PROGRESS: "In progress",
    TaskStatus.DONE: "Done",
}

FLASH_MESSAGES = {
    "created": "Task created",
    "updated": "Task updated",
    "deleted": "Task deleted",
}


def datetime_local(value: Optional[datetime]) -> str:
    """Format for ``<input type="datetime-local">``."""
    return value.strftime("%Y-%m-%dT%H:%M") if value else ""


def display_datetime(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "—"


@lru_cache()
def get_templates() -> Jinja2Templates:
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    settings = get_settings()
    templates.env.filters["datetime_local"] = datetime_local
    templates.env.filters["display_datetime"] = display_datetime
    templates.env.globals["statuses"] = list(TaskStatus)
    templates.env.globals["status_labels"] = STATUS_LABELS
    templates.env.globals["title_max_length"] = settings.title_max_length
    templates.env.globals["description_max_length"] = settings.description_max_length
    return templates
