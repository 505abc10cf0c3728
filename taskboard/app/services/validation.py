"""Task field validation.

Raw form or JSON values are normalized into typed payloads, or rejected
with a mapping of field name to human-readable messages. Expected
failures never raise; ``TypeError`` is reserved for callers that pass
something other than a mapping.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Generic, Mapping, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from taskboard.app.core import limits
from taskboard.app.core.errors import FieldErrors, InvalidListOptions
from taskboard.app.schemas import ListOptions, SortField, SortOrder, TaskStatus
from taskboard.app.utils.timing import to_naive_utc

T = TypeVar("T")

# Internal field name -> name reported back to the caller.
PUBLIC_FIELD_NAMES = {
    "title": "title",
    "description": "description",
    "due_date": "dueDate",
    "status": "status",
    "status_filter": "statusFilter",
    "sort_by": "sortBy",
    "sort_order": "sortOrder",
    "limit": "limit",
    "offset": "offset",
}

_TASK_KEYS = {
    "title": "title",
    "description": "description",
    "dueDate": "due_date",
    "due_date": "due_date",
    "status": "status",
}

_OPTION_KEYS = {
    "statusFilter": "status_filter",
    "status_filter": "status_filter",
    "status": "status_filter",
    "sortBy": "sort_by",
    "sort_by": "sort_by",
    "sort": "sort_by",
    "sortOrder": "sort_order",
    "sort_order": "sort_order",
    "order": "sort_order",
    "limit": "limit",
    "offset": "offset",
}

_TASK_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
_DATETIME_RE = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}")
_INT_RE = re.compile(r"^[+-]?\d+$")

_STATUS_CHOICES = ", ".join(s.value for s in TaskStatus)


@dataclass(frozen=True)
class TaskCreateData:
    title: str
    description: Optional[str] = None
    due_date: Optional[datetime] = None


@dataclass(frozen=True)
class TaskUpdateData:
    """Only the fields present in the request; ``None`` values clear the field."""

    changes: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.changes


@dataclass
class ValidationResult(Generic[T]):
    data: Optional[T] = None
    errors: FieldErrors = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class FieldLimits:
    title_max_length: int = limits.TITLE_MAX_LENGTH
    description_max_length: int = limits.DESCRIPTION_MAX_LENGTH

    @classmethod
    def from_settings(cls, settings) -> "FieldLimits":
        return cls(
            title_max_length=settings.title_max_length,
            description_max_length=settings.description_max_length,
        )


def _fail(message: str) -> PydanticCustomError:
    return PydanticCustomError("task_field", message)


def _limits(info: ValidationInfo) -> FieldLimits:
    context = info.context or {}
    return context.get("limits") or FieldLimits()


class _TaskFields(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None

    @field_validator("title", mode="before")
    @classmethod
    def _check_title(cls, value: Any, info: ValidationInfo) -> str:
        if value is None:
            raise _fail("Title is required")
        if not isinstance(value, str):
            raise _fail("Title must be a string")
        title = value.strip()
        if not title:
            raise _fail("Title is required")
        max_length = _limits(info).title_max_length
        if len(title) > max_length:
            raise _fail(f"Title must be {max_length} characters or less")
        return title

    @field_validator("description", mode="before")
    @classmethod
    def _check_description(cls, value: Any, info: ValidationInfo) -> Optional[str]:
        if value is None or value == "":
            return None
        if not isinstance(value, str):
            raise _fail("Description must be a string")
        max_length = _limits(info).description_max_length
        if len(value) > max_length:
            raise _fail(f"Description must be {max_length} characters or less")
        return value

    @field_validator("due_date", mode="before")
    @classmethod
    def _check_due_date(cls, value: Any) -> Optional[datetime]:
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            return to_naive_utc(value)
        if isinstance(value, str) and _DATETIME_RE.match(value.strip()):
            try:
                return to_naive_utc(datetime.fromisoformat(value.strip()))
            except ValueError:
                pass
        raise _fail("Due date must be a valid ISO 8601 date-time")


class _CreateInput(_TaskFields):
    title: Optional[str] = Field(None, validate_default=True)


class _UpdateInput(_TaskFields):
    status: Optional[TaskStatus] = None

    @field_validator("status", mode="before")
    @classmethod
    def _check_status(cls, value: Any) -> TaskStatus:
        try:
            return TaskStatus.parse(value)
        except ValueError:
            raise _fail(f"Status must be one of: {_STATUS_CHOICES}") from None


def _select_keys(raw: Mapping[str, Any], aliases: Mapping[str, str]) -> Dict[str, Any]:
    if not isinstance(raw, Mapping):
        raise TypeError(f"expected a mapping of raw fields, got {type(raw).__name__}")
    data: Dict[str, Any] = {}
    for key, value in raw.items():
        name = aliases.get(key)
        if name is not None:
            data[name] = value
    return data


def _field_errors(exc: ValidationError) -> FieldErrors:
    errors: FieldErrors = {}
    for err in exc.errors():
        loc = err.get("loc") or ("__all__",)
        name = PUBLIC_FIELD_NAMES.get(str(loc[0]), str(loc[0]))
        errors.setdefault(name, []).append(err["msg"])
    return errors


def validate_create(
    raw: Mapping[str, Any], field_limits: Optional[FieldLimits] = None
) -> ValidationResult[TaskCreateData]:
    """Validate a create request. Any status sent by the caller is ignored."""

    data = _select_keys(raw, _TASK_KEYS)
    data.pop("status", None)
    try:
        parsed = _CreateInput.model_validate(data, context={"limits": field_limits or FieldLimits()})
    except ValidationError as exc:
        return ValidationResult(errors=_field_errors(exc))
    return ValidationResult(
        data=TaskCreateData(
            title=parsed.title,
            description=parsed.description,
            due_date=parsed.due_date,
        )
    )


def validate_update(
    raw: Mapping[str, Any], field_limits: Optional[FieldLimits] = None
) -> ValidationResult[TaskUpdateData]:
    """Validate a partial update; keys absent from ``raw`` are left out of the changes."""

    data = _select_keys(raw, _TASK_KEYS)
    try:
        parsed = _UpdateInput.model_validate(data, context={"limits": field_limits or FieldLimits()})
    except ValidationError as exc:
        return ValidationResult(errors=_field_errors(exc))
    changes = {name: getattr(parsed, name) for name in parsed.model_fields_set}
    return ValidationResult(data=TaskUpdateData(changes=changes))


def is_valid_task_id(task_id: Any) -> bool:
    return isinstance(task_id, str) and bool(_TASK_ID_RE.match(task_id))


# ----------------------------------------------------------------------
# Listing options
# ----------------------------------------------------------------------


def _coerce_int(value: Any, label: str) -> int:
    if isinstance(value, bool):
        raise _fail(f"{label} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INT_RE.match(value.strip()):
        return int(value.strip())
    raise _fail(f"{label} must be an integer")


class _ListOptionsInput(ListOptions):
    model_config = ConfigDict(extra="ignore")

    @field_validator("status_filter", mode="before")
    @classmethod
    def _check_status_filter(cls, value: Any) -> Optional[TaskStatus]:
        if value is None or value == "" or (isinstance(value, str) and value.strip().lower() == "all"):
            return None
        try:
            return TaskStatus.parse(value)
        except ValueError:
            raise _fail(f"Status filter must be one of: all, {_STATUS_CHOICES}") from None

    @field_validator("sort_by", mode="before")
    @classmethod
    def _check_sort_by(cls, value: Any) -> SortField:
        if value is None or value == "":
            return SortField.CREATED_AT
        try:
            return SortField(str(value).strip().lower())
        except ValueError:
            raise _fail("Sort field must be one of: created_at, due_date") from None

    @field_validator("sort_order", mode="before")
    @classmethod
    def _check_sort_order(cls, value: Any) -> SortOrder:
        if value is None or value == "":
            return SortOrder.DESC
        try:
            return SortOrder(str(value).strip().lower())
        except ValueError:
            raise _fail("Sort order must be one of: asc, desc") from None

    @field_validator("limit", mode="before")
    @classmethod
    def _check_limit(cls, value: Any, info: ValidationInfo) -> int:
        max_limit = (info.context or {}).get("max_limit", limits.LIST_MAX_LIMIT)
        if value is None or value == "":
            return min(limits.LIST_DEFAULT_LIMIT, max_limit)
        limit = _coerce_int(value, "Limit")
        if limit < 1 or limit > max_limit:
            raise _fail(f"Limit must be between 1 and {max_limit}")
        return limit

    @field_validator("offset", mode="before")
    @classmethod
    def _check_offset(cls, value: Any, info: ValidationInfo) -> int:
        if value is None or value == "":
            return 0
        offset = _coerce_int(value, "Offset")
        if offset < 0:
            raise _fail("Offset must be 0 or greater")
        max_offset = (info.context or {}).get("max_offset", limits.LIST_MAX_OFFSET)
        if offset > max_offset:
            raise _fail(f"Offset must be {max_offset} or less")
        return offset


def parse_list_options(
    raw: Optional[Mapping[str, Any] | ListOptions] = None,
    max_limit: int = limits.LIST_MAX_LIMIT,
    max_offset: int = limits.LIST_MAX_OFFSET,
) -> ListOptions:
    """Normalize listing options, raising ``InvalidListOptions`` on bad values."""

    if raw is None:
        raw = {}
    elif isinstance(raw, ListOptions):
        raw = raw.model_dump(mode="json")
    data = _select_keys(raw, _OPTION_KEYS)
    data.setdefault("limit", None)
    try:
        parsed = _ListOptionsInput.model_validate(
            data, context={"max_limit": max_limit, "max_offset": max_offset}
        )
    except ValidationError as exc:
        raise InvalidListOptions(_field_errors(exc)) from None
    return ListOptions(**parsed.model_dump())
