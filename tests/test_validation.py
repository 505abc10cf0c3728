from __future__ import annotations

from datetime import datetime

import pytest

from taskboard.app.core import limits
from taskboard.app.core.errors import InvalidListOptions
from taskboard.app.schemas import SortField, SortOrder, TaskStatus
from taskboard.app.services.validation import (
    FieldLimits,
    is_valid_task_id,
    parse_list_options,
    validate_create,
    validate_update,
)


def test_create_trims_title_and_defaults_optional_fields() -> None:
    result = validate_create({"title": "  Buy milk  "})
    assert result.ok
    assert result.data.title == "Buy milk"
    assert result.data.description is None
    assert result.data.due_date is None


@pytest.mark.parametrize("title", ["", "   ", "\t\n", None])
def test_create_rejects_empty_or_whitespace_title(title) -> None:
    result = validate_create({"title": title})
    assert not result.ok
    assert result.errors == {"title": ["Title is required"]}


def test_create_requires_title_key() -> None:
    result = validate_create({"description": "no title"})
    assert result.errors["title"] == ["Title is required"]


def test_title_max_length_boundary() -> None:
    at_limit = "a" * limits.TITLE_MAX_LENGTH
    over_limit = "a" * (limits.TITLE_MAX_LENGTH + 1)

    assert validate_create({"title": at_limit}).ok
    result = validate_create({"title": over_limit})
    assert result.errors["title"] == [f"Title must be {limits.TITLE_MAX_LENGTH} characters or less"]

    assert validate_update({"title": at_limit}).ok
    assert not validate_update({"title": over_limit}).ok


def test_title_length_is_measured_after_trimming() -> None:
    padded = "  " + "a" * limits.TITLE_MAX_LENGTH + "  "
    assert validate_create({"title": padded}).ok


def test_description_max_length_boundary() -> None:
    at_limit = "d" * limits.DESCRIPTION_MAX_LENGTH
    over_limit = "d" * (limits.DESCRIPTION_MAX_LENGTH + 1)

    assert validate_create({"title": "t", "description": at_limit}).ok
    result = validate_create({"title": "t", "description": over_limit})
    assert result.errors == {
        "description": [f"Description must be {limits.DESCRIPTION_MAX_LENGTH} characters or less"]
    }


def test_limits_come_from_configuration() -> None:
    small = FieldLimits(title_max_length=5, description_max_length=3)
    assert validate_create({"title": "abcde"}, small).ok
    assert not validate_create({"title": "abcdef"}, small).ok
    assert not validate_create({"title": "ok", "description": "four"}, small).ok


def test_empty_description_is_stored_as_null() -> None:
    result = validate_create({"title": "t", "description": ""})
    assert result.ok
    assert result.data.description is None


def test_due_date_accepts_iso_datetime_and_aliases() -> None:
    camel = validate_create({"title": "t", "dueDate": "2024-05-01T10:30:00Z"})
    snake = validate_create({"title": "t", "due_date": "2024-05-01T10:30:00+00:00"})
    assert camel.data.due_date == datetime(2024, 5, 1, 10, 30)
    assert snake.data.due_date == datetime(2024, 5, 1, 10, 30)


def test_due_date_is_converted_to_utc() -> None:
    result = validate_create({"title": "t", "dueDate": "2024-05-01T12:00:00+02:00"})
    assert result.data.due_date == datetime(2024, 5, 1, 10, 0)


@pytest.mark.parametrize("value", ["tomorrow", "2024-13-01T00:00:00", "2024-05-01", 12345])
def test_due_date_rejects_non_datetime_values(value) -> None:
    result = validate_create({"title": "t", "dueDate": value})
    assert result.errors == {"dueDate": ["Due date must be a valid ISO 8601 date-time"]}


def test_create_ignores_status() -> None:
    result = validate_create({"title": "t", "status": "DONE"})
    assert result.ok
    assert not hasattr(result.data, "status")


def test_errors_for_several_fields_are_reported_together() -> None:
    result = validate_create({"title": "", "description": "x" * 5000, "dueDate": "nope"})
    assert set(result.errors) == {"title", "description", "dueDate"}
    assert all(result.errors[name] for name in result.errors)


def test_non_mapping_input_is_a_programmer_error() -> None:
    with pytest.raises(TypeError):
        validate_create(["title"])  # type: ignore[arg-type]


def test_update_only_reports_present_fields() -> None:
    result = validate_update({"title": " New "})
    assert result.ok
    assert result.data.changes == {"title": "New"}


def test_update_with_no_fields_is_empty() -> None:
    result = validate_update({})
    assert result.ok
    assert result.data.is_empty


def test_update_distinguishes_cleared_from_absent() -> None:
    result = validate_update({"description": "", "dueDate": ""})
    assert result.data.changes == {"description": None, "due_date": None}

    result = validate_update({"dueDate": None})
    assert result.data.changes == {"due_date": None}


@pytest.mark.parametrize("title", ["", "   ", None])
def test_update_never_clears_title(title) -> None:
    result = validate_update({"title": title})
    assert result.errors == {"title": ["Title is required"]}


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("TODO", TaskStatus.TODO),
        ("in_progress", TaskStatus.IN_PROGRESS),
        ("Done", TaskStatus.DONE),
    ],
)
def test_update_normalizes_status(raw, expected) -> None:
    assert validate_update({"status": raw}).data.changes == {"status": expected}


@pytest.mark.parametrize("raw", ["archived", "", None, 1])
def test_update_rejects_unknown_status(raw) -> None:
    result = validate_update({"status": raw})
    assert result.errors == {"status": ["Status must be one of: TODO, IN_PROGRESS, DONE"]}


def test_task_id_shape() -> None:
    assert is_valid_task_id("0f3c9a2b1e")
    assert is_valid_task_id("task-1")
    assert not is_valid_task_id("")
    assert not is_valid_task_id("has space")
    assert not is_valid_task_id("a" * 65)
    assert not is_valid_task_id(None)


def test_list_options_defaults() -> None:
    options = parse_list_options()
    assert options.status_filter is None
    assert options.sort_by is SortField.CREATED_AT
    assert options.sort_order is SortOrder.DESC
    assert options.limit == limits.LIST_DEFAULT_LIMIT
    assert options.offset == 0


def test_list_options_accept_query_strings_and_aliases() -> None:
    options = parse_list_options(
        {"status": "todo", "sortBy": "due_date", "sortOrder": "ASC", "limit": "2", "offset": "4"}
    )
    assert options.status_filter is TaskStatus.TODO
    assert options.sort_by is SortField.DUE_DATE
    assert options.sort_order is SortOrder.ASC
    assert (options.limit, options.offset) == (2, 4)

    assert parse_list_options({"statusFilter": "all"}).status_filter is None


@pytest.mark.parametrize(
    "raw, field",
    [
        ({"limit": 101}, "limit"),
        ({"limit": 0}, "limit"),
        ({"limit": -1}, "limit"),
        ({"limit": "2.5"}, "limit"),
        ({"limit": "ten"}, "limit"),
        ({"offset": -1}, "offset"),
        ({"offset": 1.5}, "offset"),
        ({"sortBy": "title"}, "sortBy"),
        ({"sortOrder": "up"}, "sortOrder"),
        ({"statusFilter": "archived"}, "statusFilter"),
    ],
)
def test_invalid_list_options_raise(raw, field) -> None:
    with pytest.raises(InvalidListOptions) as excinfo:
        parse_list_options(raw)
    assert field in excinfo.value.errors


def test_list_limit_boundary_follows_configured_maximum() -> None:
    assert parse_list_options({"limit": 10}, max_limit=10).limit == 10
    with pytest.raises(InvalidListOptions):
        parse_list_options({"limit": 11}, max_limit=10)


def test_offset_upper_boundary() -> None:
    assert parse_list_options({"offset": str(limits.LIST_MAX_OFFSET)}).offset == limits.LIST_MAX_OFFSET
    with pytest.raises(InvalidListOptions) as excinfo:
        parse_list_options({"offset": str(limits.LIST_MAX_OFFSET + 1)})
    assert excinfo.value.errors == {"offset": [f"Offset must be {limits.LIST_MAX_OFFSET} or less"]}

    assert parse_list_options({"offset": 50}, max_offset=50).offset == 50
    with pytest.raises(InvalidListOptions):
        parse_list_options({"offset": 51}, max_offset=50)
