"""Helpers for ordering and paginating task lists held in memory."""

from __future__ import annotations

from typing import Iterable, List

from taskboard.app.schemas import ListOptions, SortField, SortOrder, Task, TaskPage


def sort_tasks(tasks: Iterable[Task], sort_by: SortField, sort_order: SortOrder) -> List[Task]:
    """Order tasks the same way the SQL repository does.

    Ties fall back to newest ``created_at`` first, then ``id``. When sorting by
    due date, tasks without one go last in both directions.
    """

    descending = sort_order is SortOrder.DESC
    items = sorted(tasks, key=lambda t: t.id)
    items.sort(key=lambda t: t.created_at, reverse=True)

    if sort_by is SortField.DUE_DATE:
        dated = [t for t in items if t.due_date is not None]
        undated = [t for t in items if t.due_date is None]
        dated.sort(key=lambda t: t.due_date, reverse=descending)
        return dated + undated

    items.sort(key=lambda t: t.created_at, reverse=descending)
    return items


def paginate(tasks: Iterable[Task], options: ListOptions) -> TaskPage:
    """Filter by status, sort and slice; ``count`` ignores limit and offset."""

    matching = [
        t for t in tasks if options.status_filter is None or t.status == options.status_filter
    ]
    ordered = sort_tasks(matching, options.sort_by, options.sort_order)
    page = ordered[options.offset : options.offset + options.limit]
    total = len(matching)
    return TaskPage(tasks=page, count=total, has_more=options.offset + len(page) < total)
