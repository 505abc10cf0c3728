"""Task API and HTML routers."""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from taskboard.app.core.errors import (
    FieldValidationError,
    InvalidListOptions,
    TaskboardError,
)
from taskboard.app.core.limits import TASKS_PATH
from taskboard.app.deps import get_listing_cache, get_task_service
from taskboard.app.schemas import DeleteTaskResponse, ListOptions, Task, TaskPage
from taskboard.app.services.task_service import TaskService
from taskboard.app.services.validation import parse_list_options
from taskboard.app.web.listing_cache import ListingCache
from taskboard.app.web.templates import FLASH_MESSAGES, get_templates

logger = logging.getLogger(__name__)

pages_router = APIRouter()
api_router = APIRouter(prefix="/api", tags=["tasks"])
templates = get_templates()

BOARD_PAGE_SIZE = 20


def _drop_empty(values: Dict[str, Optional[str]]) -> Dict[str, str]:
    return {k: v for k, v in values.items() if v is not None}


# ----------------------------------------------------------------------
# JSON API
# ----------------------------------------------------------------------


@api_router.post("/tasks", response_model=Task, status_code=201)
async def create_task(
    payload: Dict[str, Any] = Body(...),
    service: TaskService = Depends(get_task_service),
):
    """Create a task; new tasks always start as TODO."""

    return await service.create_task(payload)


@api_router.get("/tasks", response_model=TaskPage)
async def list_tasks(
    status: Optional[str] = Query(default=None),
    sort_by: Optional[str] = Query(default=None, alias="sortBy"),
    sort_order: Optional[str] = Query(default=None, alias="sortOrder"),
    limit: Optional[str] = Query(default=None),
    offset: Optional[str] = Query(default=None),
    service: TaskService = Depends(get_task_service),
):
    """List tasks with optional status filter, sorting and pagination."""

    raw = _drop_empty(
        {"status": status, "sortBy": sort_by, "sortOrder": sort_order, "limit": limit, "offset": offset}
    )
    return await service.list_tasks(raw)


@api_router.get("/tasks/{task_id}", response_model=Task)
async def get_task(task_id: str, service: TaskService = Depends(get_task_service)):
    return await service.get_task(task_id)


@api_router.put("/tasks/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    payload: Dict[str, Any] = Body(...),
    service: TaskService = Depends(get_task_service),
):
    """Apply a partial update; fields missing from the body are left unchanged."""

    return await service.update_task(task_id, payload)


@api_router.delete("/tasks/{task_id}", response_model=DeleteTaskResponse)
async def delete_task(task_id: str, service: TaskService = Depends(get_task_service)):
    await service.delete_task(task_id)
    return DeleteTaskResponse(success=True)


# ----------------------------------------------------------------------
# HTML board
# ----------------------------------------------------------------------


def _form_dict(form) -> Dict[str, Any]:
    return {key: value for key, value in form.items() if isinstance(value, str)}


async def _load_board(
    service: TaskService,
    cache: ListingCache,
    options: ListOptions,
) -> TaskPage:
    key = options.model_dump_json()
    page = cache.get(TASKS_PATH, key)
    if page is None:
        generation = cache.generation(TASKS_PATH)
        page = await service.list_tasks(options)
        cache.put(TASKS_PATH, key, page, generation=generation)
    return page


def _board_query(options: ListOptions, **overrides: Any) -> str:
    params = {
        "status": options.status_filter.value if options.status_filter else "all",
        "sortBy": options.sort_by.value,
        "sortOrder": options.sort_order.value,
        "limit": options.limit,
        "offset": options.offset,
    }
    params.update(overrides)
    return "&".join(f"{k}={v}" for k, v in params.items())


async def _render_board(
    request: Request,
    service: TaskService,
    cache: ListingCache,
    raw_options: Dict[str, Any],
    *,
    status_code: int = 200,
    form_values: Optional[Dict[str, Any]] = None,
    form_errors: Optional[Dict[str, Any]] = None,
    message: Optional[str] = None,
    error: Optional[str] = None,
) -> HTMLResponse:
    option_errors = None
    settings = service.settings
    page_size = min(BOARD_PAGE_SIZE, settings.list_max_limit)
    bounds = {"max_limit": settings.list_max_limit, "max_offset": settings.list_max_offset}
    try:
        options = parse_list_options({"limit": page_size, **raw_options}, **bounds)
    except InvalidListOptions as exc:
        option_errors = exc.errors
        options = parse_list_options({"limit": page_size}, **bounds)
        status_code = 400

    page = await _load_board(service, cache, options)
    prev_offset = max(options.offset - options.limit, 0) if options.offset else None
    next_offset = options.offset + options.limit if page.has_more else None

    return templates.TemplateResponse(
        request,
        "tasks.html",
        {
            "page": page,
            "options": options,
            "option_errors": option_errors,
            "prev_query": _board_query(options, offset=prev_offset) if prev_offset is not None else None,
            "next_query": _board_query(options, offset=next_offset) if next_offset is not None else None,
            "form_values": form_values or {},
            "form_errors": form_errors or {},
            "message": message,
            "error": error,
        },
        status_code=status_code,
    )


@pages_router.get("/", include_in_schema=False)
async def index():
    return RedirectResponse(url=TASKS_PATH, status_code=307)


@pages_router.get(TASKS_PATH, response_class=HTMLResponse)
async def tasks_page(
    request: Request,
    msg: Optional[str] = Query(default=None),
    service: TaskService = Depends(get_task_service),
    cache: ListingCache = Depends(get_listing_cache),
):
    """Render the task board with filter, sort and pagination controls."""

    raw = {k: v for k, v in request.query_params.items() if k != "msg" and v != ""}
    return await _render_board(request, service, cache, raw, message=FLASH_MESSAGES.get(msg or ""))


@pages_router.post(TASKS_PATH, response_class=HTMLResponse)
async def tasks_create_form(
    request: Request,
    service: TaskService = Depends(get_task_service),
    cache: ListingCache = Depends(get_listing_cache),
):
    form = _form_dict(await request.form())
    try:
        await service.create_task(form)
    except FieldValidationError as exc:
        return await _render_board(
            request, service, cache, {}, status_code=400, form_values=form, form_errors=exc.errors
        )
    except TaskboardError as exc:
        return await _render_board(
            request, service, cache, {}, status_code=exc.status_code, form_values=form, error=exc.message
        )
    return RedirectResponse(url=f"{TASKS_PATH}?msg=created", status_code=303)


def _render_error(request: Request, exc: TaskboardError) -> HTMLResponse:
    return templates.TemplateResponse(
        request, "error.html", {"message": exc.message}, status_code=exc.status_code
    )


@pages_router.get(TASKS_PATH + "/{task_id}/edit", response_class=HTMLResponse)
async def task_edit_page(
    request: Request,
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    try:
        task = await service.get_task(task_id)
    except TaskboardError as exc:
        return _render_error(request, exc)
    return templates.TemplateResponse(
        request, "task_edit.html", {"task": task, "form_values": {}, "form_errors": {}}
    )


@pages_router.post(TASKS_PATH + "/{task_id}", response_class=HTMLResponse)
async def task_update_form(
    request: Request,
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    form = _form_dict(await request.form())
    try:
        await service.update_task(task_id, form)
    except FieldValidationError as exc:
        try:
            task = await service.get_task(task_id)
        except TaskboardError as inner:
            return _render_error(request, inner)
        return templates.TemplateResponse(
            request,
            "task_edit.html",
            {"task": task, "form_values": form, "form_errors": exc.errors},
            status_code=400,
        )
    except TaskboardError as exc:
        return _render_error(request, exc)
    return RedirectResponse(url=f"{TASKS_PATH}?msg=updated", status_code=303)


@pages_router.post(TASKS_PATH + "/{task_id}/status", response_class=HTMLResponse)
async def task_status_form(
    request: Request,
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    form = _form_dict(await request.form())
    try:
        await service.update_task_status(task_id, form.get("status"))
    except TaskboardError as exc:
        return _render_error(request, exc)
    return RedirectResponse(url=f"{TASKS_PATH}?msg=updated", status_code=303)


@pages_router.post(TASKS_PATH + "/{task_id}/delete", response_class=HTMLResponse)
async def task_delete_form(
    request: Request,
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    try:
        await service.delete_task(task_id)
    except TaskboardError as exc:
        return _render_error(request, exc)
    return RedirectResponse(url=f"{TASKS_PATH}?msg=deleted", status_code=303)


__all__ = ["api_router", "pages_router"]
