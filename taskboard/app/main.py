import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from taskboard.app.config import get_settings
from taskboard.app.core.errors import FieldErrors, FieldValidationError, TaskboardError
from taskboard.app.core.logging_config import configure_logging
from taskboard.app.db import init_db
from taskboard.app.deps import get_task_repository
from taskboard.app.routers import auth as auth_router
from taskboard.app.routers import tasks as tasks_router

BASE_DIR = Path(__file__).resolve().parent
STATIC_DIR = BASE_DIR / "static"

settings = get_settings()
configure_logging(settings.app_log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Taskboard", version="1.0.0", docs_url="/docs", redoc_url=None)
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

if settings.cors_allow_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.on_event("startup")
def on_startup() -> None:
    """Ensure the database schema exists before serving traffic."""
    if settings.task_repo_backend.strip().lower() == "sql":
        init_db()
    repo = get_task_repository()
    logger.info("taskboard started", extra={"backend": repo.backend})


@app.exception_handler(TaskboardError)
async def taskboard_error_handler(request: Request, exc: TaskboardError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


def _request_field_errors(exc: RequestValidationError) -> FieldErrors:
    errors: FieldErrors = {}
    for err in exc.errors():
        loc = err.get("loc") or ("body",)
        # ("body",) for a non-object body, ("body", 7) for broken JSON
        name = ".".join(str(part) for part in loc[1:] if isinstance(part, str)) or str(loc[0])
        errors.setdefault(name, []).append(err.get("msg", "Invalid value"))
    return errors


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = FieldValidationError(_request_field_errors(exc), "Invalid request body")
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


app.include_router(tasks_router.pages_router)
app.include_router(tasks_router.api_router)
app.include_router(auth_router.router)
app.include_router(auth_router.pages_router)


@app.get("/healthz")
async def healthz() -> dict:
    return {"status": "ok"}
