import logging
from datetime import datetime, timezone
from pathlib import Path

from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.config import settings
from backend.database import engine
from backend.errors import (
    PersistenceError,
    RecordNotFoundError,
    SummaryGenerationError,
    SummaryInProgressError,
    ValidationError,
)
from backend.models import kv_entry  # noqa: F401
from backend.routers import labs, profile, records, summary
from backend.services.kv_store import KeyValueStore
from backend.services.record_store import RecordStore
from backend.services.summarizer import SummaryTracker

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="ThyroTrack API", version="0.1.0")

allowed_origins = [origin.strip() for origin in settings.allowed_origins.split(",") if origin.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _assert_database_at_head() -> None:
    project_root = Path(__file__).resolve().parent.parent
    alembic_cfg = Config(str(project_root / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(project_root / "alembic"))
    script = ScriptDirectory.from_config(alembic_cfg)
    expected_heads = set(script.get_heads())

    with engine.connect() as connection:
        context = MigrationContext.configure(connection)
        current_heads = set(context.get_current_heads())

    if current_heads != expected_heads:
        raise RuntimeError(
            "Database schema is not at Alembic head. "
            "Run `alembic upgrade head` before starting the API. "
            f"Current revisions: {sorted(current_heads) or ['<none>']}, "
            f"expected: {sorted(expected_heads)}."
        )


@app.on_event("startup")
def startup_event():
    _assert_database_at_head()
    store = RecordStore(KeyValueStore())
    store.load()
    app.state.store = store
    app.state.summary_tracker = SummaryTracker()


@app.get("/")
def root():
    return {"statusCode": 200, "message": "Success", "data": {"status": "ok", "service": "thyrotrack"}}


@app.get("/health")
def health():
    return {
        "status": "ok",
        "service": "thyrotrack",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def _error_name(status_code: int) -> str:
    if status_code == 400:
        return "BadRequest"
    if status_code == 404:
        return "NotFound"
    if status_code == 409:
        return "Conflict"
    if status_code == 422:
        return "ValidationError"
    if status_code >= 500:
        return "InternalServerError"
    return "HTTPError"


def _error_response(status_code: int, message: str, error: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"statusCode": status_code, "message": message, "error": error, **extra},
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(_: Request, exc: HTTPException):
    message = str(exc.detail) if exc.detail else "Request failed"
    return _error_response(exc.status_code, message, _error_name(exc.status_code))


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(_: Request, exc: RequestValidationError):
    return _error_response(422, "Invalid request payload", "ValidationError", details={"errors": exc.errors()})


@app.exception_handler(ValidationError)
async def validation_exception_handler(_: Request, exc: ValidationError):
    return _error_response(422, exc.message, "ValidationError", field=exc.field)


@app.exception_handler(RecordNotFoundError)
async def not_found_exception_handler(_: Request, exc: RecordNotFoundError):
    return _error_response(404, str(exc), "NotFound")


@app.exception_handler(SummaryInProgressError)
async def summary_in_progress_exception_handler(_: Request, exc: SummaryInProgressError):
    return _error_response(409, str(exc), "Conflict")


@app.exception_handler(SummaryGenerationError)
async def summary_generation_exception_handler(_: Request, exc: SummaryGenerationError):
    return _error_response(502, str(exc), "SummaryGenerationError")


@app.exception_handler(PersistenceError)
async def persistence_exception_handler(_: Request, exc: PersistenceError):
    logger.error("Storage failure: %s", exc)
    return _error_response(503, str(exc), "PersistenceError")


@app.exception_handler(Exception)
async def unhandled_exception_handler(_: Request, exc: Exception):
    logger.exception("Unhandled server error: %s", exc)
    return _error_response(500, str(exc) or "An unexpected error occurred", "InternalServerError")


app.include_router(records.router)
app.include_router(profile.router)
app.include_router(labs.router)
app.include_router(summary.router)
