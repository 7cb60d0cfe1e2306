import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.orm import Session
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .utils.config import configure_logging

configure_logging()

from .db import get_db
from .db_init import init_db
from .routers.auth import router as auth_router
from .routers.comments import router as comments_router
from .routers.moderation import router as moderation_router
from .routers.voices import router as voices_router
from .utils.admin_config import ensure_admin_config
from .utils.db_safety import safe_db_query
from .utils.db_tools import with_db
from .utils.response import INTERNAL_ERROR, VALIDATION_ERROR, error_response

logger = logging.getLogger(__name__)

SERVICE_NAME = "Voicebox API"


def bootstrap() -> None:
    """
    Create tables and the admin credential record once at startup. A
    storage outage here is logged and the app starts in degraded mode.
    """
    try:
        init_db()
    except Exception as e:
        logger.warning(f"[startup] table creation failed: {e}")
        return

    with with_db() as db:
        result = safe_db_query(db, lambda: ensure_admin_config(db), None)
        if result.degraded:
            logger.warning(f"[startup] admin credential bootstrap skipped ({result.error_code})")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    bootstrap()
    yield


app = FastAPI(title=SERVICE_NAME, lifespan=lifespan)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    if isinstance(detail, dict) and "code" in detail:
        code, message = detail["code"], str(detail.get("message", ""))
    else:
        code, message = _code_for_status(exc.status_code), str(detail)
    return error_response(code, message, exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
    message = first.get("msg", "Invalid request")
    if field:
        message = f"{field}: {message}"
    return error_response(VALIDATION_ERROR, message, 400)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"[{request.method} {request.url.path}] unexpected error")
    return error_response(INTERNAL_ERROR, "Unexpected error. Please try again later.", 500)


def _code_for_status(status_code: int) -> str:
    return {
        400: VALIDATION_ERROR,
        401: "UNAUTHORIZED",
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
    }.get(status_code, INTERNAL_ERROR if status_code >= 500 else "HTTP_ERROR")


app.include_router(auth_router)
app.include_router(moderation_router)
app.include_router(voices_router)
app.include_router(comments_router)


@app.get("/health")
def health(db: Session = Depends(get_db)):
    result = safe_db_query(db, lambda: db.execute(text("SELECT 1")).scalar(), None)
    return {
        "ok": True,
        "service": SERVICE_NAME,
        "database": "ok" if result.ok else "degraded",
        "degraded": result.degraded,
    }
