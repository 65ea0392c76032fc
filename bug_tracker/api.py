"""
FastAPI application for Bug Tracker.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import __version__
from .bugs.errors import FieldError, ValidationError
from .bugs.routes import router as bugs_router
from .config import get_settings
from .db.base import dispose_engine, get_db, init_database
from .log import configure_logging

logger = structlog.get_logger()

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    configure_logging(settings)
    logger.info("Starting Bug Tracker", environment=settings.environment)

    try:
        await init_database()
    except Exception as e:
        logger.error("Failed to start application", error=str(e))
        raise

    yield

    # Shutdown
    logger.info("Shutting down Bug Tracker")
    dispose_engine()
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.app_name,
    description="Track, filter and report on bugs",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(bugs_router)


@app.exception_handler(RequestValidationError)
async def body_validation_handler(request: Request, exc: RequestValidationError):
    """Answer unreadable bug request bodies with the same 400 as invalid fields.

    Query parameter errors keep FastAPI's default 422.
    """
    errors = exc.errors()
    if not request.url.path.startswith(bugs_router.prefix) or not all(
        err["loc"] and err["loc"][0] == "body" for err in errors
    ):
        return await request_validation_exception_handler(request, exc)

    error = ValidationError(
        [FieldError(field="body", message=err["msg"]) for err in errors]
    )
    logger.warning("Bug request rejected", path=request.url.path, fields=error.fields)
    return JSONResponse(status_code=error.status_code, content={"detail": error.to_dict()})


# Health and Info Endpoints
@app.get("/healthz", tags=["system"])
def healthz(db: Session = Depends(get_db)) -> dict[str, bool]:
    """Health check endpoint; reports whether the database answers."""
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError as exc:
        logger.warning("Database health check failed", error=str(exc))
        db_ok = False
    return {"ok": db_ok, "db": db_ok}


@app.get("/version", tags=["system"])
def version() -> dict[str, str]:
    """Return the version of the application."""
    return {"version": __version__}
