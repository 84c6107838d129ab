"""Application entry point for the FastAPI backend."""
from __future__ import annotations

import logging
from typing import Iterable

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .constants import STORAGE_FAILURE_DETAIL
from .database import init_db
from .logging_config import configure_logging
from .routers import communities_router, system_router, threads_router, users_router, webhooks_router
from .services import DataAccessError

logger = logging.getLogger(__name__)

settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(title=settings.app_name, version=settings.api_version)

if settings.cors_origins:
    origins: Iterable[str] = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]
else:
    origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(system_router)
app.include_router(users_router)
app.include_router(threads_router)
app.include_router(communities_router)
app.include_router(webhooks_router)


@app.exception_handler(DataAccessError)
async def _data_access_error_handler(request: Request, exc: DataAccessError) -> JSONResponse:
    # The full failure, including SQL and parameters, is already in the service log
    logger.error("Storage failure on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": STORAGE_FAILURE_DETAIL})


@app.on_event("startup")
async def _startup() -> None:
    """Ensure the database schema exists before serving."""

    try:
        init_db()
    except Exception:  # pragma: no cover - best effort logging
        logger.exception("Database initialisation failed")
        raise
    logger.info("%s %s ready", settings.app_name, settings.api_version)
