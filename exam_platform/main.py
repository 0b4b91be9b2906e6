from __future__ import annotations

import logging
import traceback
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from exam_platform.api.router import build_router
from exam_platform.errors import ExamPlatformError, Unauthenticated
from exam_platform.observability import configure_logging, init_otel
from exam_platform.settings import Settings, settings as default_settings
from exam_platform.storage.repo import Storage
from exam_platform.wiring import build_storage

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ExamPlatformError)
    async def domain_error_handler(request: Request, exc: ExamPlatformError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message}, headers=headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {str(exc)}")
        logger.error(f"Traceback: {''.join(traceback.format_tb(exc.__traceback__))}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(storage: Optional[Storage] = None, settings: Settings = default_settings) -> FastAPI:
    """
    Build the application.

    Storage is created from settings unless one is passed in; either way it is
    connected on startup and closed on shutdown.
    """
    configure_logging(settings.log_level)
    store = storage if storage is not None else build_storage(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"{settings.app_name} starting ({settings.env}, storage={type(store).__name__})")
        await store.connect()
        app.state.storage = store
        yield
        logger.info("Shutting down...")
        await store.close()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    # also set here so handlers work when the lifespan is not run
    app.state.storage = store

    init_otel(
        app=app,
        enabled=settings.observability_enabled,
        service_name=settings.otel_service_name,
        otlp_endpoint=settings.otel_exporter_otlp_endpoint,
        console_exporter=settings.otel_exporter_console,
        sample_rate=settings.otel_sample_rate,
    )

    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(build_router(), prefix=settings.api_prefix)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "env": settings.env}

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        create_app(),
        host=default_settings.api_host,
        port=default_settings.api_port,
        log_level=default_settings.log_level.lower(),
    )
