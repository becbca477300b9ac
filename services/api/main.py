import os
from pathlib import Path

from fastapi import FastAPI
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from gkv.exceptions import GKVError
from gkv.logging_config import setup_logging
from gkv.settings import Settings, get_settings
from gkv.storage import ObjectStorage, create_storage
from services.api.exception_handlers import (
    gkv_exception_handler,
    http_exception_handler,
    unhandled_exception_handler,
)
from services.api.routes import router as kv_router
from services.api.utils import build_store_factory


def create_app(
    settings: Settings | None = None,
    storage: ObjectStorage | None = None,
) -> FastAPI:
    # Setup structured logging
    json_logging = os.getenv("JSON_LOGGING", "false").lower() in {"true", "1", "yes"}
    log_level = os.getenv("LOG_LEVEL", "INFO")
    log_file = os.getenv("LOG_FILE")
    setup_logging(
        level=log_level,
        json_format=json_logging,
        log_file=Path(log_file) if log_file else None,
    )

    settings = settings or get_settings()
    storage = storage or create_storage(settings.storage)

    app = FastAPI(
        title="GKV API",
        version="0.1.0",
        description="JSON key-value storage on an object-storage bucket",
    )
    app.state.settings = settings
    app.state.store_factory = build_store_factory(settings, storage)

    logger.info(
        "API initialised with bucket={bucket} backend={backend} namespace={namespace} namespace_from_path={from_path}",
        bucket=settings.storage.bucket,
        backend=settings.storage.backend,
        namespace=settings.kv.namespace,
        from_path=settings.http.namespace_from_path,
    )

    @app.get("/healthz", tags=["meta"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    # Register exception handlers
    app.add_exception_handler(GKVError, gkv_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Include routers
    app.include_router(kv_router)

    return app


__all__ = ["create_app"]
