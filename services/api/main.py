from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger

from core.exceptions import GyankunjError
from core.logging_config import setup_logging
from core.materials import MaterialStore
from core.materials.factory import build_material_store, seed_records
from core.materials.gateway import UploadGateway
from core.settings import Settings, get_settings
from core.storage import BlobSink
from core.storage.factory import build_blob_sink
from services.api.exception_handlers import (
    gyankunj_exception_handler,
    request_validation_exception_handler,
    unhandled_exception_handler,
)
from services.api.middleware import SecurityHeadersMiddleware
from services.api.routes import router


def create_app(
    settings: Settings | None = None,
    store: MaterialStore | None = None,
    sink: BlobSink | None = None,
) -> FastAPI:
    """Build the API; explicit collaborators replace the configured backends."""
    settings = settings or get_settings()

    setup_logging(
        level=settings.logging.level,
        json_format=settings.logging.json_format,
        log_file=settings.logging.file,
    )

    store = store or build_material_store(settings.store)
    if settings.store.seed:
        store.seed_defaults(seed_records(settings.store))
    sink = sink or build_blob_sink(settings.blob_sink)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Study material lookup and PDF uploads",
    )
    app.state.settings = settings
    app.state.store = store
    app.state.gateway = UploadGateway(store, sink)

    app.add_middleware(SecurityHeadersMiddleware)

    # CORS middleware - add LAST so it executes FIRST
    origins = settings.server.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/healthz", tags=["meta"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    app.add_exception_handler(GyankunjError, gyankunj_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(router)

    if settings.blob_sink.backend == "local" and settings.blob_sink.root is not None:
        app.mount(
            settings.blob_sink.public_path,
            StaticFiles(directory=settings.blob_sink.root, check_dir=False),
            name="uploads",
        )

    logger.info(
        "{name} ready: store={backend} ({location}), uploads={sink} ({root}), port={port}",
        name=settings.app_name,
        backend=settings.store.backend,
        location=settings.store.path or settings.store.collection,
        sink=settings.blob_sink.backend,
        root=settings.blob_sink.root if settings.blob_sink.backend == "local" else settings.blob_sink.bucket or settings.blob_sink.folder,
        port=settings.server.port,
    )

    return app


__all__ = ["create_app"]
