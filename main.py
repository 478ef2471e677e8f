import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from important_info.config import get_settings
from important_info.domain.exceptions import StorageError
from important_info.infrastructure.database import engine, initialize_database
from important_info.infrastructure.directory import get_directory_client
from important_info.infrastructure.notifications import LivePushGateway, LivePushPublisher
from important_info.infrastructure.storage import AttachmentStorage
from important_info.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the database schema on start-up and release resources on shutdown."""

    initialize_database()
    yield
    engine.dispose()


async def _storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title="Important Information", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    gateway = LivePushGateway()
    app.state.live_push_gateway = gateway
    app.state.live_push_publisher = LivePushPublisher(gateway)
    app.state.directory_client = get_directory_client()
    app.state.attachment_storage = AttachmentStorage(settings)

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=upload_dir), name="uploads")

    app.add_exception_handler(StorageError, _storage_error_handler)
    register_routes(app)
    return app


app = create_app()
