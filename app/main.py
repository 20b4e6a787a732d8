from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
import uvicorn
from loguru import logger

from app.api import api_router
from app.core.config import Settings
from app.core.exceptions import AppError, app_error_handler, unhandled_error_handler, validation_error_handler
from app.db.database import create_tables, get_async_sessionmaker, get_engine
from app.services.activity_service import ActivityLogger
from app.services.email_service import EmailService
from app.services.storage_service import VideoStorage
from app.services.thumbnail_service import ThumbnailService


def setup_logging(settings: Settings):
    if not settings.app.log_file:
        return
    logger.add(
        settings.app.log_file,
        rotation=settings.app.log_rotation,
        compression=settings.app.log_compression.value,
        format=settings.app.log_format,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if settings.database.create_tables:
        await create_tables(app.state.engine)

    app.state.activity_logger.start()
    logger.info(f"{settings.app.app_name} started")
    try:
        yield
    finally:
        await app.state.activity_logger.stop()
        await app.state.engine.dispose()
        logger.info(f"{settings.app.app_name} stopped")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.load()
    setup_logging(settings)

    app = FastAPI(
        title=settings.app.app_name,
        description="API for video sharing: accounts, uploads, engagement and analytics",
        version="1.0.0",
        lifespan=lifespan,
    )

    engine = get_engine(settings.database)
    storage = VideoStorage(settings.app.upload_dir)
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessionmaker = get_async_sessionmaker(engine)
    app.state.storage = storage
    app.state.thumbnailer = ThumbnailService(storage, settings.app.ffmpeg_path)
    app.state.mailer = EmailService(settings.mail)
    app.state.activity_logger = ActivityLogger(app.state.sessionmaker)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def read_root():
        return {"message": f"Welcome to {settings.app.app_name}"}

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    app.include_router(api_router)
    app.mount("/uploads", StaticFiles(directory=str(storage.root)), name="uploads")

    return app


if __name__ == "__main__":
    settings = Settings.load()
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=settings.app.app_host,
        port=settings.app.app_port,
        reload=settings.app.app_reload,
        log_level=settings.app.app_log_level.value,
    )
