"""
FastAPI Application
===================

Main FastAPI app setup with all routes and middleware.
Optionally runs the retention purge in the background.
"""
import asyncio
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from webcampics.api.errors import register_exception_handlers
from webcampics.api.v1 import camera_router, image_files_router, image_router, upload_router
from webcampics.application.use_cases.images.purge_images import PurgeImagesUseCase
from webcampics.core.logging_config import configure_logging
from webcampics.di.container import DIContainer, get_container

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 60 * 60


def create_application(container: Optional[DIContainer] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    This function sets up the FastAPI application with:
    - Environment variable loading
    - CORS middleware configuration
    - API route registration and JSON error handlers
    - Startup/shutdown event handlers for logging and the background purge

    Args:
        container: DI container to serve from; defaults to the global one

    Returns:
        Configured FastAPI application instance
    """
    # Load environment variables from .env file
    env_path = Path(__file__).resolve().parent.parent / ".env"
    load_dotenv(env_path)

    if container is None:
        container = get_container()
    settings = container.settings

    # Create FastAPI app
    application = FastAPI(
        title="WebCamPics API",
        description="Image ingestion and gallery API for JPEG webcams",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    application.state.container = container

    # Add CORS middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(application)

    # Register API routers
    application.include_router(upload_router)
    application.include_router(upload_router, prefix="/api/v1")
    application.include_router(camera_router, prefix="/api/v1/cameras")
    application.include_router(image_router, prefix="/api/v1")
    application.include_router(image_files_router)

    _purge_task: Optional[asyncio.Task] = None

    async def run_periodic_purge(interval_hours: float):
        """Purge old images every interval_hours until cancelled."""
        purge = container.get(PurgeImagesUseCase)
        while True:
            try:
                report = await run_in_threadpool(purge.execute)
                logger.info(f"Background purge removed {report.deleted} files")
            except Exception as e:
                logger.error(f"Background purge failed: {e}")
            await asyncio.sleep(interval_hours * SECONDS_PER_HOUR)

    @application.on_event("startup")
    async def startup_event():
        """
        Configure logging and start the background purge.

        The purge only runs in-process when CLEANUP_INTERVAL_HOURS is
        positive; otherwise schedule the webcampics-cleanup job externally.
        """
        configure_logging(settings)
        logger.info(f"Serving images from {settings.images_dir.resolve()}")

        nonlocal _purge_task
        if settings.cleanup_interval_hours > 0:
            _purge_task = asyncio.create_task(run_periodic_purge(settings.cleanup_interval_hours))
            logger.info(f"Background purge every {settings.cleanup_interval_hours}h")

    @application.on_event("shutdown")
    async def shutdown_event():
        """Stop the background purge."""
        nonlocal _purge_task
        if _purge_task:
            _purge_task.cancel()
            _purge_task = None

    @application.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return application


# Create application instance
app = create_application()
