"""
Dependency Container
====================

FastAPI dependencies resolving services from the DI container.
The application's own container (app.state.container) is used when set,
otherwise the global one.
"""
from fastapi import Depends, Request

from webcampics.application.services.auth_service import AuthService
from webcampics.application.services.camera_service import CameraService
from webcampics.application.services.gallery_service import GalleryService
from webcampics.application.services.ingestion_service import IngestionService
from webcampics.di.container import DIContainer, get_container


def get_request_container(request: Request) -> DIContainer:
    container = getattr(request.app.state, "container", None)
    return container or get_container()


def get_auth_service(container: DIContainer = Depends(get_request_container)) -> AuthService:
    """
    Get auth service instance (singleton).

    Returns:
        AuthService instance
    """
    return container.get(AuthService)


def get_ingestion_service(container: DIContainer = Depends(get_request_container)) -> IngestionService:
    """
    Get ingestion service instance (singleton).

    Returns:
        IngestionService instance
    """
    return container.get(IngestionService)


def get_camera_service(container: DIContainer = Depends(get_request_container)) -> CameraService:
    """
    Get camera service instance (singleton).

    Returns:
        CameraService instance
    """
    return container.get(CameraService)


def get_gallery_service(container: DIContainer = Depends(get_request_container)) -> GalleryService:
    """
    Get gallery service instance (singleton).

    Returns:
        GalleryService instance
    """
    return container.get(GalleryService)


def require_admin(request: Request, auth: AuthService = Depends(get_auth_service)) -> None:
    """
    Admin endpoints accept the same bearer tokens as modern uploads.

    Raises:
        Unauthorized: if no valid token is presented
    """
    auth.require_bearer(request.headers)
