from typing import TYPE_CHECKING

from ...application.services.camera_service import CameraService
from ...application.services.gallery_service import GalleryService
from ...core.config import Settings
from ...domain.repositories.camera_repository import CameraRepository
from ...infrastructure.storage.image_store import ImageStore
from ...processing.image_transformer import ImageTransformer

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class CameraProvider:
    """Camera service provider - registers camera admin and gallery services"""

    @staticmethod
    def register(container: "BaseContainer") -> None:
        """
        Register camera and gallery services.
        Services are created with the repository from the container.
        """
        settings = container.get(Settings)

        container.register_singleton(
            CameraService,
            CameraService(
                camera_repository=container.get(CameraRepository)
            )
        )

        container.register_singleton(
            GalleryService,
            GalleryService(
                camera_repository=container.get(CameraRepository),
                image_store=container.get(ImageStore),
                transformer=container.get(ImageTransformer),
                app_config=container.get("app_config"),
                thumbnail_size=(settings.thumbnail_max_width, settings.thumbnail_max_height),
            )
        )
