from typing import TYPE_CHECKING

from ...application.services.auth_service import AuthService
from ...application.services.ingestion_service import IngestionService
from ...application.use_cases.images.purge_images import PurgeImagesUseCase
from ...domain.repositories.camera_repository import CameraRepository
from ...infrastructure.storage.image_store import ImageStore
from ...processing.image_transformer import ImageTransformer

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class IngestionProvider:
    """Ingestion provider - registers auth, upload and retention services"""

    @staticmethod
    def register(container: "BaseContainer") -> None:
        """
        Register upload-related services.
        Tokens and limits are read from the config document on every call.
        """
        app_config = container.get("app_config")

        auth_service = AuthService(token_source=lambda: app_config().auth_tokens)
        container.register_singleton(AuthService, auth_service)

        container.register_singleton(
            IngestionService,
            IngestionService(
                auth_service=auth_service,
                camera_repository=container.get(CameraRepository),
                image_store=container.get(ImageStore),
                transformer=container.get(ImageTransformer),
                app_config=app_config,
            )
        )

        container.register_singleton(
            PurgeImagesUseCase,
            PurgeImagesUseCase(
                image_store=container.get(ImageStore),
                retention_days=lambda: app_config().image_retention_days,
            )
        )
