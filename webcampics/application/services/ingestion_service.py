"""
Ingestion Service
=================

Application service in front of the upload pipeline. Exposes the current
size limit so the HTTP layer can stop reading oversized bodies early.
"""
from typing import Callable

from webcampics.application.services.auth_service import AuthService
from webcampics.application.use_cases.upload.ingest_image import IngestImageUseCase
from webcampics.core.config import AppConfig
from webcampics.domain.models.upload import UploadRequest, UploadResult
from webcampics.domain.repositories.camera_repository import CameraRepository
from webcampics.infrastructure.storage.image_store import ImageStore
from webcampics.processing.image_transformer import ImageTransformer


class IngestionService:
    """
    Application service for image uploads.

    Args:
        auth_service: Token and identity checks
        camera_repository: Device registry
        image_store: On-disk frame storage
        transformer: Rotation/overlay renderer
        app_config: Callable returning the current config document
    """

    def __init__(
        self,
        auth_service: AuthService,
        camera_repository: CameraRepository,
        image_store: ImageStore,
        transformer: ImageTransformer,
        app_config: Callable[[], AppConfig],
    ):
        self._app_config = app_config
        self._ingest_use_case = IngestImageUseCase(
            auth_service=auth_service,
            camera_repository=camera_repository,
            image_store=image_store,
            transformer=transformer,
            max_upload_bytes=self.max_upload_bytes,
        )

    def max_upload_bytes(self) -> int:
        """Current upload size limit in bytes."""
        return self._app_config().upload_max_bytes

    def ingest(self, request: UploadRequest) -> UploadResult:
        """
        Run one upload through the pipeline.

        Args:
            request: Protocol-neutral upload request

        Returns:
            UploadResult for the stored or discarded frame
        """
        return self._ingest_use_case.execute(request)
