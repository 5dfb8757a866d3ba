"""
Ingest Image Use Case
=====================

Synchronous upload pipeline:

    Received -> Authenticated -> IdentityResolved -> Provisioned -> Staged
             -> Transformed | Discarded -> Finalized | Failed

Any failure after staging removes the raw file before the error propagates.
"""
import logging
from typing import Callable

from webcampics.application.services.auth_service import AuthService
from webcampics.core.logging_config import UPLOAD_AUDIT_LOGGER
from webcampics.domain.exceptions import BadPayload, PayloadTooLarge, WebCamPicsError
from webcampics.domain.identity import sanitize_for_storage
from webcampics.domain.models.upload import (
    IngestionStage,
    UploadProtocol,
    UploadRequest,
    UploadResult,
)
from webcampics.domain.repositories.camera_repository import CameraRepository
from webcampics.infrastructure.storage.image_store import ImageStore
from webcampics.processing.image_transformer import ImageTransformer, looks_like_jpeg
from webcampics.utils.datetime_utils import capture_label

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger(UPLOAD_AUDIT_LOGGER)


class IngestImageUseCase:
    """
    Use case for accepting one uploaded frame.

    This encapsulates authentication, provisioning, staging, transformation
    and promotion for a single request.
    """

    def __init__(
        self,
        auth_service: AuthService,
        camera_repository: CameraRepository,
        image_store: ImageStore,
        transformer: ImageTransformer,
        max_upload_bytes: Callable[[], int],
    ):
        """
        Initialize use case with collaborators.

        Args:
            auth_service: Token and identity checks
            camera_repository: Device registry
            image_store: On-disk frame storage
            transformer: Rotation/overlay renderer
            max_upload_bytes: Callable returning the current size limit
        """
        self._auth = auth_service
        self._repository = camera_repository
        self._store = image_store
        self._transformer = transformer
        self._max_upload_bytes = max_upload_bytes

    def _validate_payload(self, request: UploadRequest) -> bytes:
        payload = request.payload
        if payload.oversized or payload.size > self._max_upload_bytes():
            raise PayloadTooLarge()
        if not payload.data:
            raise BadPayload("No image data received")
        if not looks_like_jpeg(payload.data):
            raise BadPayload("Invalid image format. Only JPEG is accepted.")
        return payload.data

    def execute(self, request: UploadRequest) -> UploadResult:
        """
        Execute the ingestion pipeline for one request.

        Returns:
            UploadResult describing the stored (or discarded) frame

        Raises:
            Unauthorized: bad or missing token
            MissingIdentity: no device identifier supplied
            InvalidIdentifier: identifier cannot be stored safely
            BadPayload / PayloadTooLarge: empty, non-JPEG or oversized body
            StorageError: directory or file IO failure
            TransformError: undecodable JPEG or encode failure
        """
        stage = IngestionStage.RECEIVED
        identity = None
        try:
            protocol = self._auth.authenticate(request)
            stage = IngestionStage.AUTHENTICATED

            identity = self._auth.resolve_identity(request, protocol)
            sanitize_for_storage(identity)
            stage = IngestionStage.IDENTITY_RESOLVED

            data = self._validate_payload(request)

            camera = self._repository.ensure_provisioned(identity)
            stage = IngestionStage.PROVISIONED

            staged = self._store.stage_raw(identity, data, self._auth.capture_time(request))
            stage = IngestionStage.STAGED
        except WebCamPicsError as e:
            logger.info(f"Upload rejected at stage '{stage.value}' (device={identity!r}): {e.message}")
            raise

        timestamp = capture_label(staged.stamp)
        source = "Legacy upload" if protocol is UploadProtocol.LEGACY else "Image received"

        if not camera.status.stores_frames:
            self._store.discard(staged)
            audit_logger.info(
                f"{source} from {identity} ({len(data)} bytes) - Discarded (camera disabled)"
            )
            return UploadResult(
                device_id=identity,
                timestamp=timestamp,
                size=len(data),
                filename=None,
                protocol=protocol,
                stage=IngestionStage.DISCARDED,
            )

        try:
            transformed = self._transformer.process(data, camera, timestamp)
        except Exception as e:
            self._store.discard(staged)
            logger.warning(f"Failed to process image from '{identity}': {e}")
            raise

        final_path = self._store.promote(staged, transformed.data)

        audit_logger.info(f"{source} from {identity} ({len(data)} bytes) - Saved as {final_path.name}")
        return UploadResult(
            device_id=identity,
            timestamp=timestamp,
            size=len(data),
            filename=final_path.name,
            protocol=protocol,
            stage=IngestionStage.FINALIZED,
        )
