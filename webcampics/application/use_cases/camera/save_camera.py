"""
Save Camera Use Case
====================

Business use case for creating or updating a camera configuration from
the administrative form.
"""
from typing import Any, Dict

from webcampics.domain.exceptions import ValidationFailed
from webcampics.domain.identity import sanitize_for_storage
from webcampics.domain.models.camera import CameraConfig
from webcampics.domain.repositories.camera_repository import CameraRepository


class SaveCameraUseCase:
    """
    Use case for creating or updating a camera configuration.

    This encapsulates the business logic for administrative updates.
    """

    def __init__(self, camera_repository: CameraRepository):
        """
        Initialize use case with repository.

        Args:
            camera_repository: Repository for camera configuration
        """
        self._repository = camera_repository

    def execute(self, identifier: str, changes: Dict[str, Any]) -> CameraConfig:
        """
        Execute the save camera use case.

        Args:
            identifier: Device identifier in any presented form
            changes: Fields to change; None values are ignored

        Returns:
            Updated camera configuration

        Raises:
            InvalidIdentifier: If the identifier cannot be stored safely
            ValidationFailed: If a field value is invalid
        """
        if not identifier or not identifier.strip():
            raise ValidationFailed("Camera identifier is required")

        # Reject unusable identifiers before touching the registry
        sanitize_for_storage(identifier.strip())

        fields = {name: value for name, value in changes.items() if value is not None}
        return self._repository.upsert(identifier.strip(), fields)
