"""
Remove Camera Use Case
======================

Business use case for deleting a camera configuration. Stored images are
left in place and age out through the retention purge.
"""
from webcampics.domain.exceptions import ValidationFailed
from webcampics.domain.repositories.camera_repository import CameraRepository


class RemoveCameraUseCase:
    """Use case for removing a camera configuration."""

    def __init__(self, camera_repository: CameraRepository):
        self._repository = camera_repository

    def execute(self, identifier: str) -> bool:
        """
        Execute the remove camera use case.

        Args:
            identifier: Device identifier in any presented form

        Returns:
            True if a configuration was removed, False if none existed
        """
        if not identifier or not identifier.strip():
            raise ValidationFailed("Camera identifier is required")
        return self._repository.remove(identifier.strip())
