"""
Camera Service
==============

Application service that coordinates camera configuration operations
for the admin surface.
"""
from typing import Any, Dict, List

from webcampics.application.use_cases.camera.remove_camera import RemoveCameraUseCase
from webcampics.application.use_cases.camera.save_camera import SaveCameraUseCase
from webcampics.domain.exceptions import CameraNotFound
from webcampics.domain.models.camera import CameraConfig
from webcampics.domain.repositories.camera_repository import CameraRepository


class CameraService:
    """
    Application service for camera operations.

    This service coordinates multiple use cases and provides
    a high-level interface for camera management.
    """

    def __init__(self, camera_repository: CameraRepository):
        """
        Initialize service with repository.

        Args:
            camera_repository: Repository for camera configuration
        """
        self._repository = camera_repository
        self._save_use_case = SaveCameraUseCase(camera_repository)
        self._remove_use_case = RemoveCameraUseCase(camera_repository)

    def get_camera(self, identifier: str) -> CameraConfig:
        """
        Get a camera by any equivalent form of its identifier.

        Raises:
            CameraNotFound: If no configuration exists
        """
        camera = self._repository.find_by_identifier(identifier)
        if camera is None:
            raise CameraNotFound(f"Camera '{identifier}' not found")
        return camera

    def list_cameras(self) -> List[CameraConfig]:
        """List every stored camera configuration."""
        return self._repository.find_all()

    def save_camera(self, identifier: str, changes: Dict[str, Any]) -> CameraConfig:
        """
        Create or update a camera configuration.

        Args:
            identifier: Device identifier
            changes: Fields to change

        Returns:
            Updated camera configuration
        """
        return self._save_use_case.execute(identifier, changes)

    def remove_camera(self, identifier: str) -> bool:
        """
        Remove a camera configuration.

        Returns:
            True if it existed, False otherwise
        """
        return self._remove_use_case.execute(identifier)
