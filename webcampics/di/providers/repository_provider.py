from typing import TYPE_CHECKING

from ...domain.repositories.camera_repository import CameraRepository
from ...infrastructure.config.camera_registry import FileCameraRepository
from ...infrastructure.config.config_backend import ConfigBackend

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class RepositoryProvider:
    """Repository registration provider - wires domain interfaces to infrastructure implementations"""

    @staticmethod
    def register(container: "BaseContainer") -> None:
        """
        Register all repository implementations.
        Gets the config backend from the storage provider.
        """
        # Domain interfaces -> Infrastructure implementations
        container.register_singleton(
            CameraRepository,
            FileCameraRepository(container.get(ConfigBackend))
        )
