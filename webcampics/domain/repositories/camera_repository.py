"""
Camera Repository Interface
===========================

Abstract interface for camera configuration access.
Implementations should be in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from webcampics.domain.models.camera import CameraConfig


class CameraRepository(ABC):
    """
    Abstract repository for camera configuration (the device registry).

    Identifiers are matched by their normalized form, so 'AA:BB:CC:DD:EE:FF'
    and 'aa-bb-cc-dd-ee-ff' address the same record.
    """

    @abstractmethod
    def find_by_identifier(self, identifier: str) -> Optional[CameraConfig]:
        """
        Find the configuration for a device.

        Args:
            identifier: Device identifier in any presented form

        Returns:
            CameraConfig if found, None otherwise
        """
        pass

    @abstractmethod
    def find_all(self) -> List[CameraConfig]:
        """
        List every stored configuration in stored order.

        Returns:
            List of CameraConfig entities (reserved entries excluded)
        """
        pass

    @abstractmethod
    def ensure_provisioned(self, identifier: str) -> CameraConfig:
        """
        Return the existing configuration, creating a default one if the
        device has never been seen.

        Args:
            identifier: Device identifier in any presented form

        Returns:
            Existing or newly created CameraConfig

        Raises:
            InvalidIdentifier: if no storage key can be derived
        """
        pass

    @abstractmethod
    def upsert(self, identifier: str, fields: Dict[str, Any]) -> CameraConfig:
        """
        Merge administrative changes into a device's configuration,
        creating it if absent.

        Args:
            identifier: Device identifier in any presented form
            fields: Changed fields (status, rotation, title, ...)

        Returns:
            Updated CameraConfig

        Raises:
            ValidationFailed: if a field value is invalid
        """
        pass

    @abstractmethod
    def remove(self, identifier: str) -> bool:
        """
        Delete a device's configuration.

        Args:
            identifier: Device identifier in any presented form

        Returns:
            True if a record was deleted, False if none existed
        """
        pass
