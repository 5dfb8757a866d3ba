"""
Gallery Service
===============

Read-only presentation data: the public overview grouped by location,
the admin overview of every image directory, and per-device listings.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from webcampics.core.config import AppConfig
from webcampics.domain.exceptions import ImageNotFound, InvalidIdentifier
from webcampics.domain.identity import sanitize_for_storage
from webcampics.domain.models.camera import CameraConfig
from webcampics.domain.models.image import StoredImage
from webcampics.domain.repositories.camera_repository import CameraRepository
from webcampics.infrastructure.storage.image_store import ImageStore
from webcampics.processing.image_transformer import ImageTransformer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceOverview:
    """Latest frame of one image directory and its configuration, if any."""
    directory: str
    latest: StoredImage
    camera: Optional[CameraConfig] = None


@dataclass
class LocationGroup:
    location_id: str
    title: str
    description: str
    devices: List[DeviceOverview] = field(default_factory=list)


class GalleryService:
    """
    Application service for presentation data.

    Args:
        camera_repository: Device registry
        image_store: On-disk frame storage
        transformer: Used to render thumbnails
        app_config: Callable returning the current config document
        thumbnail_size: (max width, max height) of generated thumbnails
    """

    def __init__(
        self,
        camera_repository: CameraRepository,
        image_store: ImageStore,
        transformer: ImageTransformer,
        app_config: Callable[[], AppConfig],
        thumbnail_size: tuple = (400, 300),
    ):
        self._repository = camera_repository
        self._store = image_store
        self._transformer = transformer
        self._app_config = app_config
        self._thumbnail_size = thumbnail_size

    def _cameras_by_directory(self) -> Dict[str, CameraConfig]:
        cameras = {}
        for camera in self._repository.find_all():
            try:
                directory = sanitize_for_storage(camera.identifier)
            except InvalidIdentifier:
                logger.warning(f"Camera '{camera.identifier}' has no usable storage directory")
                continue
            # First record wins, matching registry lookups
            cameras.setdefault(directory, camera)
        return cameras

    def device_overview(self) -> List[DeviceOverview]:
        """
        Latest frame of every image directory joined with its configuration.

        Includes hidden, disabled and unconfigured directories.
        """
        cameras = self._cameras_by_directory()
        return [
            DeviceOverview(directory=directory, latest=latest, camera=cameras.get(directory))
            for directory, latest in self._store.list_all_latest().items()
        ]

    def public_gallery(self) -> List[LocationGroup]:
        """
        Enabled devices with at least one frame, grouped by location.

        Locations are sorted by id; devices keep the registry's stored order.
        """
        config = self._app_config()
        latest_by_directory = self._store.list_all_latest()
        groups: Dict[str, LocationGroup] = {}

        for directory, camera in self._cameras_by_directory().items():
            if not camera.status.is_public:
                continue
            latest = latest_by_directory.get(directory)
            if latest is None:
                continue
            group = groups.get(camera.location)
            if group is None:
                group = LocationGroup(
                    location_id=camera.location,
                    title=config.location_title(camera.location),
                    description=config.location_description(camera.location),
                )
                groups[camera.location] = group
            group.devices.append(DeviceOverview(directory=directory, latest=latest, camera=camera))

        return [groups[location_id] for location_id in sorted(groups)]

    def retention_days(self) -> int:
        return self._app_config().image_retention_days

    def list_images(self, identifier: str, days: Optional[float] = None) -> List[StoredImage]:
        """
        Frames of one device within the last `days` days, newest first.

        Args:
            identifier: Device identifier in any presented form
            days: Window length; defaults to the retention period
        """
        if days is None:
            days = self.retention_days()
        return self._store.list_within_window(identifier, days)

    def latest_image(self, identifier: str) -> StoredImage:
        """
        Raises:
            ImageNotFound: If the device has no finalized frame
        """
        latest = self._store.latest(identifier)
        if latest is None:
            raise ImageNotFound(f"No images for '{identifier}'")
        return latest

    def get_image(self, directory: str, filename: str) -> StoredImage:
        """
        Look up a finalized frame by URL path components.

        Raises:
            ImageNotFound: If the names are invalid or the file does not exist
        """
        image = self._store.resolve(directory, filename)
        if image is None:
            raise ImageNotFound("Image not found")
        return image

    def get_thumbnail(self, directory: str, filename: str) -> Path:
        """Path of the cached thumbnail for a frame, rendered on first request."""
        image = self.get_image(directory, filename)
        max_width, max_height = self._thumbnail_size
        return self._store.ensure_thumbnail(
            image,
            lambda data: self._transformer.thumbnail(data, max_width, max_height),
        )
