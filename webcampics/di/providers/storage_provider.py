from typing import TYPE_CHECKING

from ...core.config import Settings
from ...infrastructure.config.config_backend import ConfigBackend, JsonFileConfigBackend
from ...infrastructure.storage.image_store import ImageStore
from ...processing.image_transformer import ImageTransformer
from ...utils.datetime_utils import configure_timezone

if TYPE_CHECKING:
    from ..container import DIContainer


class StorageProvider:
    """Centralized storage provider - single source of truth for files on disk"""

    @staticmethod
    def register(container: "DIContainer") -> None:
        """
        Register settings (and their timezone), the camera collection backend, the image store
        and the image transformer.
        Change the config backend here, and the registry automatically uses it.
        """
        settings = container.settings
        container.register_singleton(Settings, settings)
        configure_timezone(settings.timezone)

        # Config document, re-read when the file changes
        container.register_singleton("app_config", settings.app_config)

        container.register_singleton(
            ConfigBackend,
            JsonFileConfigBackend(settings.cameras_file)
        )

        container.register_singleton(
            ImageStore,
            ImageStore(settings.images_dir)
        )

        container.register_singleton(ImageTransformer, ImageTransformer())
