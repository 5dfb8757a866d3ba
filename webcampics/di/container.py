# Standard library imports
from typing import Optional

# Local application imports
from webcampics.core.config import Settings, get_settings
from .base_container import BaseContainer
from .providers import (
    CameraProvider,
    IngestionProvider,
    RepositoryProvider,
    StorageProvider,
)


class DIContainer(BaseContainer):
    """
    Main dependency injection container.
    Composes all providers in the correct order.

    Registration order is important:
    1. Settings, config storage and image storage (StorageProvider)
    2. Repositories (RepositoryProvider) - depends on config storage
    3. Services (IngestionProvider, CameraProvider) - depend on repositories
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        super().__init__()
        self.settings = settings or get_settings()
        self.setup()

    def setup(self) -> None:
        """
        Setup dependency registrations by composing all providers.
        Order matters: storage → repositories → services
        """
        # Step 1: Register settings and storage (foundation)
        StorageProvider.register(self)

        # Step 2: Register repositories (depends on storage)
        RepositoryProvider.register(self)

        # Step 3: Register services (depends on repositories)
        IngestionProvider.register(self)
        CameraProvider.register(self)


# Global container instance (singleton pattern)
_container: Optional[DIContainer] = None


def get_container() -> DIContainer:
    """
    Get the global DI container instance (singleton pattern)

    Returns:
        DIContainer instance with all dependencies registered
    """
    global _container
    if _container is None:
        _container = DIContainer()
    return _container
