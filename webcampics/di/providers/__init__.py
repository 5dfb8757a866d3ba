"""
Providers Package
=================

Dependency injection providers for registering dependencies.
"""
from .storage_provider import StorageProvider
from .repository_provider import RepositoryProvider
from .ingestion_provider import IngestionProvider
from .camera_provider import CameraProvider

__all__ = [
    "StorageProvider",
    "RepositoryProvider",
    "IngestionProvider",
    "CameraProvider",
]
