"""
Dependency Injection
====================

Singleton container composed from providers.
"""
from .container import DIContainer, get_container

__all__ = ["DIContainer", "get_container"]
