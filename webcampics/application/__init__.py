"""
Application Layer
=================

Application services and use cases.
This layer orchestrates domain models, repositories and storage.

Contains:
- Use Cases: Business operations (ingest image, save camera, purge images, etc.)
- Services: Application services that coordinate multiple use cases
- DTOs: Pydantic request/response models
"""
