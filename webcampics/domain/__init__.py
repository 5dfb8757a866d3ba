"""
Domain Layer
============

Core business logic and domain models.
This layer has no dependencies on external frameworks or infrastructure.

Contains:
- Models: camera configuration, stored images, upload requests
- Identity: identifier normalization and sanitization
- Repository Interfaces: Abstract contracts for configuration access
"""
