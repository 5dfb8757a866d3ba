"""
API/Presentation Layer
======================

HTTP API layer using FastAPI.
This layer handles HTTP requests and responses.

Contains:
- v1: FastAPI route handlers (upload, camera admin, images)
- errors: exception handlers rendering {"error": message}
"""
