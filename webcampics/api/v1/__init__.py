"""
API v1 Package
===============

Version 1 API controllers.
"""
from .upload_controller import router as upload_router
from .camera_controller import router as camera_router
from .image_controller import router as image_router, files_router as image_files_router

__all__ = ["upload_router", "camera_router", "image_router", "image_files_router"]
