"""
WebCamPics
==========

Image ingestion and gallery service for JPEG webcams.
"""
__version__ = "1.0.0"
