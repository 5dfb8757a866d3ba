"""
Infrastructure Layer
====================

Filesystem-backed implementations: the camera collection (JSON document)
and the image store.
"""
