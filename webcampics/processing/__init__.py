"""
Image Processing
================

OpenCV-based decode, rotation, text overlay and JPEG encoding.
"""
