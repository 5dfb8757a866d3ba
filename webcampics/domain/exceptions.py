"""
Domain Exceptions
=================

Failure taxonomy shared by the ingestion pipeline, the registry and the
admin surface. Every error carries the HTTP status the API reports it with.
None of them are retried by the service.
"""


class WebCamPicsError(Exception):
    """Base class for all service errors."""

    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class Unauthorized(WebCamPicsError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class MissingIdentity(WebCamPicsError):
    status_code = 400

    def __init__(self, message: str = "Missing X-Device-ID header") -> None:
        super().__init__(message)


class BadPayload(WebCamPicsError):
    status_code = 400


class PayloadTooLarge(BadPayload):
    status_code = 413

    def __init__(self, message: str = "Image too large") -> None:
        super().__init__(message)


class StorageError(WebCamPicsError):
    status_code = 500


class TransformError(WebCamPicsError):
    status_code = 500


class DecodeFailure(TransformError):
    pass


class EncodeFailure(TransformError):
    pass


class ValidationFailed(WebCamPicsError, ValueError):
    status_code = 400


class InvalidIdentifier(WebCamPicsError, ValueError):
    status_code = 400


class CameraNotFound(WebCamPicsError):
    status_code = 404


class ImageNotFound(WebCamPicsError):
    status_code = 404
