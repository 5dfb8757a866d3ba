"""
Upload Models
=============

Inbound upload request and the pipeline result, independent of HTTP.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional


class UploadProtocol(str, Enum):
    MODERN = "modern"  # bearer token headers + raw JPEG body
    LEGACY = "legacy"  # multipart form fields auth, cam, pic


class IngestionStage(str, Enum):
    RECEIVED = "received"
    AUTHENTICATED = "authenticated"
    IDENTITY_RESOLVED = "identity_resolved"
    PROVISIONED = "provisioned"
    STAGED = "staged"
    TRANSFORMED = "transformed"
    DISCARDED = "discarded"
    FINALIZED = "finalized"
    FAILED = "failed"


@dataclass
class UploadPayload:
    """Image bytes as received; oversized bodies are not kept in memory."""
    data: bytes = b""
    size: int = 0
    oversized: bool = False

    @classmethod
    def from_bytes(cls, data: bytes, limit: Optional[int] = None) -> "UploadPayload":
        if limit is not None and len(data) > limit:
            return cls(size=len(data), oversized=True)
        return cls(data=data, size=len(data))


@dataclass
class UploadRequest:
    """
    Protocol-neutral view of one ingestion request.

    headers: request headers (any casing)
    form: multipart text fields, present only for form submissions
    has_file_field: True if the multipart submission carried a 'pic' file
    """
    headers: Mapping[str, str] = field(default_factory=dict)
    form: Optional[Mapping[str, str]] = None
    has_file_field: bool = False
    payload: UploadPayload = field(default_factory=UploadPayload)


@dataclass(frozen=True)
class UploadResult:
    device_id: str
    timestamp: str  # capture time, 'YYYY-MM-DD HH:MM:SS'
    size: int
    filename: Optional[str]  # None when the frame was discarded
    protocol: UploadProtocol
    stage: IngestionStage
