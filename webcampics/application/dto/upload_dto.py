"""
Upload DTO
==========

Pydantic models for the ingestion endpoint responses.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from webcampics.domain.models.upload import UploadResult


class UploadResponse(BaseModel):
    """DTO for a successful upload (stored or discarded)."""
    success: bool = True
    device_id: str
    timestamp: str = Field(..., description="Capture time, 'YYYY-MM-DD HH:MM:SS'")
    size: int = Field(..., description="Uploaded byte count")
    filename: Optional[str] = Field(None, description="Stored filename; null if the camera is disabled")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "success": True,
            "device_id": "AA:BB:CC:DD:EE:FF",
            "timestamp": "2025-06-01 12:30:00",
            "size": 48213,
            "filename": "2025-06-01_12-30-00.jpg"
        }
    })

    @classmethod
    def from_result(cls, result: UploadResult) -> "UploadResponse":
        return cls(
            device_id=result.device_id,
            timestamp=result.timestamp,
            size=result.size,
            filename=result.filename,
        )


class ErrorResponse(BaseModel):
    """DTO for every error response."""
    error: str
