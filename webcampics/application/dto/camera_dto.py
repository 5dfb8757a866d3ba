"""
Camera DTO
==========

Pydantic models for camera admin API requests and responses.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from webcampics.domain.models.camera import CameraConfig


class CameraUpdateRequest(BaseModel):
    """DTO for updating a camera. Omitted fields are left unchanged."""
    location: Optional[str] = Field(None, description="Location id (see config.json 'locations')")
    title: Optional[str] = Field(None, description="Title drawn on the image")
    status: Optional[str] = Field(None, description="'disabled', 'hidden' or 'enabled'")
    rotation: Optional[int] = Field(None, description="Clockwise rotation: 0, 90, 180 or 270")
    add_title: Optional[bool] = None
    add_timestamp: Optional[bool] = None
    font_size: Optional[int] = Field(None, description="Title text height in pixels")
    font_color: Optional[str] = Field(None, description="#RGB or #RRGGBB")
    font_outline: Optional[bool] = None

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "location": "garden",
            "title": "Garden East",
            "status": "enabled",
            "rotation": 90,
            "font_color": "#FFCC00"
        }
    })


class CameraResponse(BaseModel):
    """DTO for camera configuration data."""
    device_id: str
    location: str
    title: str
    status: str
    rotation: int
    add_title: bool
    add_timestamp: bool
    font_size: int
    font_color: str
    font_outline: bool

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "device_id": "AA:BB:CC:DD:EE:FF",
            "location": "unknown",
            "title": "DD:EE:FF",
            "status": "hidden",
            "rotation": 0,
            "add_title": True,
            "add_timestamp": True,
            "font_size": 16,
            "font_color": "#FFFFFF",
            "font_outline": True
        }
    })

    @classmethod
    def from_entity(cls, camera: CameraConfig) -> "CameraResponse":
        return cls(
            device_id=camera.identifier,
            location=camera.location,
            title=camera.title,
            status=camera.status.value,
            rotation=camera.rotation,
            add_title=camera.add_title,
            add_timestamp=camera.add_timestamp,
            font_size=camera.font_size,
            font_color=camera.font_color,
            font_outline=camera.font_outline,
        )


class CameraDeleteResponse(BaseModel):
    """DTO for camera deletion."""
    device_id: str
    removed: bool
