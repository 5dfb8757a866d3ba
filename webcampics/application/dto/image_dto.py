"""
Image DTO
=========

Pydantic models for the read-only presentation endpoints.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from webcampics.application.dto.camera_dto import CameraResponse
from webcampics.application.services.gallery_service import DeviceOverview, LocationGroup
from webcampics.domain.models.image import StoredImage
from webcampics.utils.datetime_utils import from_timestamp


class ImageResponse(BaseModel):
    """DTO for one finalized frame."""
    directory: str
    filename: str
    url: str
    thumbnail_url: str
    captured_at: str
    modified_at: str
    size: int

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "directory": "AA-BB-CC-DD-EE-FF",
            "filename": "2025-06-01_12-30-00.jpg",
            "url": "/images/AA-BB-CC-DD-EE-FF/2025-06-01_12-30-00.jpg",
            "thumbnail_url": "/images/AA-BB-CC-DD-EE-FF/2025-06-01_12-30-00.jpg/thumbnail",
            "captured_at": "2025-06-01 12:30:00",
            "modified_at": "2025-06-01T12:30:01+00:00",
            "size": 48213
        }
    })

    @classmethod
    def from_entity(cls, image: StoredImage) -> "ImageResponse":
        url = f"/images/{image.directory}/{image.filename}"
        return cls(
            directory=image.directory,
            filename=image.filename,
            url=url,
            thumbnail_url=f"{url}/thumbnail",
            captured_at=image.captured_label,
            modified_at=from_timestamp(image.modified).isoformat(),
            size=image.size,
        )


class DeviceOverviewResponse(BaseModel):
    """Latest frame of a device directory and its configuration, if any."""
    directory: str
    latest: ImageResponse
    camera: Optional[CameraResponse] = None

    @classmethod
    def from_entity(cls, overview: DeviceOverview) -> "DeviceOverviewResponse":
        return cls(
            directory=overview.directory,
            latest=ImageResponse.from_entity(overview.latest),
            camera=CameraResponse.from_entity(overview.camera) if overview.camera else None,
        )


class LocationGroupResponse(BaseModel):
    """Public gallery section for one location."""
    location_id: str
    title: str
    description: str
    devices: List[DeviceOverviewResponse]

    @classmethod
    def from_entity(cls, group: LocationGroup) -> "LocationGroupResponse":
        return cls(
            location_id=group.location_id,
            title=group.title,
            description=group.description,
            devices=[DeviceOverviewResponse.from_entity(d) for d in group.devices],
        )


class ImageListResponse(BaseModel):
    """Frames of one device within a time window, newest first."""
    device_id: str
    days: float
    images: List[ImageResponse]
