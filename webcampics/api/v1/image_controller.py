"""
Image Controller
================

FastAPI controllers for read-only presentation data and image files.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse
from starlette.concurrency import run_in_threadpool

from webcampics.api.v1.dependencies import get_gallery_service
from webcampics.application.dto.image_dto import (
    DeviceOverviewResponse,
    ImageListResponse,
    ImageResponse,
    LocationGroupResponse,
)
from webcampics.application.services.gallery_service import GalleryService

router = APIRouter(tags=["images"])
files_router = APIRouter(tags=["image files"])

JPEG_MEDIA_TYPE = "image/jpeg"


@router.get(
    "/gallery",
    response_model=List[LocationGroupResponse],
    summary="Public gallery",
    description="Enabled cameras with at least one image, grouped by location."
)
async def get_gallery(
    service: GalleryService = Depends(get_gallery_service),
) -> List[LocationGroupResponse]:
    """Public overview grouped by location."""
    groups = await run_in_threadpool(service.public_gallery)
    return [LocationGroupResponse.from_entity(group) for group in groups]


@router.get(
    "/images",
    response_model=List[DeviceOverviewResponse],
    summary="Latest image per device",
    description="Latest image of every image directory with its camera configuration, if any."
)
async def list_latest_images(
    service: GalleryService = Depends(get_gallery_service),
) -> List[DeviceOverviewResponse]:
    """Latest image of every device directory."""
    overview = await run_in_threadpool(service.device_overview)
    return [DeviceOverviewResponse.from_entity(item) for item in overview]


@router.get(
    "/images/{identifier}",
    response_model=ImageListResponse,
    summary="Images of one device",
    description="Images modified within the last `days` days, newest first. Defaults to the retention period."
)
async def list_device_images(
    identifier: str,
    days: Optional[float] = Query(None, gt=0),
    service: GalleryService = Depends(get_gallery_service),
) -> ImageListResponse:
    """List a device's images within a time window."""
    if days is None:
        days = float(service.retention_days())
    images = await run_in_threadpool(service.list_images, identifier, days)
    return ImageListResponse(
        device_id=identifier,
        days=days,
        images=[ImageResponse.from_entity(image) for image in images],
    )


@router.get(
    "/images/{identifier}/latest",
    response_model=ImageResponse,
    summary="Latest image of one device",
)
async def get_latest_image(
    identifier: str,
    service: GalleryService = Depends(get_gallery_service),
) -> ImageResponse:
    """Get a device's newest image."""
    return ImageResponse.from_entity(service.latest_image(identifier))


@files_router.get(
    "/images/{directory}/{filename}",
    response_class=FileResponse,
    summary="Image file",
)
async def get_image_file(
    directory: str,
    filename: str,
    service: GalleryService = Depends(get_gallery_service),
) -> FileResponse:
    """Serve a finalized JPEG."""
    image = service.get_image(directory, filename)
    return FileResponse(image.path, media_type=JPEG_MEDIA_TYPE)


@files_router.get(
    "/images/{directory}/{filename}/thumbnail",
    response_class=FileResponse,
    summary="Image thumbnail",
    description="Thumbnail generated on first request and cached next to the image."
)
async def get_image_thumbnail(
    directory: str,
    filename: str,
    service: GalleryService = Depends(get_gallery_service),
) -> FileResponse:
    """Serve (and lazily create) a thumbnail."""
    path = await run_in_threadpool(service.get_thumbnail, directory, filename)
    return FileResponse(path, media_type=JPEG_MEDIA_TYPE)
