"""
Camera Controller
=================

FastAPI controller for camera configuration management.
Every endpoint requires a bearer token from the shared token pool.
"""
from typing import List

from fastapi import APIRouter, Depends

from webcampics.api.v1.dependencies import get_camera_service, require_admin
from webcampics.application.dto.camera_dto import (
    CameraDeleteResponse,
    CameraResponse,
    CameraUpdateRequest,
)
from webcampics.application.services.camera_service import CameraService

router = APIRouter(tags=["cameras"], dependencies=[Depends(require_admin)])


@router.get(
    "",
    response_model=List[CameraResponse],
    summary="List cameras",
    description="Get every stored camera configuration, including hidden and disabled ones."
)
async def list_cameras(
    service: CameraService = Depends(get_camera_service),
) -> List[CameraResponse]:
    """List all cameras."""
    return [CameraResponse.from_entity(camera) for camera in service.list_cameras()]


@router.get(
    "/{identifier}",
    response_model=CameraResponse,
    summary="Get camera by identifier",
    description="Identifiers match in any form: 'AA:BB:CC:DD:EE:FF', 'aa-bb-cc-dd-ee-ff' and 'AABBCCDDEEFF' are the same camera."
)
async def get_camera(
    identifier: str,
    service: CameraService = Depends(get_camera_service),
) -> CameraResponse:
    """Get a specific camera."""
    return CameraResponse.from_entity(service.get_camera(identifier))


@router.put(
    "/{identifier}",
    response_model=CameraResponse,
    summary="Create or update a camera",
    description="""
    Merge the given fields into the camera's configuration.

    Unknown cameras are created with defaults first. Changes apply to the
    next uploaded frame.
    """
)
async def save_camera(
    identifier: str,
    request: CameraUpdateRequest,
    service: CameraService = Depends(get_camera_service),
) -> CameraResponse:
    """Create or update a camera."""
    camera = service.save_camera(identifier, request.model_dump(exclude_none=True))
    return CameraResponse.from_entity(camera)


@router.delete(
    "/{identifier}",
    response_model=CameraDeleteResponse,
    summary="Remove a camera",
    description="Delete a camera configuration. Stored images are kept until they age out."
)
async def remove_camera(
    identifier: str,
    service: CameraService = Depends(get_camera_service),
) -> CameraDeleteResponse:
    """Remove a camera."""
    removed = service.remove_camera(identifier)
    return CameraDeleteResponse(device_id=identifier, removed=removed)
