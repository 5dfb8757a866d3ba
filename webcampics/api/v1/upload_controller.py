"""
Upload Controller
=================

FastAPI controller for the ingestion endpoint. Accepts both protocols on
the same route:

- modern: raw JPEG body with X-Device-Token / Authorization and X-Device-ID
- legacy: multipart form with 'auth', 'cam' and 'pic'
"""
import logging

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from webcampics.api.v1.dependencies import get_ingestion_service
from webcampics.application.dto.upload_dto import ErrorResponse, UploadResponse
from webcampics.application.services.auth_service import LEGACY_FILE_FIELD
from webcampics.application.services.ingestion_service import IngestionService
from webcampics.domain.models.upload import UploadPayload, UploadRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["upload"])

def _declared_length(request: Request):
    value = request.headers.get("content-length")
    if value and value.isdigit():
        return int(value)
    return None


async def _read_raw_body(request: Request, limit: int) -> UploadPayload:
    """Read the body in chunks; stop as soon as it exceeds limit."""
    declared = _declared_length(request)
    if declared is not None and declared > limit:
        return UploadPayload(size=declared, oversized=True)

    chunks = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            return UploadPayload(size=received, oversized=True)
        chunks.append(chunk)
    return UploadPayload(data=b"".join(chunks), size=received)


async def _read_form(request: Request, limit: int) -> UploadRequest:
    # Parsed in full so the legacy token is checked before the size limit
    form = await request.form()
    try:
        fields = {name: value for name, value in form.items() if isinstance(value, str)}
        upload = form.get(LEGACY_FILE_FIELD)
        payload = UploadPayload()
        if isinstance(upload, UploadFile):
            # Files are spooled to disk by the form parser; only read what the limit allows
            payload = UploadPayload.from_bytes(await upload.read(limit + 1), limit)
        return UploadRequest(
            headers=dict(request.headers),
            form=fields,
            has_file_field=isinstance(upload, UploadFile),
            payload=payload,
        )
    finally:
        await form.close()


async def read_upload_request(request: Request, limit: int) -> UploadRequest:
    """Build a protocol-neutral UploadRequest from the HTTP request."""
    content_type = request.headers.get("content-type", "")
    if content_type.lower().startswith("multipart/form-data"):
        return await _read_form(request, limit)
    return UploadRequest(
        headers=dict(request.headers),
        payload=await _read_raw_body(request, limit),
    )


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Upload a camera frame",
    description="""
    Accept one JPEG frame from a camera.

    The device is provisioned on first contact with status 'hidden'.
    Frames from 'disabled' cameras are accepted and dropped (filename is null).
    """
)
async def upload_image(
    request: Request,
    service: IngestionService = Depends(get_ingestion_service),
) -> UploadResponse:
    """Upload a frame (modern or legacy protocol)."""
    upload_request = await read_upload_request(request, service.max_upload_bytes())
    result = await run_in_threadpool(service.ingest, upload_request)
    return UploadResponse.from_result(result)
