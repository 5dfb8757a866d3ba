"""
Image Transformer
=================

Decodes an uploaded JPEG, applies the camera's rotation and text overlay,
and re-encodes it. Also renders bounded-size thumbnails.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from webcampics.domain.exceptions import DecodeFailure, EncodeFailure, ValidationFailed
from webcampics.domain.models.camera import DEFAULT_FONT_COLOR, CameraConfig, parse_hex_color
from webcampics.processing.overlay import draw_text, layout_lines

logger = logging.getLogger(__name__)

FULL_JPEG_QUALITY = 90
THUMBNAIL_JPEG_QUALITY = 80
JPEG_MAGIC = b"\xff\xd8\xff"

# Stored rotation is the clockwise correction to apply to the sensor image
_ROTATIONS = {
    90: cv2.ROTATE_90_CLOCKWISE,
    180: cv2.ROTATE_180,
    270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


@dataclass(frozen=True)
class TransformedImage:
    data: bytes
    width: int
    height: int


def decode_jpeg(data: bytes) -> np.ndarray:
    """
    Decode JPEG bytes into a BGR frame.

    Raises:
        DecodeFailure: if the bytes are not a decodable image
    """
    if not data:
        raise DecodeFailure("Empty image data")
    try:
        frame = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
    except cv2.error as e:
        raise DecodeFailure(f"Failed to decode image: {e}") from e
    if frame is None:
        raise DecodeFailure("Failed to decode image")
    return frame


def encode_jpeg(frame: np.ndarray, quality: int) -> bytes:
    """
    Encode a BGR frame as JPEG.

    Raises:
        EncodeFailure: if OpenCV cannot encode the frame
    """
    try:
        ok, buffer = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, int(quality)])
    except cv2.error as e:
        raise EncodeFailure(f"Failed to encode image: {e}") from e
    if not ok:
        raise EncodeFailure("Failed to encode image")
    return buffer.tobytes()


def rotate_frame(frame: np.ndarray, rotation: int) -> np.ndarray:
    """Rotate clockwise by a quarter-turn multiple; 0 returns the frame unchanged."""
    if rotation == 0:
        return frame
    return cv2.rotate(frame, _ROTATIONS[rotation])


class ImageTransformer:
    """Applies a CameraConfig to uploaded frames."""

    def __init__(
        self,
        quality: int = FULL_JPEG_QUALITY,
        thumbnail_quality: int = THUMBNAIL_JPEG_QUALITY,
    ):
        self._quality = quality
        self._thumbnail_quality = thumbnail_quality

    def process(
        self,
        raw: bytes,
        config: CameraConfig,
        timestamp_label: Optional[str] = None,
    ) -> TransformedImage:
        """
        Rotate, annotate and re-encode one frame.

        Args:
            raw: Uploaded JPEG bytes
            config: Camera configuration (rotation, overlay settings)
            timestamp_label: Capture time as 'YYYY-MM-DD HH:MM:SS'

        Returns:
            TransformedImage with the encoded bytes and final dimensions

        Raises:
            DecodeFailure: if raw is not a decodable JPEG
            EncodeFailure: if the result cannot be encoded
        """
        frame = decode_jpeg(raw)
        frame = rotate_frame(frame, config.rotation)

        if config.has_overlay:
            try:
                color = config.font_rgb
            except ValidationFailed:
                logger.warning(
                    f"Invalid font color {config.font_color!r} for '{config.identifier}', using {DEFAULT_FONT_COLOR}"
                )
                color = parse_hex_color(DEFAULT_FONT_COLOR)

            lines = layout_lines(
                config.font_size,
                title=config.title if config.add_title else None,
                timestamp=timestamp_label if config.add_timestamp else None,
            )
            for line in lines:
                draw_text(frame, line, color, outline=config.font_outline)

        height, width = frame.shape[:2]
        return TransformedImage(
            data=encode_jpeg(frame, self._quality),
            width=width,
            height=height,
        )

    def thumbnail(self, data: bytes, max_width: int, max_height: int) -> bytes:
        """
        Proportionally scaled copy that fits in max_width x max_height.

        Frames already inside the box are re-encoded at their own size.
        """
        frame = decode_jpeg(data)
        height, width = frame.shape[:2]
        ratio = min(max_width / width, max_height / height, 1.0)
        if ratio < 1.0:
            size = (max(1, int(width * ratio)), max(1, int(height * ratio)))
            frame = cv2.resize(frame, size, interpolation=cv2.INTER_AREA)
        return encode_jpeg(frame, self._thumbnail_quality)


def looks_like_jpeg(data: bytes) -> bool:
    """Content sniff: JPEG streams start with an SOI marker followed by another marker."""
    return data[:3] == JPEG_MAGIC
