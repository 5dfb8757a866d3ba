import cv2
import numpy as np
import pytest

from webcampics.domain.exceptions import DecodeFailure
from webcampics.domain.models.camera import CameraConfig
from webcampics.processing.image_transformer import ImageTransformer, looks_like_jpeg
from webcampics.processing.overlay import LEFT_MARGIN, TOP_MARGIN, layout_lines
from tests.conftest import make_jpeg


def decode(data: bytes) -> np.ndarray:
    return cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)


def plain_config(**overrides) -> CameraConfig:
    values = dict(identifier="cam-1", title="Garden", add_title=False, add_timestamp=False)
    values.update(overrides)
    return CameraConfig(**values)


@pytest.fixture
def transformer():
    return ImageTransformer()


def test_no_rotation_keeps_dimensions(transformer):
    result = transformer.process(make_jpeg(320, 240), plain_config())
    assert (result.width, result.height) == (320, 240)
    assert decode(result.data).shape[:2] == (240, 320)


@pytest.mark.parametrize("rotation, expected", [(90, (240, 320)), (180, (320, 240)), (270, (240, 320))])
def test_rotation_dimensions(transformer, rotation, expected):
    result = transformer.process(make_jpeg(320, 240), plain_config(rotation=rotation))
    assert (result.width, result.height) == expected


def test_rotation_90_is_clockwise(transformer):
    frame = np.zeros((240, 320, 3), dtype=np.uint8)
    frame[0:40, 0:40] = 255
    ok, buffer = cv2.imencode(".jpg", frame)
    assert ok

    result = decode(transformer.process(buffer.tobytes(), plain_config(rotation=90)).data)

    # Source top-left corner ends up top-right
    assert result[5:35, 205:235].mean() > 200
    assert result[5:35, 5:35].mean() < 50


def test_overlay_drawn_top_left_after_rotation(transformer):
    source = make_jpeg(320, 240, color=(0, 0, 0))
    config = plain_config(rotation=90, add_title=True, title="GARDEN", font_size=16, font_color="#FFFFFF")

    result = transformer.process(source, config)
    frame = decode(result.data)

    assert (result.width, result.height) == (240, 320)
    baseline = TOP_MARGIN + 16
    text_region = frame[baseline - 16:baseline + 2, LEFT_MARGIN:LEFT_MARGIN + 100]
    assert text_region.max() > 200
    assert frame[200:, 100:].max() < 60


def test_overlay_color_is_applied(transformer):
    source = make_jpeg(200, 100, color=(0, 0, 0))
    config = plain_config(add_title=True, title="RED", font_size=40, font_color="#F00", font_outline=False)

    frame = decode(transformer.process(source, config).data)
    region = frame[TOP_MARGIN:TOP_MARGIN + 42, LEFT_MARGIN:LEFT_MARGIN + 120].reshape(-1, 3)
    brightest = region[region.sum(axis=1).argmax()]
    blue, green, red = (int(v) for v in brightest)
    assert red > 150
    assert red > max(blue, green) + 80


def test_invalid_stored_color_falls_back_to_default(transformer):
    config = plain_config(add_title=True, font_color="not-a-color")
    result = transformer.process(make_jpeg(), config)
    assert result.width == 320


def test_layout_places_timestamp_below_title():
    title, stamp = layout_lines(16, title="Garden", timestamp="2025-06-01 12:00:00")
    assert title.origin == (LEFT_MARGIN, TOP_MARGIN + 16)
    assert stamp.origin == (LEFT_MARGIN, TOP_MARGIN + 16 + 16 + 10)
    assert stamp.pixel_height == 14


def test_layout_timestamp_only_takes_first_line():
    (stamp,) = layout_lines(16, timestamp="2025-06-01 12:00:00")
    assert stamp.origin == (LEFT_MARGIN, TOP_MARGIN + 16)


def test_undecodable_jpeg_raises(transformer):
    with pytest.raises(DecodeFailure):
        transformer.process(b"\xff\xd8\xff" + b"\x00" * 64, plain_config())


def test_thumbnail_scales_down_proportionally(transformer):
    thumb = decode(transformer.thumbnail(make_jpeg(800, 600), 400, 300))
    assert thumb.shape[:2] == (300, 400)

    thumb = decode(transformer.thumbnail(make_jpeg(1000, 200), 400, 300))
    assert thumb.shape[:2] == (80, 400)


def test_thumbnail_never_upscales(transformer):
    thumb = decode(transformer.thumbnail(make_jpeg(200, 100), 400, 300))
    assert thumb.shape[:2] == (100, 200)


def test_looks_like_jpeg():
    assert looks_like_jpeg(make_jpeg())
    assert not looks_like_jpeg(b"\x89PNG\r\n\x1a\n")
    assert not looks_like_jpeg(b"")
