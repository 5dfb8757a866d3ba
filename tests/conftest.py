"""Shared pytest fixtures: isolated settings, synthetic JPEGs and an API client."""

import json
import os
import time
from pathlib import Path

import cv2
import numpy as np
import pytest
from fastapi.testclient import TestClient

from webcampics.core.config import Settings
from webcampics.di.container import DIContainer
from webcampics.main import create_application

TOKEN = "test-token-1234"
MAC = "AA:BB:CC:DD:EE:FF"


def make_jpeg(width: int = 320, height: int = 240, color=(40, 80, 120)) -> bytes:
    """Solid-colour BGR frame encoded as JPEG."""
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    frame[:] = color
    ok, buffer = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, 95])
    assert ok
    return buffer.tobytes()


def age_file(path: Path, days: float) -> None:
    """Set a file's mtime `days` days into the past."""
    stamp = time.time() - days * 24 * 60 * 60
    os.utime(path, (stamp, stamp))


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_jpeg()


@pytest.fixture
def config_document() -> dict:
    return {
        "auth_tokens": [TOKEN],
        "locations": {
            "garden": {"title": "Garden", "description": "Back of the house"},
        },
        "image_retention_days": 14,
        "upload_max_size_mb": 1,
    }


@pytest.fixture
def settings(tmp_path, config_document) -> Settings:
    config_file = tmp_path / "config" / "config.json"
    config_file.parent.mkdir(parents=True)
    config_file.write_text(json.dumps(config_document), encoding="utf-8")
    return Settings(
        timezone="UTC",
        config_file=config_file,
        cameras_file=tmp_path / "config" / "cameras.json",
        images_dir=tmp_path / "images",
        logs_dir=tmp_path / "logs",
        auth_tokens="",
        image_retention_days=None,
        upload_max_size_mb=None,
        cleanup_interval_hours=0,
    )


@pytest.fixture
def container(settings) -> DIContainer:
    return DIContainer(settings)


@pytest.fixture
def client(container):
    application = create_application(container)
    with TestClient(application) as test_client:
        yield test_client


@pytest.fixture
def auth_headers() -> dict:
    return {"Authorization": f"Bearer {TOKEN}"}
