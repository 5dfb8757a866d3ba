import json
import os

import cv2
import numpy as np

from webcampics.domain.models.camera import CameraStatus
from webcampics.domain.repositories.camera_repository import CameraRepository
from tests.conftest import MAC, TOKEN, make_jpeg


def modern_headers(device_id=MAC, timestamp=None, token=TOKEN):
    headers = {"X-Device-Token": token, "X-Device-ID": device_id, "Content-Type": "image/jpeg"}
    if timestamp:
        headers["X-Timestamp"] = timestamp
    return headers


def stored_files(settings, directory="AA-BB-CC-DD-EE-FF"):
    path = settings.images_dir / directory
    if not path.exists():
        return []
    return sorted(p.name for p in path.iterdir())


def test_first_upload_provisions_hidden_camera(client, container, settings, jpeg_bytes):
    response = client.post("/upload", content=jpeg_bytes, headers=modern_headers(timestamp="2025-06-01 12:30:00"))

    assert response.status_code == 200
    body = response.json()
    assert body == {
        "success": True,
        "device_id": MAC,
        "timestamp": "2025-06-01 12:30:00",
        "size": len(jpeg_bytes),
        "filename": "2025-06-01_12-30-00.jpg",
    }

    cameras = container.get(CameraRepository).find_all()
    assert len(cameras) == 1
    assert cameras[0].status is CameraStatus.HIDDEN
    assert cameras[0].rotation == 0
    assert stored_files(settings) == ["2025-06-01_12-30-00.jpg"]


def test_second_upload_in_other_form_matches_same_camera(client, container, settings, jpeg_bytes):
    client.post("/upload", content=jpeg_bytes, headers=modern_headers(timestamp="2025-06-01 12:30:00"))
    response = client.post(
        "/api/v1/upload",
        content=jpeg_bytes,
        headers=modern_headers(device_id="aa-bb-cc-dd-ee-ff", timestamp="2025-06-01 12:31:00"),
    )

    assert response.status_code == 200
    assert len(container.get(CameraRepository).find_all()) == 1
    assert stored_files(settings) == ["2025-06-01_12-30-00.jpg", "2025-06-01_12-31-00.jpg"]

    latest = client.get("/api/v1/images/AA:BB:CC:DD:EE:FF/latest")
    assert latest.status_code == 200
    assert latest.json()["filename"] == "2025-06-01_12-31-00.jpg"


def test_disabled_camera_frames_are_discarded(client, container, settings, jpeg_bytes):
    container.get(CameraRepository).upsert(MAC, {"status": "disabled"})

    response = client.post("/upload", content=jpeg_bytes, headers=modern_headers())

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["filename"] is None
    assert stored_files(settings) == []


def test_oversized_payload_is_rejected_before_provisioning(client, container, settings):
    payload = b"\xff\xd8\xff" + b"\x00" * (1024 * 1024)

    response = client.post("/upload", content=payload, headers=modern_headers())

    assert response.status_code == 413
    assert response.json() == {"error": "Image too large"}
    assert not (settings.images_dir / "AA-BB-CC-DD-EE-FF").exists()
    assert container.get(CameraRepository).find_all() == []


def test_rotation_and_title_applied_to_stored_image(client, container, settings):
    container.get(CameraRepository).upsert(MAC, {"rotation": 90, "add_title": True, "title": "Garden"})
    source = make_jpeg(320, 240, color=(0, 0, 0))

    response = client.post("/upload", content=source, headers=modern_headers(timestamp="2025-06-01 12:30:00"))

    assert response.status_code == 200
    stored = settings.images_dir / "AA-BB-CC-DD-EE-FF" / response.json()["filename"]
    frame = cv2.imdecode(np.frombuffer(stored.read_bytes(), dtype=np.uint8), cv2.IMREAD_COLOR)
    assert frame.shape[:2] == (320, 240)
    assert frame[20:38, 10:80].max() > 200


def test_legacy_multipart_upload(client, settings, jpeg_bytes):
    response = client.post(
        "/upload",
        data={"auth": TOKEN, "cam": "porch cam"},
        files={"pic": ("snapshot.jpg", jpeg_bytes, "image/jpeg")},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["device_id"] == "porch cam"
    assert stored_files(settings, "porch_cam") == [body["filename"]]

    audit = (settings.logs_dir / "upload.log").read_text(encoding="utf-8")
    assert f"Legacy upload from porch cam ({len(jpeg_bytes)} bytes) - Saved as {body['filename']}" in audit


def test_legacy_oversized_upload_is_rejected_after_auth(client, container, settings):
    payload = b"\xff\xd8\xff" + b"\x00" * (2 * 1024 * 1024)

    response = client.post(
        "/upload",
        data={"auth": TOKEN, "cam": MAC},
        files={"pic": ("snapshot.jpg", payload, "image/jpeg")},
    )

    assert response.status_code == 413
    assert response.json() == {"error": "Image too large"}
    assert not (settings.images_dir / "AA-BB-CC-DD-EE-FF").exists()
    assert container.get(CameraRepository).find_all() == []


def test_legacy_oversized_upload_with_bad_token_is_unauthorized(client, container):
    payload = b"\xff\xd8\xff" + b"\x00" * (2 * 1024 * 1024)

    response = client.post(
        "/upload",
        data={"auth": "wrong-token", "cam": MAC},
        files={"pic": ("snapshot.jpg", payload, "image/jpeg")},
    )

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
    assert container.get(CameraRepository).find_all() == []


def test_modern_upload_is_audited(client, settings, jpeg_bytes):
    client.post("/upload", content=jpeg_bytes, headers=modern_headers(timestamp="2025-06-01 12:30:00"))

    audit = (settings.logs_dir / "upload.log").read_text(encoding="utf-8")
    assert f"Image received from {MAC} ({len(jpeg_bytes)} bytes) - Saved as 2025-06-01_12-30-00.jpg" in audit


def test_bearer_authorization_header(client, jpeg_bytes):
    headers = {"Authorization": f"Bearer {TOKEN}", "X-Device-ID": "cam-2"}
    assert client.post("/upload", content=jpeg_bytes, headers=headers).status_code == 200


def test_invalid_token(client, settings, jpeg_bytes):
    response = client.post("/upload", content=jpeg_bytes, headers=modern_headers(token="wrong"))
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
    assert not settings.images_dir.exists()


def test_missing_device_id(client, jpeg_bytes):
    response = client.post("/upload", content=jpeg_bytes, headers={"X-Device-Token": TOKEN})
    assert response.status_code == 400
    assert "X-Device-ID" in response.json()["error"]


def test_empty_body(client):
    response = client.post("/upload", content=b"", headers=modern_headers())
    assert response.status_code == 400
    assert response.json() == {"error": "No image data received"}


def test_non_jpeg_body(client, settings):
    response = client.post("/upload", content=b"\x89PNG\r\n\x1a\n" + b"\x00" * 32, headers=modern_headers())
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid image format. Only JPEG is accepted."}
    assert not settings.images_dir.exists()


def test_undecodable_jpeg_leaves_no_raw_file(client, settings):
    response = client.post("/upload", content=b"\xff\xd8\xff" + b"\x00" * 64, headers=modern_headers())

    assert response.status_code == 500
    assert "error" in response.json()
    assert stored_files(settings) == []


def test_unusable_identifier(client, jpeg_bytes):
    response = client.post("/upload", content=jpeg_bytes, headers=modern_headers(device_id="///"))
    assert response.status_code == 400


def test_wrong_method(client):
    response = client.get("/upload")
    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}


def test_token_changes_apply_without_restart(client, settings, config_document, jpeg_bytes):
    config_document["auth_tokens"] = ["rotated-token"]
    settings.config_file.write_text(json.dumps(config_document), encoding="utf-8")
    stat = settings.config_file.stat()
    os.utime(settings.config_file, (stat.st_atime, stat.st_mtime + 5))

    assert client.post("/upload", content=jpeg_bytes, headers=modern_headers()).status_code == 401
    assert client.post(
        "/upload", content=jpeg_bytes, headers=modern_headers(token="rotated-token")
    ).status_code == 200


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
