import cv2
import numpy as np
import pytest

from webcampics.domain.repositories.camera_repository import CameraRepository
from tests.conftest import MAC, TOKEN, age_file, make_jpeg


def upload(client, device_id, timestamp, data=None):
    response = client.post(
        "/upload",
        content=data or make_jpeg(),
        headers={"X-Device-Token": TOKEN, "X-Device-ID": device_id, "X-Timestamp": timestamp},
    )
    assert response.status_code == 200
    return response.json()


@pytest.fixture
def populated(client, container):
    repository = container.get(CameraRepository)
    upload(client, MAC, "2025-06-01 12:00:00")
    upload(client, MAC, "2025-06-01 13:00:00")
    upload(client, "street-cam", "2025-06-01 12:00:00")
    upload(client, "backyard", "2025-06-01 12:00:00")
    repository.upsert(MAC, {"status": "enabled", "location": "garden", "title": "Garden East"})
    repository.upsert("street-cam", {"status": "enabled", "location": "street"})
    # backyard stays hidden
    return repository


def test_gallery_groups_enabled_cameras_by_location(client, populated):
    response = client.get("/api/v1/gallery")
    assert response.status_code == 200
    groups = response.json()

    assert [g["location_id"] for g in groups] == ["garden", "street"]
    garden, street = groups
    assert garden["title"] == "Garden"
    assert garden["description"] == "Back of the house"
    assert street["title"] == "Street"
    assert street["description"] == ""

    device = garden["devices"][0]
    assert device["directory"] == "AA-BB-CC-DD-EE-FF"
    assert device["camera"]["title"] == "Garden East"
    assert device["latest"]["filename"] == "2025-06-01_13-00-00.jpg"
    assert device["latest"]["captured_at"] == "2025-06-01 13:00:00"
    assert device["latest"]["url"] == "/images/AA-BB-CC-DD-EE-FF/2025-06-01_13-00-00.jpg"


def test_gallery_skips_enabled_camera_without_images(client, populated):
    populated.upsert("no-images", {"status": "enabled", "location": "attic"})
    locations = [g["location_id"] for g in client.get("/api/v1/gallery").json()]
    assert "attic" not in locations


def test_images_overview_includes_hidden_and_unconfigured(client, populated, settings):
    populated.remove("street-cam")

    overview = {item["directory"]: item for item in client.get("/api/v1/images").json()}

    assert set(overview) == {"AA-BB-CC-DD-EE-FF", "street-cam", "backyard"}
    assert overview["backyard"]["camera"]["status"] == "hidden"
    assert overview["street-cam"]["camera"] is None


def test_device_window_listing(client, populated, settings):
    directory = settings.images_dir / "AA-BB-CC-DD-EE-FF"
    age_file(directory / "2025-06-01_12-00-00.jpg", 3)

    recent = client.get(f"/api/v1/images/{MAC}", params={"days": 1}).json()
    assert recent["days"] == 1
    assert [img["filename"] for img in recent["images"]] == ["2025-06-01_13-00-00.jpg"]

    default = client.get(f"/api/v1/images/{MAC}").json()
    assert default["days"] == 14
    assert [img["filename"] for img in default["images"]] == [
        "2025-06-01_13-00-00.jpg",
        "2025-06-01_12-00-00.jpg",
    ]


def test_device_window_rejects_bad_days(client, populated):
    response = client.get(f"/api/v1/images/{MAC}", params={"days": 0})
    assert response.status_code == 400
    assert "error" in response.json()


def test_latest_unknown_device(client):
    response = client.get("/api/v1/images/nobody/latest")
    assert response.status_code == 404
    assert "error" in response.json()


def test_image_file_is_served(client, populated):
    response = client.get("/images/AA-BB-CC-DD-EE-FF/2025-06-01_13-00-00.jpg")
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/jpeg"
    assert response.content[:3] == b"\xff\xd8\xff"


@pytest.mark.parametrize("path", [
    "/images/AA-BB-CC-DD-EE-FF/missing.jpg",
    "/images/AA-BB-CC-DD-EE-FF/2025-06-01_13-00-00_thumb.jpg",
    "/images/AA-BB-CC-DD-EE-FF/notes.txt",
    "/images/..%2Fconfig/config.json",
])
def test_image_file_not_found(client, populated, path):
    response = client.get(path)
    assert response.status_code == 404
    assert "error" in response.json()


def test_thumbnail_is_generated_and_cached(client, container, settings):
    upload(client, "big-cam", "2025-06-01 12:00:00", data=make_jpeg(1600, 1200))
    url = "/images/big-cam/2025-06-01_12-00-00.jpg/thumbnail"

    response = client.get(url)
    assert response.status_code == 200
    thumb = cv2.imdecode(np.frombuffer(response.content, dtype=np.uint8), cv2.IMREAD_COLOR)
    assert thumb.shape[:2] == (300, 400)

    cached = settings.images_dir / "big-cam" / "2025-06-01_12-00-00_thumb.jpg"
    assert cached.exists()
    assert client.get(url).content == cached.read_bytes()

    # Thumbnails never show up as images
    listing = client.get("/api/v1/images/big-cam").json()
    assert [img["filename"] for img in listing["images"]] == ["2025-06-01_12-00-00.jpg"]
