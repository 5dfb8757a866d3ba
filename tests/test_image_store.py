import pytest

from webcampics.domain.exceptions import StorageError
from webcampics.infrastructure.storage.image_store import ImageStore, is_image_filename
from tests.conftest import age_file


@pytest.fixture
def store(tmp_path):
    return ImageStore(tmp_path / "images")


def test_stage_and_promote_leaves_only_final_file(store):
    staged = store.stage_raw("AA:BB:CC:DD:EE:FF", b"raw", "2025-06-01 12:30:00")

    assert staged.directory.name == "AA-BB-CC-DD-EE-FF"
    assert staged.raw_path.name == "2025-06-01_12-30-00.jpg.raw"
    assert staged.raw_path.read_bytes() == b"raw"

    final_path = store.promote(staged, b"processed")

    assert final_path.name == "2025-06-01_12-30-00.jpg"
    assert final_path.read_bytes() == b"processed"
    assert sorted(p.name for p in staged.directory.iterdir()) == ["2025-06-01_12-30-00.jpg"]


def test_promote_failure_still_removes_raw_file(store):
    staged = store.stage_raw("cam-1", b"raw", "2025-06-01 12:30:00")
    # A directory at the final path makes the rename fail
    staged.final_path.mkdir()

    with pytest.raises(StorageError):
        store.promote(staged, b"processed")

    assert not staged.raw_path.exists()
    assert sorted(p.name for p in staged.directory.iterdir()) == ["2025-06-01_12-30-00.jpg"]


def test_discard_leaves_no_files(store):
    staged = store.stage_raw("cam-1", b"raw", "2025-06-01 12:30:00")
    store.discard(staged)
    assert list(staged.directory.iterdir()) == []


def test_stage_raw_without_timestamp_uses_sortable_stamp(store):
    staged = store.stage_raw("cam-1", b"raw", "not a time")
    assert is_image_filename(staged.filename)
    store.discard(staged)


def test_stage_raw_reports_storage_errors(tmp_path):
    blocker = tmp_path / "images"
    blocker.write_text("not a directory")
    store = ImageStore(blocker)
    with pytest.raises(StorageError):
        store.stage_raw("cam-1", b"raw")


def test_latest_is_greatest_filename(store):
    for stamp in ("2025-06-01 08:00:00", "2025-06-02 07:00:00", "2025-06-01 23:59:59"):
        store.promote(store.stage_raw("aa-bb-cc-dd-ee-ff", b"x", stamp), b"x")

    latest = store.latest("aa-bb-cc-dd-ee-ff")
    assert latest.filename == "2025-06-02_07-00-00.jpg"
    assert latest.captured_label == "2025-06-02 07:00:00"


def test_latest_without_images(store):
    assert store.latest("never-seen") is None


def test_listings_ignore_thumbnails_and_raw_files(store):
    staged = store.stage_raw("cam-1", b"raw", "2025-06-01 12:00:00")
    final_path = store.promote(store.stage_raw("cam-1", b"x", "2025-06-01 11:00:00"), b"x")
    final_path.with_name("2025-06-01_11-00-00_thumb.jpg").write_bytes(b"t")
    (final_path.parent / "notes.txt").write_text("ignore")

    names = [img.filename for img in store.list_within_window("cam-1", 1)]
    assert names == ["2025-06-01_11-00-00.jpg"]
    assert store.latest("cam-1").filename == "2025-06-01_11-00-00.jpg"
    store.discard(staged)


def test_list_within_window_newest_first(store):
    old = store.promote(store.stage_raw("cam-1", b"x", "2025-01-01 00:00:00"), b"x")
    middle = store.promote(store.stage_raw("cam-1", b"x", "2025-01-02 00:00:00"), b"x")
    new = store.promote(store.stage_raw("cam-1", b"x", "2025-01-03 00:00:00"), b"x")
    age_file(old, 10)
    age_file(middle, 2)
    age_file(new, 1)

    names = [img.filename for img in store.list_within_window("cam-1", 7)]
    assert names == [new.name, middle.name]


def test_list_all_latest_keyed_by_directory(store):
    store.promote(store.stage_raw("AA:BB:CC:DD:EE:FF", b"x", "2025-01-01 00:00:00"), b"x")
    store.promote(store.stage_raw("garden", b"x", "2025-01-02 00:00:00"), b"x")
    (store.root / "empty").mkdir()

    latest = store.list_all_latest()
    assert set(latest) == {"AA-BB-CC-DD-EE-FF", "garden"}
    assert latest["garden"].filename == "2025-01-02_00-00-00.jpg"


@pytest.mark.parametrize("directory, filename", [
    ("..", "2025-01-01_00-00-00.jpg"),
    ("garden", "../config.json"),
    ("garden", "2025-01-01_00-00-00_thumb.jpg"),
    ("garden", "2025-01-01_00-00-00.jpg.raw"),
    ("garden", "missing.jpg"),
])
def test_resolve_rejects_invalid_or_missing(store, directory, filename):
    store.promote(store.stage_raw("garden", b"x", "2025-01-01 00:00:00"), b"x")
    assert store.resolve(directory, filename) is None


def test_resolve_finds_finalized_image(store):
    store.promote(store.stage_raw("garden", b"x", "2025-01-01 00:00:00"), b"x")
    image = store.resolve("garden", "2025-01-01_00-00-00.jpg")
    assert image is not None
    assert image.size == 1


def test_ensure_thumbnail_renders_once(store):
    store.promote(store.stage_raw("garden", b"x", "2025-01-01 00:00:00"), b"full")
    image = store.resolve("garden", "2025-01-01_00-00-00.jpg")
    calls = []

    def render(data):
        calls.append(data)
        return b"thumb"

    first = store.ensure_thumbnail(image, render)
    second = store.ensure_thumbnail(image, render)

    assert first == second
    assert first.name == "2025-01-01_00-00-00_thumb.jpg"
    assert first.read_bytes() == b"thumb"
    assert calls == [b"full"]


def test_purge_removes_only_old_files(store):
    old = store.promote(store.stage_raw("cam-1", b"x", "2025-01-01 00:00:00"), b"x")
    old_thumb = old.with_name("2025-01-01_00-00-00_thumb.jpg")
    old_thumb.write_bytes(b"t")
    leftover = store.stage_raw("cam-2", b"x", "2025-01-01 00:00:00")
    recent = store.promote(store.stage_raw("cam-1", b"x", "2025-01-20 00:00:00"), b"x")
    for path in (old, old_thumb, leftover.raw_path):
        age_file(path, 15)
    age_file(recent, 13)

    assert store.purge_older_than(14) == 3
    assert not old.exists()
    assert not old_thumb.exists()
    assert not leftover.raw_path.exists()
    assert recent.exists()
    assert leftover.directory.is_dir()

    assert store.purge_older_than(14) == 0


def test_purge_on_missing_root(tmp_path):
    assert ImageStore(tmp_path / "nothing").purge_older_than(1) == 0
