"""
Image Models
============

Domain models for stored frames and staged (not yet finalized) uploads.
"""
from dataclasses import dataclass
from pathlib import Path

from webcampics.utils.datetime_utils import capture_label

IMAGE_SUFFIX = ".jpg"
RAW_SUFFIX = ".raw"
THUMB_SUFFIX = "_thumb.jpg"


@dataclass(frozen=True)
class StoredImage:
    """A finalized frame: <images root>/<directory>/<stamp>.jpg"""
    directory: str  # sanitized device identifier
    filename: str
    path: Path
    modified: float  # file mtime (POSIX seconds)
    size: int

    @property
    def stamp(self) -> str:
        return self.filename[: -len(IMAGE_SUFFIX)]

    @property
    def captured_label(self) -> str:
        return capture_label(self.stamp)

    @property
    def thumbnail_path(self) -> Path:
        return self.path.with_name(self.stamp + THUMB_SUFFIX)


@dataclass(frozen=True)
class StagedImage:
    """
    Handle to raw bytes written before transformation.

    The raw file lives next to its final path with an extra '.raw' suffix and
    must be promoted or discarded before the request completes.
    """
    identifier: str
    directory: Path
    stamp: str

    @property
    def final_path(self) -> Path:
        return self.directory / (self.stamp + IMAGE_SUFFIX)

    @property
    def raw_path(self) -> Path:
        return self.directory / (self.stamp + IMAGE_SUFFIX + RAW_SUFFIX)

    @property
    def filename(self) -> str:
        return self.final_path.name
