"""
Image Store
===========

Filesystem layout for captured frames:

    <images root>/<sanitized identifier>/<YYYY-MM-DD_HH-MM-SS>.jpg        finalized frame
    <images root>/<sanitized identifier>/<YYYY-MM-DD_HH-MM-SS>_thumb.jpg  cached thumbnail
    <images root>/<sanitized identifier>/<YYYY-MM-DD_HH-MM-SS>.jpg.raw    staged upload

Filenames sort lexically in capture order, so the latest frame is the
greatest filename and no separate index is kept.
"""
import logging
import os
import re
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional

from webcampics.domain.exceptions import StorageError
from webcampics.domain.identity import is_storage_token, sanitize_for_storage
from webcampics.domain.models.image import (
    THUMB_SUFFIX,
    StagedImage,
    StoredImage,
)
from webcampics.utils.datetime_utils import normalize_capture_time

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60
DIR_MODE = 0o755

# Finalized frames only: excludes thumbnails, staged and temporary files
_IMAGE_NAME_RE = re.compile(r"[A-Za-z0-9_-]+\.jpg")


def is_image_filename(name: str) -> bool:
    return bool(_IMAGE_NAME_RE.fullmatch(name)) and not name.endswith(THUMB_SUFFIX)


class ImageStore:
    """
    Owns the on-disk tree under the images root.

    No state is kept between calls; every listing reads the directory.
    """

    def __init__(self, images_root: Path):
        self._root = Path(images_root)

    @property
    def root(self) -> Path:
        return self._root

    def device_dir(self, identifier: str) -> Path:
        """Directory for a device identifier (sanitized)."""
        return self._root / sanitize_for_storage(identifier)

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    def stage_raw(self, identifier: str, data: bytes, capture_time: Optional[str] = None) -> StagedImage:
        """
        Write uploaded bytes to '<stamp>.jpg.raw' in the device directory.

        Args:
            identifier: Device identifier as presented
            data: Raw JPEG bytes
            capture_time: Device-supplied capture time; defaults to now

        Returns:
            Handle for promote() or discard()

        Raises:
            StorageError: if the directory or file cannot be written
        """
        directory = self.device_dir(identifier)
        staged = StagedImage(
            identifier=identifier,
            directory=directory,
            stamp=normalize_capture_time(capture_time),
        )
        try:
            directory.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
            staged.raw_path.write_bytes(data)
        except OSError as e:
            self._remove_quietly(staged.raw_path)
            raise StorageError(f"Failed to save image: {e}") from e

        logger.debug(f"Staged {len(data)} bytes at {staged.raw_path}")
        return staged

    def promote(self, staged: StagedImage, data: bytes) -> Path:
        """
        Write the transformed frame to its final path and drop the raw file.

        The raw file is removed whether or not the final write succeeds.

        Raises:
            StorageError: if the final file cannot be written
        """
        final_path = staged.final_path
        tmp_path = final_path.with_name(final_path.name + ".tmp")
        try:
            tmp_path.write_bytes(data)
            os.replace(tmp_path, final_path)
        except OSError as e:
            self._remove_quietly(tmp_path)
            raise StorageError(f"Failed to write processed image: {e}") from e
        finally:
            self._remove_quietly(staged.raw_path)

        logger.debug(f"Promoted {staged.raw_path.name} -> {final_path.name}")
        return final_path

    def discard(self, staged: StagedImage) -> None:
        """Delete the raw file without producing a final image."""
        self._remove_quietly(staged.raw_path)

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    def _stored(self, path: Path) -> Optional[StoredImage]:
        try:
            stat = path.stat()
        except FileNotFoundError:
            # Purged between listing and stat
            return None
        return StoredImage(
            directory=path.parent.name,
            filename=path.name,
            path=path,
            modified=stat.st_mtime,
            size=stat.st_size,
        )

    def _image_paths(self, directory: Path) -> List[Path]:
        if not directory.is_dir():
            return []
        return [p for p in directory.iterdir() if is_image_filename(p.name) and p.is_file()]

    def _device_dirs(self) -> List[Path]:
        if not self._root.is_dir():
            return []
        return sorted(p for p in self._root.iterdir() if p.is_dir())

    def _latest_in(self, directory: Path) -> Optional[StoredImage]:
        for path in sorted(self._image_paths(directory), key=lambda p: p.name, reverse=True):
            stored = self._stored(path)
            if stored is not None:
                return stored
        return None

    def latest(self, identifier: str) -> Optional[StoredImage]:
        """Finalized frame with the greatest filename, i.e. the newest capture."""
        return self._latest_in(self.device_dir(identifier))

    def list_within_window(self, identifier: str, window_days: float) -> List[StoredImage]:
        """
        Finalized frames modified within the last window_days, newest first.
        """
        now = time.time()
        cutoff = now - window_days * SECONDS_PER_DAY
        images = []
        for path in self._image_paths(self.device_dir(identifier)):
            stored = self._stored(path)
            if stored is not None and cutoff <= stored.modified <= now:
                images.append(stored)
        images.sort(key=lambda img: (img.modified, img.filename), reverse=True)
        return images

    def list_all_latest(self) -> Dict[str, StoredImage]:
        """Latest finalized frame per device directory that has one."""
        result = {}
        for directory in self._device_dirs():
            latest = self._latest_in(directory)
            if latest is not None:
                result[directory.name] = latest
        return result

    def resolve(self, directory: str, filename: str) -> Optional[StoredImage]:
        """
        Look up a finalized frame by directory and filename taken from a URL.

        Names that do not match the storage layout return None without
        touching the filesystem.
        """
        if not is_storage_token(directory) or not is_image_filename(filename):
            return None
        path = self._root / directory / filename
        if not path.is_file():
            return None
        return self._stored(path)

    def ensure_thumbnail(self, image: StoredImage, render: Callable[[bytes], bytes]) -> Path:
        """
        Return the cached thumbnail path, rendering it on first use.

        Args:
            image: Finalized frame
            render: Callable producing thumbnail JPEG bytes from the frame bytes
        """
        thumb_path = image.thumbnail_path
        if thumb_path.exists():
            return thumb_path

        try:
            source = image.path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read image: {e}") from e

        data = render(source)
        tmp_path = thumb_path.with_name(thumb_path.name + ".tmp")
        try:
            tmp_path.write_bytes(data)
            os.replace(tmp_path, thumb_path)
        except OSError as e:
            self._remove_quietly(tmp_path)
            raise StorageError(f"Failed to write thumbnail: {e}") from e
        return thumb_path

    # ------------------------------------------------------------------
    # Retention
    # ------------------------------------------------------------------

    def purge_older_than(self, retention_days: float) -> int:
        """
        Delete every file (final, thumbnail or raw) older than the cutoff.

        Directories are kept. Files that disappear while the purge runs are
        skipped silently.

        Returns:
            Number of files removed
        """
        cutoff = time.time() - retention_days * SECONDS_PER_DAY
        deleted = 0
        for directory in self._device_dirs():
            try:
                entries = list(directory.iterdir())
            except FileNotFoundError:
                continue
            for path in entries:
                try:
                    if not path.is_file() or path.stat().st_mtime >= cutoff:
                        continue
                    path.unlink()
                    deleted += 1
                except FileNotFoundError:
                    continue
                except OSError as e:
                    logger.warning(f"Could not delete {path}: {e}")
        return deleted

    @staticmethod
    def _remove_quietly(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove {path}: {e}")
