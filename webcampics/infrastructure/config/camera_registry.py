"""
File Camera Registry
====================

Concrete implementation of CameraRepository on top of a ConfigBackend
(cameras.json in production, in-memory in tests).
"""
import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

from webcampics.domain.constants.camera_fields import CameraFields
from webcampics.domain.identity import (
    looks_like_mac,
    normalize_for_comparison,
    sanitize_for_storage,
)
from webcampics.domain.models.camera import (
    DEFAULT_FONT_COLOR,
    DEFAULT_FONT_SIZE,
    DEFAULT_LOCATION,
    CameraConfig,
    CameraStatus,
    default_title,
)
from webcampics.domain.repositories.camera_repository import CameraRepository
from webcampics.infrastructure.config.config_backend import ConfigBackend

logger = logging.getLogger(__name__)


def _is_reserved(key: str) -> bool:
    return key.startswith(CameraFields.RESERVED_KEY_PREFIX)


class FileCameraRepository(CameraRepository):
    """
    Camera registry persisted as one JSON document keyed by synthetic keys.

    Every operation loads the whole document, mutates it and writes it back
    inside the backend's transaction, so two first-contact uploads from the
    same device cannot both create a record.
    """

    def __init__(self, backend: ConfigBackend):
        self._backend = backend

    # ------------------------------------------------------------------
    # Record <-> entity conversion
    # ------------------------------------------------------------------

    @staticmethod
    def _record_identifier(record: Dict[str, Any]) -> Optional[str]:
        # Support both old and new field names for backward compatibility
        identifier = record.get(CameraFields.DEVICE_ID) or record.get(CameraFields.LEGACY_MAC)
        return str(identifier) if identifier else None

    def _to_entity(self, record: Dict[str, Any]) -> CameraConfig:
        """Convert a stored record (any schema generation) to CameraConfig."""
        identifier = self._record_identifier(record)

        rotation = record.get(CameraFields.ROTATE, record.get(CameraFields.LEGACY_ROTATION, 0))
        try:
            rotation = int(rotation)
        except (TypeError, ValueError):
            rotation = 0
        if rotation not in (0, 90, 180, 270):
            logger.warning(f"Ignoring invalid rotation {rotation!r} for camera '{identifier}'")
            rotation = 0

        # Records written before the three-state status existed were shown publicly
        raw_status = record.get(CameraFields.STATUS, CameraStatus.ENABLED.value)
        try:
            status = CameraStatus(str(raw_status).lower())
        except ValueError:
            logger.warning(f"Unknown status {raw_status!r} for camera '{identifier}', treating as hidden")
            status = CameraStatus.HIDDEN

        try:
            font_size = int(record.get(CameraFields.FONT_SIZE, DEFAULT_FONT_SIZE))
        except (TypeError, ValueError):
            font_size = DEFAULT_FONT_SIZE

        return CameraConfig(
            identifier=identifier,
            location=record.get(CameraFields.LOCATION) or DEFAULT_LOCATION,
            title=record.get(CameraFields.TITLE) or default_title(identifier),
            status=status,
            rotation=rotation,
            add_title=bool(record.get(CameraFields.ADD_TITLE, True)),
            add_timestamp=bool(record.get(CameraFields.ADD_TIMESTAMP, True)),
            font_size=font_size,
            font_color=record.get(CameraFields.FONT_COLOR) or DEFAULT_FONT_COLOR,
            font_outline=bool(record.get(CameraFields.FONT_OUTLINE, True)),
        )

    def _to_record(self, camera: CameraConfig) -> Dict[str, Any]:
        """Convert CameraConfig to the stored layout."""
        record = {
            CameraFields.DEVICE_ID: camera.identifier,
            CameraFields.LOCATION: camera.location,
            CameraFields.TITLE: camera.title,
            CameraFields.STATUS: camera.status.value,
            CameraFields.ROTATE: camera.rotation,
            CameraFields.ADD_TIMESTAMP: camera.add_timestamp,
            CameraFields.ADD_TITLE: camera.add_title,
            CameraFields.FONT_SIZE: camera.font_size,
            CameraFields.FONT_COLOR: camera.font_color,
            CameraFields.FONT_OUTLINE: camera.font_outline,
        }
        # Keep 'mac' for older readers when the identifier is a MAC address
        if looks_like_mac(camera.identifier):
            record[CameraFields.LEGACY_MAC] = camera.identifier
        return record

    # ------------------------------------------------------------------
    # Document helpers
    # ------------------------------------------------------------------

    def _iter_records(self, document: Dict[str, Any]) -> Iterator[Tuple[str, Dict[str, Any]]]:
        for key, record in document.items():
            if _is_reserved(key) or not isinstance(record, dict):
                continue
            if not self._record_identifier(record):
                continue
            yield key, record

    def _find_key(self, document: Dict[str, Any], identifier: str) -> Optional[str]:
        """Key of the first record equivalent to identifier, in stored order."""
        wanted = normalize_for_comparison(identifier)
        for key, record in self._iter_records(document):
            if normalize_for_comparison(self._record_identifier(record)) == wanted:
                return key
        return None

    def _check_duplicates(self, document: Dict[str, Any]) -> None:
        seen: Dict[str, str] = {}
        for key, record in self._iter_records(document):
            normalized = normalize_for_comparison(self._record_identifier(record))
            if normalized in seen:
                logger.warning(
                    f"Camera records '{seen[normalized]}' and '{key}' refer to the same device; "
                    f"'{seen[normalized]}' takes precedence"
                )
            else:
                seen[normalized] = key

    def _new_key(self, document: Dict[str, Any], identifier: str) -> str:
        """
        Derive a collection key for a new device.

        Raises:
            InvalidIdentifier: if the identifier cannot be sanitized
        """
        sanitized = sanitize_for_storage(identifier)
        base = CameraFields.KEY_PREFIX + sanitized.replace("-", "").lower()
        key = base
        suffix = 2
        while key in document:
            key = f"{base}_{suffix}"
            suffix += 1
        return key

    def _load(self) -> Dict[str, Any]:
        document = self._backend.load()
        self._check_duplicates(document)
        return document

    # ------------------------------------------------------------------
    # CameraRepository
    # ------------------------------------------------------------------

    def find_by_identifier(self, identifier: str) -> Optional[CameraConfig]:
        """Find a camera by any equivalent form of its identifier."""
        if not identifier:
            return None
        document = self._load()
        key = self._find_key(document, identifier)
        if key is None:
            return None
        return self._to_entity(document[key])

    def find_all(self) -> List[CameraConfig]:
        """List all cameras in stored order."""
        document = self._load()
        return [self._to_entity(record) for _, record in self._iter_records(document)]

    def ensure_provisioned(self, identifier: str) -> CameraConfig:
        """Return the existing camera or create a hidden default one."""
        with self._backend.transaction():
            document = self._load()
            key = self._find_key(document, identifier)
            if key is not None:
                return self._to_entity(document[key])

            camera = CameraConfig.provisioned_default(identifier)
            key = self._new_key(document, identifier)
            document[key] = self._to_record(camera)
            self._backend.save(document)

        logger.info(f"Provisioned new camera '{identifier}' as '{key}' (status={camera.status.value})")
        return camera

    def upsert(self, identifier: str, fields: Dict[str, Any]) -> CameraConfig:
        """Update an existing camera or create it from the given fields."""
        with self._backend.transaction():
            document = self._load()
            key = self._find_key(document, identifier)

            if key is not None:
                camera = self._to_entity(document[key])
                created = False
            else:
                camera = CameraConfig.provisioned_default(identifier)
                key = self._new_key(document, identifier)
                created = True

            camera.apply_changes(fields)
            # Preserve keys this version does not know about
            record = dict(document.get(key) or {})
            record.pop(CameraFields.LEGACY_ROTATION, None)
            record.update(self._to_record(camera))
            document[key] = record
            self._backend.save(document)

        logger.info(f"{'Created' if created else 'Updated'} camera '{identifier}' ('{key}')")
        return camera

    def remove(self, identifier: str) -> bool:
        """Delete a camera; absent cameras are not an error."""
        with self._backend.transaction():
            document = self._load()
            key = self._find_key(document, identifier)
            if key is None:
                return False
            del document[key]
            self._backend.save(document)

        logger.info(f"Removed camera '{identifier}' ('{key}')")
        return True
