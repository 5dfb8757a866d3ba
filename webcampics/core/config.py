# Standard library imports
import json
import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Final, FrozenSet, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_DAYS = 14
DEFAULT_UPLOAD_MAX_SIZE_MB = 5


@dataclass(frozen=True)
class AppConfig:
    """
    Application configuration document (config.json).

    Owned by the external settings form; the core only reads it.
    """
    auth_tokens: FrozenSet[str] = frozenset()
    locations: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    image_retention_days: int = DEFAULT_RETENTION_DAYS
    upload_max_size_mb: float = DEFAULT_UPLOAD_MAX_SIZE_MB

    @property
    def upload_max_bytes(self) -> int:
        return int(self.upload_max_size_mb * 1024 * 1024)

    def location_title(self, location_id: str) -> str:
        meta = self.locations.get(location_id) or {}
        return meta.get("title") or location_id.capitalize()

    def location_description(self, location_id: str) -> str:
        meta = self.locations.get(location_id) or {}
        return meta.get("description") or ""


class AppConfigSource:
    """
    Loads the config.json document and reloads it whenever the file changes.

    Token edits made by the settings form become visible to the next request
    without restarting the service.
    """

    def __init__(
        self,
        path: Path,
        extra_tokens: FrozenSet[str] = frozenset(),
        retention_override: Optional[int] = None,
        max_size_override: Optional[float] = None,
    ) -> None:
        self._path = Path(path)
        self._extra_tokens = extra_tokens
        self._retention_override = retention_override
        self._max_size_override = max_size_override
        self._lock = threading.Lock()
        self._mtime: Optional[float] = None
        self._config: Optional[AppConfig] = None

    @property
    def path(self) -> Path:
        return self._path

    def get(self) -> AppConfig:
        try:
            mtime = self._path.stat().st_mtime
        except FileNotFoundError:
            mtime = None

        with self._lock:
            if self._config is None or mtime != self._mtime:
                self._config = self._load()
                self._mtime = mtime
            return self._config

    def _load(self) -> AppConfig:
        document: Dict[str, Any] = {}
        if self._path.exists():
            try:
                document = json.loads(self._path.read_text(encoding="utf-8")) or {}
            except (OSError, ValueError) as e:
                logger.error(f"Failed to read config document {self._path}: {e}")
                document = {}
        else:
            logger.warning(f"Config document {self._path} not found, using defaults")

        tokens = {str(t) for t in document.get("auth_tokens", []) if t}
        tokens |= set(self._extra_tokens)

        retention = document.get("image_retention_days", DEFAULT_RETENTION_DAYS)
        if self._retention_override is not None:
            retention = self._retention_override

        max_size = document.get("upload_max_size_mb", DEFAULT_UPLOAD_MAX_SIZE_MB)
        if self._max_size_override is not None:
            max_size = self._max_size_override

        return AppConfig(
            auth_tokens=frozenset(tokens),
            locations=dict(document.get("locations") or {}),
            image_retention_days=int(retention),
            upload_max_size_mb=float(max_size),
        )


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == "":
        return None
    return int(value)


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or value.strip() == "":
        return None
    return float(value)


class Settings:
    """
    Application settings loaded from environment variables.

    This class centralizes all configuration settings for the application.
    All settings are loaded from environment variables with sensible defaults;
    keyword overrides take precedence (used by tests and the cleanup job).
    """

    def __init__(self, **overrides: Any) -> None:
        # Load environment variables from .env file
        load_dotenv()

        def setting(name: str, default: Any = None) -> Any:
            key = name.lower()
            if key in overrides:
                return overrides[key]
            return os.getenv(name, default)

        # Timezone Configuration
        # Default to UTC, but can be set via TIMEZONE env var (e.g., "UTC", "Europe/Berlin")
        self.timezone: Final[str] = setting("TIMEZONE", "UTC")

        # File Locations
        self.config_file: Final[Path] = Path(setting("CONFIG_FILE", os.path.join("config", "config.json")))
        self.cameras_file: Final[Path] = Path(setting("CAMERAS_FILE", os.path.join("config", "cameras.json")))
        self.images_dir: Final[Path] = Path(setting("IMAGES_DIR", "images"))
        self.logs_dir: Final[Path] = Path(setting("LOGS_DIR", "logs"))

        # Logging
        self.log_level: Final[str] = str(setting("LOG_LEVEL", "INFO")).upper()

        # Auth tokens merged into the config document's token set
        raw_tokens = setting("AUTH_TOKENS", "")
        if isinstance(raw_tokens, str):
            raw_tokens = raw_tokens.split(",")
        self.extra_auth_tokens: Final[FrozenSet[str]] = frozenset(
            t.strip() for t in raw_tokens if t and t.strip()
        )

        # Overrides for config document values
        retention = setting("IMAGE_RETENTION_DAYS")
        self.image_retention_days_override: Final[Optional[int]] = (
            retention if isinstance(retention, int) else _optional_int(retention)
        )
        max_size = setting("UPLOAD_MAX_SIZE_MB")
        self.upload_max_size_mb_override: Final[Optional[float]] = (
            float(max_size) if isinstance(max_size, (int, float)) else _optional_float(max_size)
        )

        # Thumbnails
        self.thumbnail_max_width: Final[int] = int(setting("THUMBNAIL_MAX_WIDTH", "400"))
        self.thumbnail_max_height: Final[int] = int(setting("THUMBNAIL_MAX_HEIGHT", "300"))

        # Background cleanup (0 disables; use the webcampics-cleanup job from cron instead)
        self.cleanup_interval_hours: Final[float] = float(setting("CLEANUP_INTERVAL_HOURS", "0"))

        self._app_config_source = AppConfigSource(
            self.config_file,
            extra_tokens=self.extra_auth_tokens,
            retention_override=self.image_retention_days_override,
            max_size_override=self.upload_max_size_mb_override,
        )

    def app_config(self) -> AppConfig:
        """Current contents of the application config document."""
        return self._app_config_source.get()


# Global settings instance (singleton pattern)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings (singleton pattern)

    Returns:
        Settings instance with all configuration values
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
