"""
Centralized DateTime Utilities
==============================

Provides consistent datetime handling across the entire application.
All "now" values use the timezone configured in webcampics.core.config.
A container built with explicit Settings installs its timezone via
configure_timezone().

Functions:
- now(): Returns timezone-aware datetime object
- from_timestamp(): Convert a POSIX timestamp (e.g. file mtime) to an aware datetime
- capture_stamp(): Format a datetime as a filename-safe capture stamp
- parse_capture_time(): Parse a device-supplied capture time
- capture_label(): Render a capture stamp as 'YYYY-MM-DD HH:MM:SS' for overlays

Capture stamps have the fixed form 'YYYY-MM-DD_HH-MM-SS' so that filenames
sort lexically in capture order.
"""
import logging
import re
from datetime import datetime, timezone as dt_timezone, tzinfo
from typing import Optional

import zoneinfo

from webcampics.core.config import get_settings

logger = logging.getLogger(__name__)

CAPTURE_STAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
CAPTURE_LABEL_FORMAT = "%Y-%m-%d %H:%M:%S"

# Accepts 'YYYY-MM-DD HH:MM:SS', 'YYYY-MM-DDTHH:MM:SS[...]', 'YYYY-MM-DD_HH-MM-SS'
# and the underscore form produced by older firmware ('YYYY-MM-DD_HH_MM_SS').
_CAPTURE_TIME_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[ T_](\d{2})[:_-](\d{2})[:_-](\d{2})"
)

# Set by the DI container; the environment setting applies when unset
_configured_timezone: Optional[str] = None


def configure_timezone(name: Optional[str]) -> None:
    """Use the given timezone name for all timestamps (None restores the environment setting)."""
    global _configured_timezone
    _configured_timezone = name


def _get_app_timezone() -> tzinfo:
    """
    Get the application timezone from config.
    Returns timezone object (defaults to UTC if invalid).
    """
    tz_str = _configured_timezone or get_settings().timezone

    if tz_str.upper() == "UTC":
        return dt_timezone.utc

    try:
        return zoneinfo.ZoneInfo(tz_str)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Invalid timezone '{tz_str}', falling back to UTC")
        return dt_timezone.utc


def now() -> datetime:
    """
    Get current datetime with application-configured timezone.

    Returns:
        timezone-aware datetime object
    """
    return datetime.now(_get_app_timezone())


def from_timestamp(ts: float) -> datetime:
    """Convert a POSIX timestamp to an aware datetime in the application timezone."""
    return datetime.fromtimestamp(ts, _get_app_timezone())


def capture_stamp(dt: Optional[datetime] = None) -> str:
    """
    Format a datetime as a capture stamp ('YYYY-MM-DD_HH-MM-SS').

    Args:
        dt: datetime to format; defaults to now() at second resolution
    """
    if dt is None:
        dt = now()
    return dt.strftime(CAPTURE_STAMP_FORMAT)


def parse_capture_time(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a capture time supplied by a device.

    The wall-clock value is kept as sent; any trailing zone designator is
    ignored since devices stamp frames in their local time.

    Returns:
        naive datetime, or None if the value is missing or unparsable
    """
    if not value:
        return None

    match = _CAPTURE_TIME_RE.match(value.strip())
    if not match:
        return None

    try:
        return datetime(*(int(part) for part in match.groups()))
    except ValueError:
        return None


def normalize_capture_time(value: Optional[str]) -> str:
    """
    Turn a device-supplied capture time into a capture stamp.

    Falls back to the current time when the value is missing or cannot be
    parsed, so stored filenames always keep their sortable form.
    """
    parsed = parse_capture_time(value)
    if parsed is None:
        if value:
            logger.warning(f"Unparsable capture time {value!r}, using current time")
        return capture_stamp()
    return capture_stamp(parsed)


def capture_label(stamp: str) -> str:
    """
    Render a capture stamp (or a filename stem starting with one) as
    'YYYY-MM-DD HH:MM:SS'. Unrecognised stems are returned with
    underscores replaced by spaces.
    """
    parsed = parse_capture_time(stamp)
    if parsed is None:
        return stamp.replace("_", " ")
    return parsed.strftime(CAPTURE_LABEL_FORMAT)
