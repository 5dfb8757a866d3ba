"""
Camera Model
============

Domain model representing the per-device camera configuration.
This is a pure domain object with no infrastructure dependencies.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from webcampics.domain.exceptions import ValidationFailed
from webcampics.domain.identity import looks_like_mac

ALLOWED_ROTATIONS = (0, 90, 180, 270)

DEFAULT_LOCATION = "unknown"
DEFAULT_FONT_SIZE = 16
DEFAULT_FONT_COLOR = "#FFFFFF"

_HEX_COLOR_RE = re.compile(r"#?([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})")


class CameraStatus(str, Enum):
    """
    Three-state camera status.

    DISABLED: frames are dropped on arrival.
    HIDDEN: frames are processed and stored but not shown publicly.
    ENABLED: frames are processed, stored and shown publicly.
    """
    DISABLED = "disabled"
    HIDDEN = "hidden"
    ENABLED = "enabled"

    @classmethod
    def parse(cls, value: str) -> "CameraStatus":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(s.value for s in cls)
            raise ValidationFailed(f"Invalid status {value!r}; expected one of: {allowed}")

    @property
    def stores_frames(self) -> bool:
        if self is CameraStatus.DISABLED:
            return False
        if self in (CameraStatus.HIDDEN, CameraStatus.ENABLED):
            return True
        raise AssertionError(f"Unhandled status {self}")

    @property
    def is_public(self) -> bool:
        if self is CameraStatus.ENABLED:
            return True
        if self in (CameraStatus.DISABLED, CameraStatus.HIDDEN):
            return False
        raise AssertionError(f"Unhandled status {self}")


def parse_rotation(value) -> int:
    """Validate a rotation value; only quarter turns are supported."""
    try:
        rotation = int(value)
    except (TypeError, ValueError):
        raise ValidationFailed(f"Invalid rotation {value!r}")
    if rotation not in ALLOWED_ROTATIONS:
        allowed = ", ".join(str(r) for r in ALLOWED_ROTATIONS)
        raise ValidationFailed(f"Invalid rotation {value!r}; expected one of: {allowed}")
    return rotation


def parse_hex_color(value: str) -> Tuple[int, int, int]:
    """
    Parse '#RGB' or '#RRGGBB' (leading '#' optional) into an (r, g, b) tuple.

    Raises:
        ValidationFailed: if the value is not a hex color
    """
    match = _HEX_COLOR_RE.fullmatch(str(value).strip())
    if not match:
        raise ValidationFailed(f"Invalid font color {value!r}; expected #RGB or #RRGGBB")
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def default_title(identifier: str) -> str:
    """Last 8 characters of a MAC-shaped identifier, otherwise the identifier itself."""
    if looks_like_mac(identifier):
        return identifier[-8:]
    return identifier


@dataclass
class CameraConfig:
    """
    Camera configuration domain model.

    One record per physical device (per equivalence class of identifiers).
    Created on first contact with status HIDDEN, changed only by explicit
    administrative updates.
    """
    identifier: str
    location: str = DEFAULT_LOCATION
    title: str = ""
    status: CameraStatus = CameraStatus.HIDDEN
    rotation: int = 0
    add_title: bool = True
    add_timestamp: bool = True
    font_size: int = DEFAULT_FONT_SIZE
    font_color: str = DEFAULT_FONT_COLOR
    font_outline: bool = True

    @classmethod
    def provisioned_default(cls, identifier: str) -> "CameraConfig":
        """Default configuration for a device seen for the first time."""
        return cls(identifier=identifier, title=default_title(identifier))

    @property
    def font_rgb(self) -> Tuple[int, int, int]:
        return parse_hex_color(self.font_color)

    @property
    def has_overlay(self) -> bool:
        return self.add_title or self.add_timestamp

    def apply_changes(self, changes: dict) -> None:
        """
        Merge administrative changes into this record.

        Only known fields are applied; status, rotation, font color and font
        size are validated before anything is modified.

        Raises:
            ValidationFailed: if any supplied value is invalid
        """
        validated = {}
        if changes.get("status") is not None:
            validated["status"] = CameraStatus.parse(changes["status"])
        if changes.get("rotation") is not None:
            validated["rotation"] = parse_rotation(changes["rotation"])
        if changes.get("font_color") is not None:
            parse_hex_color(changes["font_color"])
            validated["font_color"] = str(changes["font_color"]).strip()
        if changes.get("font_size") is not None:
            try:
                font_size = int(changes["font_size"])
            except (TypeError, ValueError):
                raise ValidationFailed(f"Invalid font size {changes['font_size']!r}")
            if font_size <= 0:
                raise ValidationFailed("Font size must be positive")
            validated["font_size"] = font_size
        for name in ("location", "title"):
            if changes.get(name) is not None:
                validated[name] = str(changes[name])
        for name in ("add_title", "add_timestamp", "font_outline"):
            if changes.get(name) is not None:
                validated[name] = bool(changes[name])

        for name, value in validated.items():
            setattr(self, name, value)
