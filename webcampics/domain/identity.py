"""
Device Identity
===============

Pure helpers for device identifiers as presented by cameras (MAC addresses
in colon, hyphen or plain form, or arbitrary tokens).

- normalize_for_comparison(): equivalence form used to match identifiers
- sanitize_for_storage(): filesystem-safe token used for directory names
- looks_like_mac(): MAC-shape check used for default titles
"""
import re

from webcampics.domain.exceptions import InvalidIdentifier

MAX_STORAGE_TOKEN_LENGTH = 64

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9_-]")
_STORAGE_TOKEN_RE = re.compile(r"[A-Za-z0-9_-]+")
_MAC_RE = re.compile(r"[0-9A-Fa-f]{2}([:-]?)[0-9A-Fa-f]{2}(?:\1[0-9A-Fa-f]{2}){4}")


def normalize_for_comparison(identifier: str) -> str:
    """Uppercase and strip ':', '-' and spaces. Equal results mean the same device."""
    return identifier.upper().replace(":", "").replace("-", "").replace(" ", "")


def sanitize_for_storage(identifier: str) -> str:
    """
    Convert an identifier into a token safe to use as a directory name.

    ':' becomes '-', then anything outside [A-Za-z0-9_-] becomes '_'.

    Raises:
        InvalidIdentifier: empty input, a result longer than
            MAX_STORAGE_TOKEN_LENGTH, or a result with no letters or digits
    """
    if not identifier:
        raise InvalidIdentifier("Device identifier is empty")

    token = _UNSAFE_CHARS_RE.sub("_", identifier.replace(":", "-"))

    if len(token) > MAX_STORAGE_TOKEN_LENGTH:
        raise InvalidIdentifier(
            f"Device identifier longer than {MAX_STORAGE_TOKEN_LENGTH} characters"
        )
    if not token.strip("_-"):
        raise InvalidIdentifier(f"Device identifier {identifier!r} has no usable characters")

    return token


def is_storage_token(value: str) -> bool:
    """True if value could have been produced by sanitize_for_storage()."""
    return (
        bool(_STORAGE_TOKEN_RE.fullmatch(value))
        and len(value) <= MAX_STORAGE_TOKEN_LENGTH
        and bool(value.strip("_-"))
    )


def looks_like_mac(identifier: str) -> bool:
    """Six 2-hex-digit groups, unseparated or uniformly separated by ':' or '-'."""
    return bool(_MAC_RE.fullmatch(identifier))
