"""
Auth Service
============

Validates inbound uploads under the two supported protocols and resolves
the sending device's identity.

Legacy: multipart form fields 'auth' (token), 'cam' (identifier), 'pic' (file).
Modern: token in X-Device-Token / X-Auth-Token, or 'Authorization: Bearer';
        identity in X-Device-ID.

Tokens come from a single shared pool. There is no rate limiting, lockout
or per-device revocation.
"""
import hmac
import logging
import re
from typing import Callable, FrozenSet, Mapping, Optional

from webcampics.domain.exceptions import MissingIdentity, Unauthorized
from webcampics.domain.models.upload import UploadProtocol, UploadRequest

logger = logging.getLogger(__name__)

LEGACY_TOKEN_FIELD = "auth"
LEGACY_IDENTITY_FIELD = "cam"
LEGACY_FILE_FIELD = "pic"

DEVICE_ID_HEADER = "X-Device-ID"
TIMESTAMP_HEADER = "X-Timestamp"

# Checked in order; the first present header wins
RAW_TOKEN_HEADERS = ("X-Device-Token", "X-Auth-Token")
AUTHORIZATION_HEADER = "Authorization"

_BEARER_RE = re.compile(r"Bearer\s+(.+)", re.IGNORECASE)


def _cgi_names(name: str):
    """Header names as exposed by CGI/FastCGI front ends that forward them as variables."""
    cgi = "HTTP_" + name.upper().replace("-", "_")
    return (cgi, "REDIRECT_" + cgi)


def get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    """
    Get a header value case-insensitively.

    Also accepts the CGI-style variants ('HTTP_AUTHORIZATION',
    'REDIRECT_HTTP_AUTHORIZATION') that some front-end server
    configurations forward instead of the plain header.
    """
    wanted = [name.lower()] + [n.lower() for n in _cgi_names(name)]
    lowered = {str(k).lower(): v for k, v in headers.items()}
    for key in wanted:
        value = lowered.get(key)
        if value:
            return value.strip()
    return None


class AuthService:
    """
    Authentication gateway for uploads and admin calls.

    Args:
        token_source: Callable returning the current set of valid tokens
    """

    def __init__(self, token_source: Callable[[], FrozenSet[str]]):
        self._token_source = token_source

    def is_valid_token(self, token: Optional[str]) -> bool:
        if not token:
            return False
        candidate = token.encode("utf-8")
        # Compare against every token so timing does not reveal a match
        matched = False
        for valid in self._token_source():
            if hmac.compare_digest(candidate, valid.encode("utf-8")):
                matched = True
        return matched

    @staticmethod
    def is_legacy_request(request: UploadRequest) -> bool:
        """Legacy submissions carry all three of 'auth', 'cam' and 'pic'."""
        form = request.form
        return (
            form is not None
            and LEGACY_TOKEN_FIELD in form
            and LEGACY_IDENTITY_FIELD in form
            and request.has_file_field
        )

    @staticmethod
    def bearer_token(headers: Mapping[str, str]) -> Optional[str]:
        """Extract the token from the custom token headers or the Authorization header."""
        for name in RAW_TOKEN_HEADERS:
            value = get_header(headers, name)
            if value:
                return value

        authorization = get_header(headers, AUTHORIZATION_HEADER)
        if authorization:
            match = _BEARER_RE.match(authorization)
            if match:
                return match.group(1).strip()
        return None

    def require_bearer(self, headers: Mapping[str, str]) -> None:
        """
        Raises:
            Unauthorized: if no valid token is presented
        """
        if not self.is_valid_token(self.bearer_token(headers)):
            raise Unauthorized()

    def authenticate(self, request: UploadRequest) -> UploadProtocol:
        """
        Check the request's token, legacy protocol first.

        Returns:
            The protocol the request was accepted under

        Raises:
            Unauthorized: if the token is missing or not in the pool
        """
        if self.is_legacy_request(request):
            if not self.is_valid_token(request.form.get(LEGACY_TOKEN_FIELD)):
                logger.warning("Rejected legacy upload: invalid token")
                raise Unauthorized()
            return UploadProtocol.LEGACY

        if not self.is_valid_token(self.bearer_token(request.headers)):
            logger.warning("Rejected upload: missing or invalid bearer token")
            raise Unauthorized()
        return UploadProtocol.MODERN

    @staticmethod
    def resolve_identity(request: UploadRequest, protocol: UploadProtocol) -> str:
        """
        Device identity for an authenticated request.

        Raises:
            MissingIdentity: if the identity field/header is absent or blank
        """
        if protocol is UploadProtocol.LEGACY:
            identity = request.form.get(LEGACY_IDENTITY_FIELD) or ""
            if not identity.strip():
                raise MissingIdentity("Missing 'cam' field")
            return identity
        if protocol is UploadProtocol.MODERN:
            identity = get_header(request.headers, DEVICE_ID_HEADER)
            if not identity:
                raise MissingIdentity(f"Missing {DEVICE_ID_HEADER} header")
            return identity
        raise AssertionError(f"Unhandled protocol {protocol}")

    @staticmethod
    def capture_time(request: UploadRequest) -> Optional[str]:
        """Optional device-supplied capture time (both protocols)."""
        return get_header(request.headers, TIMESTAMP_HEADER)
