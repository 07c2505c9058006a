import base64
import hashlib
import hmac
import json
import logging
import time
from typing import Any

from fastapi import Header

from backend.config import AUTH_TOKEN_TTL_SECONDS, DEVICE_API_KEY, SIGNING_KEY
from backend.errors import AuthError, PermissionDeniedError

logger = logging.getLogger(__name__)


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64url_decode(value: str) -> bytes:
    padding = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(value + padding)


def _sign(payload_b64: str) -> str:
    digest = hmac.new(
        SIGNING_KEY.encode("utf-8"),
        payload_b64.encode("ascii"),
        hashlib.sha256,
    ).digest()
    return _b64url_encode(digest)


def verify_device_key(api_key: str | None) -> bool:
    expected = DEVICE_API_KEY.strip()
    candidate = (api_key or "").strip()
    if not expected:
        return False
    return hmac.compare_digest(candidate, expected)


def issue_session_token(user_id: str, *, role: str, email: str) -> tuple[str, dict[str, Any]]:
    now = int(time.time())
    exp = now + AUTH_TOKEN_TTL_SECONDS
    payload = {
        "sub": user_id.strip(),
        "role": role,
        "email": email,
        "iat": now,
        "exp": exp,
    }
    payload_json = json.dumps(payload, separators=(",", ":"), sort_keys=True)
    payload_b64 = _b64url_encode(payload_json.encode("utf-8"))
    token = f"{payload_b64}.{_sign(payload_b64)}"
    return token, payload


def decode_session_token(token: str) -> dict[str, Any] | None:
    if not token or "." not in token:
        return None

    payload_b64, signature = token.split(".", 1)
    expected = _sign(payload_b64)
    if not hmac.compare_digest(signature, expected):
        return None

    try:
        payload_raw = _b64url_decode(payload_b64).decode("utf-8")
        payload = json.loads(payload_raw)
    except (ValueError, UnicodeDecodeError):
        return None

    if not isinstance(payload, dict):
        return None

    sub = payload.get("sub")
    exp = payload.get("exp")
    if not isinstance(sub, str) or not sub.strip():
        return None
    if payload.get("role") not in {"admin", "teacher"}:
        return None
    if not isinstance(exp, int):
        return None
    if exp < int(time.time()):
        return None

    return payload


def _session_from_header(authorization: str | None) -> dict[str, Any]:
    if not authorization:
        raise AuthError("Missing bearer token.")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise AuthError("Invalid authorization scheme.")

    payload = decode_session_token(token.strip())
    if not payload:
        raise AuthError("Invalid or expired session token.")

    return payload


def require_session(authorization: str | None = Header(default=None)) -> dict[str, Any]:
    return _session_from_header(authorization)


def optional_session(authorization: str | None = Header(default=None)) -> dict[str, Any] | None:
    if not authorization:
        return None
    return _session_from_header(authorization)


def require_admin(authorization: str | None = Header(default=None)) -> dict[str, Any]:
    session = _session_from_header(authorization)
    if session.get("role") != "admin":
        raise PermissionDeniedError("Admin access required.")
    return session


def require_device_key(x_api_key: str | None = Header(default=None)) -> None:
    if not verify_device_key(x_api_key):
        logger.warning("Rejected device request with missing or invalid x-api-key")
        raise AuthError("Unauthorized")


def require_device_or_session(
    x_api_key: str | None = Header(default=None),
    authorization: str | None = Header(default=None),
) -> dict[str, Any] | None:
    """Scanner calls carry x-api-key, dashboard calls carry a bearer token."""
    if x_api_key is not None:
        require_device_key(x_api_key)
        return None
    return _session_from_header(authorization)
