"""Password hashing and compact signed token codec."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import os
import time
import uuid
from typing import Any

PBKDF2_ROUNDS = 120_000
RESERVED_CLAIMS = frozenset({"iat", "exp", "jti"})


class TokenError(ValueError):
    """Raised when a token cannot be signed or fails verification."""


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64url_decode(value: str) -> bytes:
    return base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))


def _json_segment(data: dict[str, Any]) -> str:
    return _b64url_encode(json.dumps(data, separators=(",", ":")).encode("utf-8"))


def _signature(signing_input: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()


def hash_password(password: str) -> str:
    """Hash password using PBKDF2-HMAC-SHA256 with a random per-record salt."""
    salt = os.urandom(16)
    derived = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ROUNDS)
    return f"pbkdf2_sha256${PBKDF2_ROUNDS}${_b64url_encode(salt)}${_b64url_encode(derived)}"


def verify_password(password: str, stored_hash: str) -> bool:
    """Check ``password`` against a stored PBKDF2 hash in constant time."""
    try:
        algo, rounds_raw, salt_b64, digest_b64 = stored_hash.split("$", 3)
        rounds = int(rounds_raw)
        salt = _b64url_decode(salt_b64)
        expected = _b64url_decode(digest_b64)
    except (ValueError, TypeError, AttributeError):
        return False
    if algo != "pbkdf2_sha256":
        return False

    derived = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, rounds)
    return hmac.compare_digest(derived, expected)


def sign_token(claims: dict[str, Any], secret: str, *, expires_in: int) -> str:
    """Sign ``claims`` into an HS256 token that expires ``expires_in`` seconds from now.

    ``iat``, ``exp`` and a random ``jti`` are added, so two calls with the
    same claims never produce the same token.
    """
    if not secret:
        raise TokenError("Token secret is not configured")

    now_ts = int(time.time())
    payload = {
        **claims,
        "iat": now_ts,
        "exp": now_ts + int(expires_in),
        "jti": uuid.uuid4().hex,
    }
    header_part = _json_segment({"alg": "HS256", "typ": "JWT"})
    payload_part = _json_segment(payload)
    signing_input = f"{header_part}.{payload_part}".encode("ascii")
    return f"{header_part}.{payload_part}.{_b64url_encode(_signature(signing_input, secret))}"


def verify_token(token: str, secret: str) -> dict[str, Any]:
    """Verify a token produced by :func:`sign_token` and return its claims.

    Reserved claims are stripped from the result. Raises :class:`TokenError`
    on a missing secret, malformed input, bad signature or expiry.
    """
    if not secret:
        raise TokenError("Token secret is not configured")

    parts = (token or "").split(".")
    if len(parts) != 3 or not all(parts):
        raise TokenError("Malformed token")
    header_part, payload_part, signature_part = parts

    try:
        got_sig = _b64url_decode(signature_part)
    except ValueError as exc:
        raise TokenError("Malformed token") from exc
    expected_sig = _signature(f"{header_part}.{payload_part}".encode("utf-8"), secret)
    if not hmac.compare_digest(expected_sig, got_sig):
        raise TokenError("Invalid token signature")

    try:
        payload = json.loads(_b64url_decode(payload_part).decode("utf-8"))
    except ValueError as exc:
        raise TokenError("Invalid token payload") from exc
    if not isinstance(payload, dict):
        raise TokenError("Invalid token payload")

    exp = int(payload.get("exp") or 0)
    if exp and exp <= int(time.time()):
        raise TokenError("Token expired")

    return {key: value for key, value in payload.items() if key not in RESERVED_CLAIMS}
