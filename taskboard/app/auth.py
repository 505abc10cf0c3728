import base64
import hashlib
import hmac
import json
import re
import secrets
import time
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import Request

from taskboard.app.config import Settings, get_settings

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
BEARER_PREFIX = "Bearer "

PBKDF2_ITERATIONS = 260_000


@dataclass
class AuthSettings:
    session_secret: str
    session_ttl_seconds: int
    password_min_length: int


def load_auth_settings(settings: Optional[Settings] = None) -> AuthSettings:
    settings = settings or get_settings()
    session_secret = (settings.session_secret or "").strip()
    if not session_secret:
        raise RuntimeError("AUTH misconfigured: SESSION_SECRET is required")
    return AuthSettings(
        session_secret=session_secret,
        session_ttl_seconds=settings.session_ttl_seconds,
        password_min_length=settings.password_min_length,
    )


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("utf-8").rstrip("=")


def _b64url_decode(s: str) -> bytes:
    pad = "=" * (-len(s) % 4)
    return base64.urlsafe_b64decode((s + pad).encode("utf-8"))


def sign_token(payload: dict[str, Any], secret: str) -> str:
    data = json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    sig = hmac.new(secret.encode("utf-8"), data, hashlib.sha256).digest()
    return f"{_b64url_encode(data)}.{_b64url_encode(sig)}"


def verify_token(token: str, secret: str, now: Optional[float] = None) -> Optional[dict[str, Any]]:
    """Return the payload of a well-signed, unexpired token, else None."""
    try:
        data_b64, sig_b64 = token.split(".", 1)
        data = _b64url_decode(data_b64)
        sig = _b64url_decode(sig_b64)
        expected = hmac.new(secret.encode("utf-8"), data, hashlib.sha256).digest()
        if not hmac.compare_digest(sig, expected):
            return None
        payload = json.loads(data.decode("utf-8"))
    except ValueError:
        return None
    if not isinstance(payload, dict) or not payload.get("sub"):
        return None
    exp = payload.get("exp")
    if not isinstance(exp, int) or (now if now is not None else time.time()) > exp:
        return None
    return payload


def issue_token(user_id: str, ttl_seconds: int, secret: str, now: Optional[float] = None) -> str:
    issued = int(now if now is not None else time.time())
    payload = {
        "sub": user_id,
        "iat": issued,
        "exp": issued + ttl_seconds,
        "v": 1,
    }
    return sign_token(payload, secret)


def hash_password(password: str, salt: Optional[bytes] = None) -> str:
    salt = salt or secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${_b64url_encode(salt)}${_b64url_encode(digest)}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt_b64, digest_b64 = encoded.split("$", 3)
        rounds = int(iterations)
        salt = _b64url_decode(salt_b64)
        expected = _b64url_decode(digest_b64)
    except ValueError:
        return False
    if algorithm != "pbkdf2_sha256":
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, rounds)
    return hmac.compare_digest(digest, expected)


def validate_email(email: Any) -> bool:
    return isinstance(email, str) and bool(EMAIL_RE.match(email))


def validate_password(password: Any, min_length: int) -> bool:
    return isinstance(password, str) and len(password) >= min_length


def bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization") or ""
    if not header.startswith(BEARER_PREFIX):
        return None
    return header[len(BEARER_PREFIX):].strip() or None
