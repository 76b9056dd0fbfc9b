"""
Request signing — HMAC-SHA256 over a canonical request string.

Canonical string (no separators)::

    {timestamp_ms}{METHOD}{path?query}{md5_hex("{}")}

The service expects the MD5 of the literal ``{}`` as body digest even for
GET requests without a body.

Security Note:
    Never log the secret or the computed signature.
"""
import hashlib
import hmac
import time
from typing import Optional

AUTH_SCHEME = "HMAC"
BODY_DIGEST = hashlib.md5(b"{}").hexdigest()


def timestamp_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def canonical_string(method: str, path: str, timestamp: int) -> bytes:
    """Build the canonical bytes fed to the HMAC."""
    return "".join(
        (str(timestamp), method.upper(), path, BODY_DIGEST)
    ).encode("utf-8")


def sign(method: str, path: str, timestamp: int, secret: bytes) -> str:
    """Sign a request.

    Args:
        method: HTTP method, case-insensitive.
        path: Request path including any query string.
        timestamp: Milliseconds since the epoch.
        secret: Raw API secret bytes.

    Returns:
        Lowercase hex HMAC-SHA256 signature.
    """
    mac = hmac.new(secret, canonical_string(method, path, timestamp), hashlib.sha256)
    return mac.hexdigest()


def authorization_header(
    method: str,
    path: str,
    secret: bytes,
    timestamp: Optional[int] = None,
) -> str:
    """Return the ``Authorization`` header value: ``HMAC {ts}:{signature}``."""
    if timestamp is None:
        timestamp = timestamp_ms()
    signature = sign(method, path, timestamp, secret)
    return f"{AUTH_SCHEME} {timestamp}:{signature}"
