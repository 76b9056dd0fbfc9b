"""
Envelope Crypto — AES-GCM encryption/decryption of variable values.

Wire format of an encrypted value::

    envbee:enc:v1:<base64( nonce 12B | ciphertext nB | GCM tag 16B )>

Values without the prefix are plain and pass through untouched.

Security Note:
    Never log plaintext or ciphertext values.
    Nonces are random 96-bit; collision probability negligible under normal usage.
"""
import os
import base64
import binascii
import logging
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .exceptions import DecryptionError

logger = logging.getLogger("envbee.sdk")

ENC_PREFIX = "envbee:enc:v1:"
NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16  # GCM tag
MIN_ENVELOPE_SIZE = NONCE_SIZE + TAG_SIZE


def is_encrypted(value: str) -> bool:
    """Return True if value carries the encrypted envelope prefix."""
    return value.startswith(ENC_PREFIX)


# ---------------------------------------------------------------------------
# Envelope parsing
# ---------------------------------------------------------------------------

def _unpack(value: str) -> tuple[bytes, bytes]:
    """Split an envelope into (nonce, ciphertext+tag).

    Raises:
        DecryptionError: If the payload is not valid base64 or too short.
    """
    encoded = value[len(ENC_PREFIX):]
    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as err:
        raise DecryptionError(
            "Decryption failed. Encrypted value is not valid base64."
        ) from err
    if len(raw) < MIN_ENVELOPE_SIZE:
        raise DecryptionError(
            f"Decryption failed. Encrypted value too short: {len(raw)} bytes "
            f"(minimum {MIN_ENVELOPE_SIZE})"
        )
    return raw[:NONCE_SIZE], raw[NONCE_SIZE:]


# ---------------------------------------------------------------------------
# Encrypt / decrypt
# ---------------------------------------------------------------------------

def encrypt(plaintext: str, key: bytes) -> str:
    """Encrypt a text value into an envelope.

    Args:
        plaintext: Value to encrypt.
        key: Normalized 16, 24 or 32-byte AES key.

    Returns:
        Prefixed, base64-encoded envelope.
    """
    cipher = AESGCM(key)
    nonce = os.urandom(NONCE_SIZE)
    # AESGCM appends the tag: nonce + ciphertext + tag
    ct = cipher.encrypt(nonce, plaintext.encode("utf-8"), None)
    return ENC_PREFIX + base64.b64encode(nonce + ct).decode("ascii")


def decrypt(value: str, key: Optional[bytes]) -> str:
    """Decrypt an envelope, or return a plain value unchanged.

    Args:
        value: Value as returned by the service or read from cache.
        key: Normalized AES key, or None if no key is configured.

    Returns:
        Decrypted UTF-8 text, or ``value`` itself when it is not encrypted.

    Raises:
        DecryptionError: If the value is encrypted and there is no key, the
            envelope is malformed, or authentication fails.
    """
    if not is_encrypted(value):
        return value
    if not key:
        raise DecryptionError(
            "Encrypted variable received but no key configured."
        )
    nonce, ct = _unpack(value)
    try:
        plaintext = AESGCM(key).decrypt(nonce, ct, None)
    except (InvalidTag, ValueError) as err:
        logger.debug("Envelope authentication failed (%d bytes)", len(ct))
        # Generic error to prevent oracle attacks
        raise DecryptionError(
            "Decryption failed. Invalid key or corrupted data."
        ) from err
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as err:
        raise DecryptionError(
            "Decryption failed. Decrypted value is not valid UTF-8."
        ) from err
