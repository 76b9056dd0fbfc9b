"""
Secret — key material wrapper for API secrets and encryption keys.

A ``Secret`` remembers whether it was built from text or from raw bytes:
text encryption keys are hashed down to 32 bytes, raw ones are used as-is.
The API secret is never hashed; its bytes key the request HMAC directly.

Security Note:
    Never log key material. ``repr()`` is redacted.
"""
import hashlib
from typing import Optional, Union

from .exceptions import ConfigurationError

AES_KEY_SIZES = (16, 24, 32)


class Secret:
    """Immutable secret bytes plus a marker of their origin."""

    __slots__ = ("_data", "_from_text")

    def __init__(self, data: bytes = b"", from_text: bool = False) -> None:
        if not isinstance(data, (bytes, bytearray)):
            raise ConfigurationError("Secret data must be bytes")
        self._data = bytes(data)
        self._from_text = from_text

    @classmethod
    def from_text(cls, text: str) -> "Secret":
        """Build a secret from text, stored as its UTF-8 bytes."""
        return cls(text.encode("utf-8"), from_text=True)

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray]) -> "Secret":
        """Build a secret from raw bytes."""
        return cls(data, from_text=False)

    @classmethod
    def coerce(cls, value: Union["Secret", str, bytes, bytearray, None]) -> "Secret":
        """Accept the forms a caller may pass for a secret parameter.

        ``None`` becomes the empty secret.
        """
        if value is None:
            return cls()
        if isinstance(value, Secret):
            return value
        if isinstance(value, str):
            return cls.from_text(value)
        if isinstance(value, (bytes, bytearray)):
            return cls.from_bytes(value)
        raise ConfigurationError(
            f"Unsupported secret type: {type(value).__name__}"
        )

    @property
    def data(self) -> bytes:
        return self._data

    @property
    def from_text_input(self) -> bool:
        return self._from_text

    @property
    def empty(self) -> bool:
        return not self._data

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return not self.empty

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Secret):
            return NotImplemented
        return self._data == other._data and self._from_text == other._from_text

    def __hash__(self) -> int:
        return hash((self._data, self._from_text))

    def __repr__(self) -> str:
        origin = "text" if self._from_text else "bytes"
        return f"Secret([REDACTED], origin={origin}, length={len(self._data)})"


def normalize_key(secret: Optional[Secret]) -> Optional[bytes]:
    """Turn an encryption secret into AES key bytes.

    Text secrets are reduced with SHA-256 to exactly 32 bytes. Raw secrets
    must already be 16, 24 or 32 bytes long.

    Args:
        secret: Encryption key secret, or None.

    Returns:
        Key bytes, or None when no key was given.

    Raises:
        ConfigurationError: If the normalized key length is not 16/24/32.
    """
    if secret is None or secret.empty:
        return None
    key = secret.data
    if secret.from_text_input:
        key = hashlib.sha256(key).digest()
    if len(key) not in AES_KEY_SIZES:
        raise ConfigurationError(
            f"Encryption key must be 16, 24 or 32 bytes, got {len(key)}"
        )
    return key
