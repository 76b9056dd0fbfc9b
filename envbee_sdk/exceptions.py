"""
Exception hierarchy for the envbee SDK.

Fetch errors (``RequestError`` and ``RequestTimeoutError``) are recovered by
the client through the local cache. ``DecryptionError`` never is.
"""
from typing import Optional


class EnvbeeError(Exception):
    """Base exception for all envbee SDK errors."""


class ConfigurationError(EnvbeeError):
    """Missing credentials or invalid settings at construction time."""


class RequestError(EnvbeeError):
    """The envbee API could not be reached or answered with a non-200 status."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status!r}, message={str(self)!r})"


class RequestTimeoutError(RequestError, TimeoutError):
    """The request exceeded the transport timeout."""


class DecryptionError(EnvbeeError):
    """Encrypted value received without a key, or authenticated decryption failed."""


class TypeConversionError(EnvbeeError, TypeError):
    """A variable value cannot be converted into the requested type."""
