"""Envbee SDK — Secure variables retrieval for the envbee API.

Requests are signed with HMAC-SHA256. Encrypted values (``envbee:enc:v1:``)
are decrypted with AES-GCM using the configured key. When the API cannot be
reached, the last value seen for a variable is read from a local cache.

Security Note (Threat Model):
    The cache stores values exactly as the API returned them, so encrypted
    variables are never written to disk in plaintext. Decrypted values exist
    in process memory while in use.
"""

from .version import __version__
from .client import EnvbeeClient
from .cache import CacheStore, FileCache, MemoryCache
from .config import EnvbeeConfig, resolve_config
from .crypto import ENC_PREFIX, decrypt, encrypt, is_encrypted
from .exceptions import (
    EnvbeeError,
    ConfigurationError,
    RequestError,
    RequestTimeoutError,
    DecryptionError,
    TypeConversionError,
)
from .models import Metadata, VariablesPage
from .secret import Secret, normalize_key
from .signing import authorization_header, sign
from .transport import HttpTransport, Response, Transport

__all__ = [
    "__version__",
    "EnvbeeClient",
    "CacheStore",
    "FileCache",
    "MemoryCache",
    "EnvbeeConfig",
    "resolve_config",
    "ENC_PREFIX",
    "decrypt",
    "encrypt",
    "is_encrypted",
    "EnvbeeError",
    "ConfigurationError",
    "RequestError",
    "RequestTimeoutError",
    "DecryptionError",
    "TypeConversionError",
    "Metadata",
    "VariablesPage",
    "Secret",
    "normalize_key",
    "authorization_header",
    "sign",
    "HttpTransport",
    "Response",
    "Transport",
]
