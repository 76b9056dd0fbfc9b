"""
Client Configuration — credentials and validated settings.

Each setting comes from an explicit parameter or, when that is not given,
from the environment:
    ENVBEE_API_KEY    = <api key>
    ENVBEE_API_SECRET = <api secret>
    ENVBEE_ENC_KEY    = <encryption key, hashed with SHA-256>
    ENVBEE_API_URL    = <base url>            (default https://api.envbee.dev)
    ENVBEE_CACHE_DIR  = <cache directory>     (optional)

Security Note:
    Never log key material. Only log the base URL and whether a key is set.
"""
import os
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError
from .secret import Secret, normalize_key

logger = logging.getLogger("envbee.sdk")

ENV_API_KEY = "ENVBEE_API_KEY"
ENV_API_SECRET = "ENVBEE_API_SECRET"
ENV_ENC_KEY = "ENVBEE_ENC_KEY"
ENV_API_URL = "ENVBEE_API_URL"
ENV_CACHE_DIR = "ENVBEE_CACHE_DIR"

DEFAULT_BASE_URL = "https://api.envbee.dev"
DEFAULT_TIMEOUT = 4.0

SecretInput = Union[Secret, str, bytes, None]


class EnvbeeConfig(BaseModel):
    """Validated client configuration."""

    api_key: str = Field(min_length=1)
    api_secret: bytes = Field(min_length=1, repr=False)
    enc_key: Optional[bytes] = Field(default=None, repr=False)
    base_url: str = Field(default=DEFAULT_BASE_URL)
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    cache_dir: Optional[Path] = None

    model_config = {"frozen": True}

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and drop any trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL: {v}")
        return v.rstrip("/")

    @field_validator("enc_key")
    @classmethod
    def validate_enc_key(cls, v: Optional[bytes]) -> Optional[bytes]:
        """Ensure a normalized AES key length."""
        if v is not None and len(v) not in (16, 24, 32):
            raise ValueError(
                f"Encryption key must be 16, 24 or 32 bytes, got {len(v)}"
            )
        return v


def _secret_or_env(value: SecretInput, env_name: str) -> Secret:
    secret = Secret.coerce(value)
    if secret.empty:
        secret = Secret.coerce(os.environ.get(env_name) or None)
    return secret


def resolve_config(
    api_key: Optional[str] = None,
    api_secret: SecretInput = None,
    enc_key: SecretInput = None,
    base_url: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
    cache_dir: Union[str, Path, None] = None,
) -> EnvbeeConfig:
    """Merge explicit parameters with environment fallbacks.

    Explicit parameters always take priority over the environment.

    Returns:
        Populated EnvbeeConfig instance.

    Raises:
        ConfigurationError: If the API key or secret is missing, or a value
            fails validation.
    """
    api_key = api_key or os.environ.get(ENV_API_KEY)
    if not api_key:
        raise ConfigurationError(
            f"API key must be provided or {ENV_API_KEY} must be set."
        )
    secret = _secret_or_env(api_secret, ENV_API_SECRET)
    if secret.empty:
        raise ConfigurationError(
            f"API secret must be provided or {ENV_API_SECRET} must be set."
        )
    key = normalize_key(_secret_or_env(enc_key, ENV_ENC_KEY))
    if key is None:
        logger.debug("No encryption key provided")
    base_url = base_url or os.environ.get(ENV_API_URL) or DEFAULT_BASE_URL
    cache_dir = cache_dir or os.environ.get(ENV_CACHE_DIR) or None
    try:
        return EnvbeeConfig(
            api_key=api_key,
            api_secret=secret.data,
            enc_key=key,
            base_url=base_url,
            timeout=timeout,
            cache_dir=cache_dir,
        )
    except ValidationError as err:
        raise ConfigurationError(str(err)) from err
