"""
EnvbeeClient — retrieve, authenticate and decrypt envbee variables.

Provides the public API of the SDK:
- ``get(name)`` — fetch a variable (API → cache fallback), decrypting if needed
- ``get_as(name, kind)`` — same, converted to ``str``/``int``/``float``/``Decimal``/``bool``
- ``get_variables(offset, limit)`` — paginated listing of variable descriptors

Lookup order for ``get()``: API → local cache → None.
Raw values are cached exactly as received (before decryption).

Security Note:
    Never log variable values, secrets or signatures. Only log variable
    names, status codes and the base URL.
"""
import re
import asyncio
import logging
from pathlib import Path
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, TypeVar, Union
from urllib.parse import quote, urlencode

import orjson

from .cache import CacheStore, FileCache
from .config import DEFAULT_TIMEOUT, EnvbeeConfig, SecretInput, resolve_config
from .crypto import decrypt
from .exceptions import DecryptionError, RequestError, TypeConversionError
from .models import Metadata, VariablesPage
from .signing import authorization_header
from .transport import HttpTransport, Transport
from .version import __version__

logger = logging.getLogger("envbee.sdk")

T = TypeVar("T")

CLIENT_HEADER = "x-envbee-client"
CLIENT_ID = f"python-sdk/{__version__}"

VariableValue = Union[str, int, float, bool, None]

_VALUE_PATH = "/v1/variables-values-by-name/{name}/content"
_VARIABLES_PATH = "/v1/variables"


class EnvbeeClient:
    """Client for the envbee variables API.

    Args:
        api_key: API key, or ``ENVBEE_API_KEY``.
        api_secret: API secret used for HMAC signing, or ``ENVBEE_API_SECRET``.
        enc_key: Optional encryption key, or ``ENVBEE_ENC_KEY``. Text keys are
            hashed with SHA-256; raw keys must be 16, 24 or 32 bytes.
        base_url: API endpoint, or ``ENVBEE_API_URL``.
        timeout: Transport timeout in seconds.
        cache_dir: Base directory of the default FileCache, or
            ``ENVBEE_CACHE_DIR``.
        cache: Cache store; defaults to a FileCache scoped to the API key.
        transport: HTTP transport; defaults to an aiohttp HttpTransport.
        raise_on_miss: Re-raise the fetch error when the API fails and no
            cached value exists, instead of returning None.

    Raises:
        ConfigurationError: If credentials are missing or invalid.
    """

    version = __version__

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_secret: SecretInput = None,
        enc_key: SecretInput = None,
        base_url: Optional[str] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        cache_dir: Union[str, Path, None] = None,
        cache: Optional[CacheStore] = None,
        transport: Optional[Transport] = None,
        raise_on_miss: bool = False,
    ):
        config = resolve_config(
            api_key=api_key,
            api_secret=api_secret,
            enc_key=enc_key,
            base_url=base_url,
            timeout=timeout,
            cache_dir=cache_dir,
        )
        self._setup(config, cache, transport, raise_on_miss)

    @classmethod
    def from_config(
        cls,
        config: EnvbeeConfig,
        *,
        cache: Optional[CacheStore] = None,
        transport: Optional[Transport] = None,
        raise_on_miss: bool = False,
    ) -> "EnvbeeClient":
        """Build a client from an already resolved configuration."""
        client = cls.__new__(cls)
        client._setup(config, cache, transport, raise_on_miss)
        return client

    def _setup(
        self,
        config: EnvbeeConfig,
        cache: Optional[CacheStore],
        transport: Optional[Transport],
        raise_on_miss: bool,
    ) -> None:
        self._config = config
        self._cache = cache if cache is not None else FileCache(
            config.api_key, config.cache_dir,
        )
        self._owns_transport = transport is None
        self._transport = transport if transport is not None else HttpTransport(
            timeout=config.timeout,
        )
        self._raise_on_miss = raise_on_miss
        logger.info("EnvbeeClient initialized for %s", config.base_url)

    @property
    def config(self) -> EnvbeeConfig:
        return self._config

    @property
    def base_url(self) -> str:
        return self._config.base_url

    @property
    def has_encryption_key(self) -> bool:
        return self._config.enc_key is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            await self._transport.close()

    async def __aenter__(self) -> "EnvbeeClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Request helpers
    # ------------------------------------------------------------------

    def _headers(self, path: str) -> dict[str, str]:
        return {
            "Authorization": authorization_header(
                "GET", path, self._config.api_secret,
            ),
            "x-api-key": self._config.api_key,
            CLIENT_HEADER: CLIENT_ID,
        }

    async def _send(self, path: str) -> Any:
        """Sign and send a GET request, returning the decoded JSON body.

        Raises:
            RequestError: On non-200 responses, transport failures and
                undecodable bodies.
        """
        url = f"{self._config.base_url}{path}"
        response = await self._transport.get(url, self._headers(path))
        if response.status != 200:
            raise RequestError(
                f"Request failed: {response.text}", status=response.status,
            )
        try:
            return orjson.loads(response.body)
        except orjson.JSONDecodeError as err:
            raise RequestError(
                f"Invalid JSON response from {url}: {err}", status=response.status,
            ) from err

    def _decrypt(self, value: str) -> str:
        return decrypt(value, self._config.enc_key)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get(self, name: str) -> VariableValue:
        """Fetch a variable value.

        Lookup order: API → cache → None. Values carrying the encrypted
        envelope prefix are decrypted in both cases.

        Args:
            name: Variable name.

        Returns:
            str, int, float or bool value, or None if unavailable.

        Raises:
            DecryptionError: If an encrypted value cannot be decrypted. Never
                recovered through the cache.
            RequestError: If the fetch failed, nothing is cached and the
                client was built with ``raise_on_miss=True``. Errors raised
                by a custom transport are re-raised as they are.
        """
        path = _VALUE_PATH.format(name=quote(name, safe=""))
        try:
            payload = await self._send(path)
            value = _parse_value(payload)
        except DecryptionError:
            raise
        except Exception as err:
            return await self._fallback(name, err)

        if value is not None:
            await self._cache_set(name, _cache_repr(value))
        if isinstance(value, str):
            value = self._decrypt(value)
        return value

    async def _cache_set(self, name: str, raw: str) -> None:
        # cache I/O stays off the event loop; a failed write never fails a fetch
        try:
            await asyncio.to_thread(self._cache.set, name, raw)
        except Exception as err:
            logger.error("Failed to cache variable %s: %s", name, err)

    async def _cache_get(self, name: str) -> Optional[str]:
        try:
            return await asyncio.to_thread(self._cache.get, name)
        except Exception as err:
            logger.error("Failed to read cached variable %s: %s", name, err)
            return None

    async def _fallback(self, name: str, err: Exception) -> Optional[str]:
        logger.warning(
            "Failed to fetch variable %s. Falling back to cache: %s", name, err,
        )
        cached = await self._cache_get(name)
        if cached is None:
            if self._raise_on_miss:
                raise err
            logger.warning("No cached value for variable %s", name)
            return None
        return self._decrypt(cached)

    async def get_as(self, name: str, kind: type[T]) -> Optional[T]:
        """Fetch a variable and convert it to ``kind``.

        Supported kinds: str, int, float, Decimal and bool. String values are
        parsed locale-invariantly.

        Raises:
            TypeConversionError: If the value cannot be converted.
            DecryptionError: As for ``get()``.
        """
        return convert(await self.get(name), kind)

    async def get_variables(
        self,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> VariablesPage:
        """Fetch a page of variable descriptors.

        Not cached and never decrypted; errors propagate.

        Args:
            offset: Optional page offset.
            limit: Optional page size.

        Returns:
            VariablesPage with the raw rows and their Metadata.
        """
        params = {
            k: v for k, v in (("offset", offset), ("limit", limit))
            if v is not None
        }
        path = _VARIABLES_PATH
        if params:
            path = f"{path}?{urlencode(params)}"
        payload = await self._send(path)
        if not isinstance(payload, dict):
            raise RequestError("Unexpected variables response: not an object")
        meta, data = payload.get("metadata"), payload.get("data")
        if not isinstance(meta, dict) or not isinstance(data, list):
            raise RequestError(
                "Unexpected variables response: 'metadata' must be an object "
                "and 'data' a list"
            )
        try:
            metadata = Metadata.from_response(meta)
        except (TypeError, ValueError) as err:
            raise RequestError(f"Unexpected variables metadata: {err}") from err
        return VariablesPage(data=data, metadata=metadata)


# ---------------------------------------------------------------------------
# Value handling
# ---------------------------------------------------------------------------

def _parse_value(payload: Any) -> VariableValue:
    """Extract the typed ``value`` field from a value response."""
    if not isinstance(payload, dict) or "value" not in payload:
        raise RequestError("Unexpected value response: missing 'value'")
    value = payload["value"]
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    raise RequestError(
        f"Unexpected value type in response: {type(value).__name__}"
    )


def _cache_repr(value: Union[str, int, float, bool]) -> str:
    return value if isinstance(value, str) else str(value)


# ASCII-only literals, no digit separators
_INT_RE = re.compile(r"[+-]?[0-9]+", re.ASCII)
_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)", re.ASCII)
_FLOAT_RE = re.compile(
    r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?", re.ASCII,
)


def _literal(pattern: re.Pattern, parser):
    def _parse(raw: str):
        if not pattern.fullmatch(raw):
            raise ValueError(f"invalid numeric literal: {raw!r}")
        return parser(raw)
    return _parse


def _parse_bool(raw: str) -> bool:
    text = raw.strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    raise ValueError(f"invalid boolean literal: {raw!r}")


_PARSERS = {
    int: _literal(_INT_RE, int),
    float: _literal(_FLOAT_RE, float),
    Decimal: _literal(_DECIMAL_RE, Decimal),
    bool: _parse_bool,
}


def convert(raw: VariableValue, kind: type[T]) -> Optional[T]:
    """Convert a raw variable value to ``kind``.

    Raises:
        TypeConversionError: If the value cannot be converted.
    """
    if raw is None:
        return None
    # bool is an int subclass; never hand a bool out as an int
    if isinstance(raw, kind) and not (isinstance(raw, bool) and kind is not bool):
        return raw
    parser = _PARSERS.get(kind)
    if isinstance(raw, str) and parser is not None:
        try:
            return parser(raw.strip())
        except (ValueError, InvalidOperation) as err:
            raise TypeConversionError(
                f"Value {raw!r} cannot be converted to {kind.__name__}"
            ) from err
    raise TypeConversionError(
        f"Value {raw!r} cannot be converted to {kind.__name__}"
    )
