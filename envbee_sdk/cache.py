"""
Variable Cache — last-known raw values used when the API is unreachable.

Values are stored exactly as the service returned them, so encrypted
variables stay encrypted at rest and are decrypted again on every read.
"""
import os
import logging
import tempfile
import threading
from pathlib import Path
from typing import Optional, Protocol, Union, runtime_checkable

import orjson

logger = logging.getLogger("envbee.sdk")

CACHE_FILENAME = "variables.json"

# one lock per cache file, shared by every FileCache pointing at it
_PATH_LOCKS: dict[Path, threading.Lock] = {}
_PATH_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = path.resolve()
    with _PATH_LOCKS_GUARD:
        return _PATH_LOCKS.setdefault(key, threading.Lock())


@runtime_checkable
class CacheStore(Protocol):
    """Key -> last known raw value store."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryCache:
    """Process-local cache backed by a dict."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data


def default_cache_dir() -> Path:
    """Base cache directory: $XDG_CACHE_HOME/envbee or ~/.cache/envbee."""
    base = os.environ.get("XDG_CACHE_HOME")
    root = Path(base) if base else Path.home() / ".cache"
    return root / "envbee"


class FileCache:
    """JSON-file cache, one document per API key.

    Location: ``<cache_dir>/<api_key>/cache/variables.json``.

    I/O failures are logged and never raised: a failed read behaves as a
    miss, a failed write leaves the previous document in place.
    """

    def __init__(
        self,
        api_key: str,
        cache_dir: Union[str, Path, None] = None,
    ) -> None:
        base = Path(cache_dir) if cache_dir else default_cache_dir()
        self._dir = base / api_key / "cache"
        self._path = self._dir / CACHE_FILENAME
        self._lock = _lock_for(self._path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        data = orjson.loads(self._path.read_bytes())
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected cache document in {self._path}")
        return data

    def _dump(self, data: dict[str, str]) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._dir, suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as fp:
                fp.write(orjson.dumps(data))
            os.replace(tmp, self._path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> Optional[str]:
        try:
            with self._lock:
                value = self._load().get(key)
        except (OSError, ValueError) as err:
            logger.error("Failed to read cache %s: %s", self._path, err)
            return None
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            with self._lock:
                try:
                    data = self._load()
                except ValueError as err:
                    logger.warning(
                        "Discarding unreadable cache %s: %s", self._path, err
                    )
                    data = {}
                data[key] = value
                self._dump(data)
        except OSError as err:
            logger.error("Failed to write cache %s: %s", self._path, err)
