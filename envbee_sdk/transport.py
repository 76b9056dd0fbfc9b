"""
HTTP Transport — single-attempt GET requests over aiohttp.

The transport owns one ``aiohttp.ClientSession``, created lazily inside the
running event loop, with a fixed total timeout. It does not retry.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

import aiohttp

from .exceptions import RequestError, RequestTimeoutError

logger = logging.getLogger("envbee.sdk")


@dataclass(frozen=True)
class Response:
    """Status code and raw body of an HTTP response."""

    status: int
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@runtime_checkable
class Transport(Protocol):
    """Anything that can perform a GET and hand back a Response."""

    async def get(self, url: str, headers: dict[str, str]) -> Response:
        ...

    async def close(self) -> None:
        ...


class HttpTransport:
    """aiohttp-based transport.

    Args:
        timeout: Total request timeout in seconds.
        session: Optional externally managed ClientSession; it is not closed
            by ``close()``.
    """

    def __init__(
        self,
        timeout: float = 4.0,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def get(self, url: str, headers: dict[str, str]) -> Response:
        """Perform a GET request.

        Raises:
            RequestTimeoutError: If the request exceeds the timeout.
            RequestError: On connection or protocol failures.
        """
        session = self._get_session()
        try:
            async with session.get(url, headers=headers) as resp:
                body = await resp.read()
                logger.debug("GET %s -> %d", url, resp.status)
                return Response(status=resp.status, body=body)
        except asyncio.TimeoutError as err:
            raise RequestTimeoutError(f"Request to {url} timed out.") from err
        except aiohttp.ClientError as err:
            raise RequestError(f"Request to {url} failed: {err}") from err

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()
