"""
Async HTTP client shared by every CDN session and version resolver.
"""

import asyncio
import logging
from typing import Any
from urllib.parse import unquote, urlsplit

import aiohttp

from use_cdn import __version__
from use_cdn.exceptions import NetworkError

log = logging.getLogger(__name__)

REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})


class CDNClient:
    """
    Thin wrapper over an ``aiohttp.ClientSession`` that turns transport failures
    and unexpected statuses into ``NetworkError``.

    No retries are performed: a failed request fails the resolution that
    issued it.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        max_connections: int = 16,
        timeout: aiohttp.ClientTimeout | None = None,
    ):
        """
        Initializes the client.

        Args:
            session: An existing session to use. The client does not close
            sessions it did not create.
            max_connections: Size of the connection pool of an owned session.
            timeout: Timeout of an owned session.
        """
        self._session = session
        self._owns_session = session is None
        self.max_connections = max_connections
        self.timeout = timeout or aiohttp.ClientTimeout(
            total=60, connect=15, sock_read=30
        )

    async def _get_session(self) -> aiohttp.ClientSession:
        """Ensures an active aiohttp session is available."""
        if self._session is None or (self._owns_session and self._session.closed):
            connector = aiohttp.TCPConnector(
                limit=self.max_connections,
                ttl_dns_cache=300,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers={"User-Agent": f"use-cdn/{__version__}"},
                timeout=self.timeout,
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Closes the underlying session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            log.debug("HTTP session closed.")

    async def __aenter__(self) -> "CDNClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def get_bytes(self, url: str) -> bytes:
        """Fetches the body of ``url``, following redirects."""
        session = await self._get_session()
        try:
            async with session.get(url) as response:
                _raise_for_status(url, response)
                return await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"GET {url} failed: {e}") from e

    async def get_json(self, url: str) -> Any:
        """Fetches and decodes a JSON document."""
        session = await self._get_session()
        try:
            async with session.get(
                url, headers={"Accept": "application/json"}
            ) as response:
                _raise_for_status(url, response)
                return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"GET {url} failed: {e}") from e
        except ValueError as e:
            raise NetworkError(f"GET {url} did not return valid JSON: {e}") from e

    async def get_redirect(self, url: str) -> tuple[int, str | None]:
        """
        Requests ``url`` without following redirects.

        Returns:
            The response status and the ``Location`` header, if any. Statuses
            in the 4xx and 5xx ranges raise ``NetworkError`` instead.
        """
        session = await self._get_session()
        try:
            async with session.get(url, allow_redirects=False) as response:
                _raise_for_status(url, response)
                return response.status, response.headers.get("Location")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"GET {url} failed: {e}") from e


def _raise_for_status(url: str, response: aiohttp.ClientResponse) -> None:
    if response.status >= 400:
        reason = f"{response.status} {response.reason or ''}".rstrip()
        raise NetworkError(f"GET {url} failed with status {reason}")


def location_path(location: str) -> str:
    """Returns the path part of a ``Location`` header, which may be a full URL."""
    return unquote(urlsplit(location).path)


def normalize_base_url(url: str) -> str:
    """Makes sure a base URL ends with a path separator."""
    return url if url.endswith("/") else url + "/"
