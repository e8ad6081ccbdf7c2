"""
Base class for version resolvers: per-process memoization of resolutions and
durable recording of tag resolutions in the cache.
"""

import asyncio
import logging
from typing import Any

from use_cdn.api.client import CDNClient
from use_cdn.models.config import ResolverConfig
from use_cdn.storage.cache import WritableCache
from use_cdn.utils.versions import is_tag

log = logging.getLogger(__name__)


class BaseVersionResolver:
    """
    Turns a version or tag into a concrete version for one registry or CDN
    protocol. Subclasses implement ``fetch_version``.
    """

    def __init__(
        self,
        config: ResolverConfig | None,
        logger: Any,
        cache: WritableCache,
        client: CDNClient | None = None,
    ):
        """
        Args:
            config: The resolver configuration, if any.
            logger: Logger collaborator; only ``debug`` is used.
            cache: The cache in which tag resolutions are recorded.
            client: The HTTP client for network resolutions.
        """
        self.config = config or ResolverConfig()
        self.logger = logger
        self.cache = cache
        self.client = client
        self._resolved: dict[tuple[str, str], asyncio.Task] = {}

    async def resolve_to_version(self, package: str, version_or_tag: str) -> str:
        """
        Resolves ``version_or_tag`` to a version of ``package``.

        A pair is fetched at most once per resolver: concurrent and later
        calls join the first resolution. A failed resolution is forgotten so
        that the next call retries it.
        """
        key = (package, version_or_tag)
        task = self._resolved.get(key)
        if task is None:
            task = asyncio.ensure_future(self._resolve(package, version_or_tag))
            self._resolved[key] = task
            task.add_done_callback(lambda t: self._forget_failure(key, t))
        return await asyncio.shield(task)

    def _forget_failure(self, key: tuple[str, str], task: asyncio.Task) -> None:
        if task.cancelled() or task.exception() is not None:
            if self._resolved.get(key) is task:
                del self._resolved[key]
                log.debug(f"Forgetting failed resolution of {key[0]}@{key[1]}")

    async def _resolve(self, package: str, version_or_tag: str) -> str:
        version = await self.fetch_version(package, version_or_tag)
        if version != version_or_tag and is_tag(version_or_tag):
            await self.cache.link(package, version, version_or_tag)
        return version

    async def fetch_version(self, package: str, version_or_tag: str) -> str:
        """
        Fetches the version that ``package`` at ``version_or_tag`` resolves to.
        Subclasses must implement this method.
        """
        raise NotImplementedError
