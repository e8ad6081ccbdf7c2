"""
Base class for CDN sessions.

In this package a "session" is the series of requests made to a single CDN to
resolve files. Two CDNs use two sessions; all resolutions for one CDN go
through the same session.
"""

import logging
from pathlib import Path
from typing import Any, ClassVar

from use_cdn.api.client import CDNClient, normalize_base_url
from use_cdn.models.config import CDNConfig, FileSpec, expand_file
from use_cdn.resolvers.base import BaseVersionResolver
from use_cdn.storage.cache import WritableCache

log = logging.getLogger(__name__)


class BaseSession:
    """Fetches the files of one CDN into the cache."""

    DEFAULT_URL: ClassVar[str]

    def __init__(
        self,
        config: CDNConfig | None,
        logger: Any,
        cache: WritableCache,
        resolver: BaseVersionResolver,
        client: CDNClient,
    ):
        """
        Args:
            config: The CDN configuration, if any. Its ``url`` overrides the
            CDN's default base URL.
            logger: Logger collaborator; only ``debug`` is used.
            cache: The cache to read from and write to.
            resolver: The resolver that turns tags into versions.
            client: The HTTP client used to fetch files.
        """
        self.config = config or CDNConfig()
        self.base = normalize_base_url(self.config.url or self.DEFAULT_URL)
        self.logger = logger
        self.cache = cache
        self.resolver = resolver
        self.client = client

    async def resolve(
        self,
        package: str,
        resolve_as: str | None,
        version_or_tag: str,
        file: FileSpec,
    ) -> Path:
        """
        Resolves a file of a package to its path in the cache, fetching it
        over the network if it is not cached yet.

        Args:
            package: The package name, as stored in the cache and on the CDN.
            resolve_as: The package name to use for version resolution, when
            the registry knows the package under another name. Defaults to
            ``package``.
            version_or_tag: A version or a tag pointing to a version.
            file: A path within the package, or a callable taking the resolved
            version and returning that path. Callables let a configuration
            follow a package whose layout changed between versions.

        Returns:
            The path of the file in the cache.
        """
        if resolve_as is None:
            resolve_as = package
        version = await self.resolve_to_version(resolve_as, version_or_tag)

        file = expand_file(file, version)

        cached = await self.cache.get_path(package, version, file)
        if cached is None:
            content = await self.fetch_file(package, version, file)
            cached = await self.cache.set(package, version, file, content)
        else:
            log.debug(f"Cache hit for {package}@{version}/{file}")

        return cached

    async def resolve_to_version(self, package: str, version_or_tag: str) -> str:
        return await self.resolver.resolve_to_version(package, version_or_tag)

    async def fetch_file(self, package: str, version: str, file: str) -> bytes:
        """
        Fetches the content of a file from the CDN. ``version`` is used
        literally: resolution must have happened already.
        """
        file_url = self.make_file_url(package, version, file)
        self.logger.debug(f"fetching {file_url}")
        return await self.client.get_bytes(file_url)

    def make_file_url(self, package: str, version: str, file: str) -> str:
        return f"{self.make_package_url(package, version)}/{file}"

    def make_package_url(self, package: str, version: str) -> str:
        return f"{self.base}{package}@{version}"
