"""
The orchestrator that fetches every configured file into the on-disk cache.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any

from use_cdn.api.client import CDNClient
from use_cdn.exceptions import (
    ConfigurationError,
    UninitializedError,
    UnsupportedCDNError,
    UnsupportedResolverError,
)
from use_cdn.models.config import ResolverConfig, UseCDNConfig
from use_cdn.resolvers import (
    DEFAULT_RESOLVER,
    RESOLVER_FACTORIES,
    BaseVersionResolver,
)
from use_cdn.sessions import (
    DEFAULT_CDN,
    NATIVE,
    NATIVE_RESOLVERS,
    SESSION_FACTORIES,
    BaseSession,
)
from use_cdn.storage.cache import WritableCache
from use_cdn.utils.overrides import OverrideTable

log = logging.getLogger(__name__)


class UseCDN:
    """
    Owns the cache and the sessions and resolvers built from the
    configuration, and drives the resolution of every configured file.

    ``init()`` must be awaited before anything else.
    """

    def __init__(
        self,
        config: UseCDNConfig | dict[str, Any] | list[Any],
        logger: Any = None,
        *,
        cache_root: Path | str | None = None,
        overrides: OverrideTable | None = None,
        client: CDNClient | None = None,
    ):
        """
        Args:
            config: The configuration, either validated or raw. A bare list
            of package entries is accepted.
            logger: Logger collaborator exposing ``debug``. Defaults to the
            ``use_cdn`` logger.
            cache_root: The cache directory. Defaults to ``./.use-cdn``.
            overrides: Per-package version overrides.
            client: The HTTP client to use. One is created, and closed by
            ``close()``, if not given.
        """
        self.config = UseCDNConfig.from_raw(config)
        self.logger = logger if logger is not None else logging.getLogger("use_cdn")
        self.cache = WritableCache(cache_root)
        self.overrides = overrides if overrides is not None else OverrideTable()
        self._owns_client = client is None
        self.client = client if client is not None else CDNClient()
        self.sessions: dict[str, BaseSession] = {}
        self.resolvers: dict[str, BaseVersionResolver] = {}
        self.initialized = False

    async def init(self) -> None:
        """Initializes the cache. Must be awaited before any other method."""
        await self.cache.init()
        self.initialized = True

    async def close(self) -> None:
        if self._owns_client:
            await self.client.close()

    async def __aenter__(self) -> "UseCDN":
        await self.init()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def assert_initialized(self) -> None:
        if not self.initialized:
            raise UninitializedError("the object has not been initialized")

    async def resolve(self) -> list[Path]:
        """
        Resolves every file of every configured package into the cache.

        All resolutions run concurrently. The first failure is raised; the
        other resolutions are not cancelled and whatever they cache is kept.

        Returns:
            The cached paths, in the order packages and files are declared.
        """
        self.assert_initialized()
        pending = []
        for spec in self.config.packages:
            session = self.get_session(spec.cdn)
            version = self.overrides.apply(spec.package, spec.version)
            if version != spec.version:
                self.logger.debug(
                    f"overriding {spec.package}@{spec.version} with {version}"
                )
            for file in spec.files:
                pending.append(
                    session.resolve(spec.package, spec.resolve_as, version, file)
                )

        log.debug(f"Resolving {len(pending)} file(s)")
        return list(await asyncio.gather(*pending))

    def get_session(self, cdn: str | None = None) -> BaseSession:
        """
        Returns the session of a CDN, creating it on first use. Repeated calls
        with the same name return the same session.

        Raises:
            UnsupportedCDNError: If the CDN is not supported.
            UnsupportedResolverError: If the CDN's resolver is unknown.
            ConfigurationError: If the CDN's resolver is named after a CDN.
        """
        self.assert_initialized()
        cdn = cdn or self.config.cdn or DEFAULT_CDN
        session = self.sessions.get(cdn)
        if session is None:
            factory = SESSION_FACTORIES.get(cdn)
            if factory is None:
                raise UnsupportedCDNError(f"unsupported cdn: {cdn}")

            cdn_config = self.config.cdns.get(cdn)
            resolver_name = cdn_config.resolver if cdn_config else None
            if resolver_name is None:
                resolver = (
                    self._get_native_resolver(cdn)
                    if cdn in NATIVE_RESOLVERS
                    else self.get_version_resolver()
                )
            elif resolver_name == NATIVE:
                resolver = self._get_native_resolver(cdn)
            elif resolver_name in SESSION_FACTORIES:
                raise ConfigurationError(
                    "you may not use a session name as a resolver name, to\n"
                    'specify the resolver native to a session, use "native"'
                )
            else:
                resolver = self.get_version_resolver(resolver_name)

            session = self.sessions[cdn] = factory(
                cdn_config, self.logger, self.cache, resolver, self.client
            )
            log.debug(
                f"Created {type(session).__name__} for {cdn} with "
                f"{type(resolver).__name__}"
            )
        return session

    def get_version_resolver(self, name: str | None = None) -> BaseVersionResolver:
        """
        Returns the resolver registered under ``name``, creating it on first
        use. The name of a CDN with a native resolver designates that
        resolver.

        Raises:
            UnsupportedResolverError: If no resolver has that name.
        """
        self.assert_initialized()
        name = name or DEFAULT_RESOLVER
        resolver = self.resolvers.get(name)
        if resolver is None:
            factory = RESOLVER_FACTORIES.get(name)
            if factory is not None:
                resolver = self.resolvers[name] = factory(
                    self.config.resolvers.get(name),
                    self.logger,
                    self.cache,
                    self.client,
                )
            elif name in NATIVE_RESOLVERS:
                resolver = self._get_native_resolver(name)
            else:
                raise UnsupportedResolverError(f"unsupported resolver: {name}")
        return resolver

    def _get_native_resolver(self, cdn: str) -> BaseVersionResolver:
        factory = NATIVE_RESOLVERS.get(cdn)
        if factory is None:
            raise UnsupportedResolverError(f"cdn {cdn} has no native resolver")

        resolver = self.resolvers.get(cdn)
        if resolver is None:
            # Native resolvers share their CDN's base URL.
            cdn_config = self.config.cdns.get(cdn)
            resolver_config = self.config.resolvers.get(cdn)
            if cdn_config is not None and cdn_config.url:
                resolver_config = ResolverConfig(url=cdn_config.url)
            resolver = self.resolvers[cdn] = factory(
                resolver_config, self.logger, self.cache, self.client
            )
        return resolver
