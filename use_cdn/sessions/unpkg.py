"""
Session and native resolver for the unpkg CDN.
"""

from typing import Any

from use_cdn.api.client import (
    REDIRECT_STATUSES,
    CDNClient,
    location_path,
    normalize_base_url,
)
from use_cdn.exceptions import ResolutionError
from use_cdn.models.config import ResolverConfig
from use_cdn.resolvers.base import BaseVersionResolver
from use_cdn.storage.cache import WritableCache

from .base import BaseSession

UNPKG_URL = "https://unpkg.com/"


class UnpkgVersionResolver(BaseVersionResolver):
    """
    Resolves versions the way unpkg does natively: requesting
    ``<base><package>@<tag>`` answers with a redirect to
    ``/<package>@<version>/...``.
    """

    DEFAULT_URL = UNPKG_URL

    def __init__(
        self,
        config: ResolverConfig | None,
        logger: Any,
        cache: WritableCache,
        client: CDNClient | None = None,
    ):
        super().__init__(config, logger, cache, client)
        self.base = normalize_base_url(self.config.url or self.DEFAULT_URL)

    def make_package_url(self, package: str, version_or_tag: str) -> str:
        return f"{self.base}{package}@{version_or_tag}"

    async def fetch_version(self, package: str, version_or_tag: str) -> str:
        package_url = self.make_package_url(package, version_or_tag)
        self.logger.debug(f"resolving {package_url}")
        status, location = await self.client.get_redirect(package_url)

        if status not in REDIRECT_STATUSES or not location:
            raise ResolutionError(
                f"{package}@{version_or_tag} did not resolve to a redirect: "
                f"status {status}, location {location!r}"
            )

        path = location_path(location)
        actual_package, actual_version = split_package_segment(path)

        if not actual_version:
            raise ResolutionError(
                f"{package}@{version_or_tag} resolves to something without a "
                f"version: {location}"
            )
        if actual_package != package:
            raise ResolutionError(
                f"{package}@{version_or_tag} resolves to a different package: "
                f"{location}"
            )

        return actual_version


class UnpkgSession(BaseSession):
    """One session of access to the unpkg CDN."""

    DEFAULT_URL = UNPKG_URL


def split_package_segment(path: str) -> tuple[str, str]:
    """
    Splits the leading ``<package>@<version>`` segment of a URL path. Scoped
    packages span two segments. The version is empty when there is none.
    """
    parts = path.lstrip("/").split("/")
    count = 2 if parts[0].startswith("@") else 1
    segment = "/".join(parts[:count])
    package, sep, version = segment.rpartition("@")
    if not sep or not package:
        return segment, ""
    return package, version
