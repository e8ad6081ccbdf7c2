"""
Resolves versions against an npm-style registry by reading the package
document (the "packument") and picking the manifest that best matches.
"""

import logging
from typing import Any

import semantic_version

from use_cdn.api.client import CDNClient, normalize_base_url
from use_cdn.exceptions import ResolutionError
from use_cdn.models.config import ResolverConfig
from use_cdn.storage.cache import WritableCache

from .base import BaseVersionResolver

log = logging.getLogger(__name__)

NPM_REGISTRY_URL = "https://registry.npmjs.org/"


class NpmVersionResolver(BaseVersionResolver):
    """Registry-manifest resolver, registered under the name ``npm``."""

    DEFAULT_URL = NPM_REGISTRY_URL

    def __init__(
        self,
        config: ResolverConfig | None,
        logger: Any,
        cache: WritableCache,
        client: CDNClient | None = None,
    ):
        super().__init__(config, logger, cache, client)
        self.base = normalize_base_url(self.config.url or self.DEFAULT_URL)

    def make_package_url(self, package: str) -> str:
        return f"{self.base}{package}"

    async def fetch_version(self, package: str, version_or_tag: str) -> str:
        package_url = self.make_package_url(package)
        self.logger.debug(f"resolving {package_url}")
        packument = await self.client.get_json(package_url)

        if not isinstance(packument, dict):
            raise ResolutionError(
                f"{package}@{version_or_tag}: the registry returned a malformed "
                f"document: {packument!r:.200}"
            )
        if packument.get("name") != package:
            raise ResolutionError(
                f"{package} resolves to a different package: {packument.get('name')}"
            )

        return pick_version(packument, version_or_tag)


def pick_version(packument: dict[str, Any], wanted: str) -> str:
    """
    Picks the version of a packument that ``wanted`` designates, following
    npm's rules: a dist-tag names its version, an exact version names itself,
    and a range prefers the ``latest`` dist-tag when it satisfies the range,
    then the highest non-deprecated, non-prerelease match.

    Raises:
        ResolutionError: If nothing in the packument matches, or a dist-tag
        names a version the packument does not list.
    """
    name = packument.get("name")
    dist_tags = packument.get("dist-tags") or {}
    versions = packument.get("versions") or {}
    if not isinstance(dist_tags, dict) or not isinstance(versions, dict):
        raise ResolutionError(f"{name}@{wanted}: malformed packument")

    wanted = wanted.strip() or "latest"
    if wanted in dist_tags:
        target = dist_tags[wanted]
        if not isinstance(target, str) or target not in versions:
            raise ResolutionError(
                f"{name}@{wanted}: dist-tag points to unknown version {target!r}"
            )
        return target
    if wanted in versions:
        return wanted

    try:
        spec = semantic_version.NpmSpec(wanted)
    except ValueError as e:
        raise ResolutionError(
            f"{name}@{wanted}: no such tag and not a valid version range"
        ) from e

    parsed: dict[semantic_version.Version, str] = {}
    for raw in versions:
        try:
            parsed[semantic_version.Version(raw)] = raw
        except ValueError:
            log.debug(f"Ignoring unparsable version {raw!r} of {name}")

    latest = dist_tags.get("latest")
    if latest in versions:
        latest_version = next((v for v, raw in parsed.items() if raw == latest), None)
        if latest_version is not None and latest_version in spec:
            return latest

    def is_deprecated(version: semantic_version.Version) -> bool:
        manifest = versions.get(parsed[version])
        return isinstance(manifest, dict) and bool(manifest.get("deprecated"))

    matching = list(spec.filter(parsed))
    for candidates in (
        [v for v in matching if not v.prerelease and not is_deprecated(v)],
        [v for v in matching if not is_deprecated(v)],
        matching,
    ):
        if candidates:
            return parsed[max(candidates)]

    raise ResolutionError(f"{name}@{wanted}: no matching version")
