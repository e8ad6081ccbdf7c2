"""
A resolver that performs no resolution.
"""

from .base import BaseVersionResolver


class NullVersionResolver(BaseVersionResolver):
    """
    Passthrough resolver, registered under the name ``null``. Useful for CDNs
    whose URLs are immutable per version and have no notion of tags.
    """

    async def fetch_version(self, package: str, version_or_tag: str) -> str:
        self.logger.debug(f"resolving {package}, {version_or_tag}")
        return version_or_tag
