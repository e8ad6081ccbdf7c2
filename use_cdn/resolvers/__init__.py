"""
Version Resolution Layer.

A resolver turns a version or tag into a concrete version for one registry or
CDN protocol. Resolvers are selected by name from ``RESOLVER_FACTORIES``.
"""

from .base import BaseVersionResolver
from .npm import NpmVersionResolver
from .null import NullVersionResolver

DEFAULT_RESOLVER = "npm"

RESOLVER_FACTORIES: dict[str, type[BaseVersionResolver]] = {
    "npm": NpmVersionResolver,
    "null": NullVersionResolver,
}

__all__ = [
    "BaseVersionResolver",
    "DEFAULT_RESOLVER",
    "NpmVersionResolver",
    "NullVersionResolver",
    "RESOLVER_FACTORIES",
]
