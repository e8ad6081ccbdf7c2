"""
CDN Session Layer.

Sessions tie one CDN's URL conventions to a version resolver and the cache.
They are selected by name from ``SESSION_FACTORIES``; ``NATIVE_RESOLVERS``
associates a CDN with the resolver implementing its own resolution protocol.
"""

from use_cdn.resolvers.base import BaseVersionResolver

from .base import BaseSession
from .cdnjs import CdnjsSession
from .unpkg import UnpkgSession, UnpkgVersionResolver

DEFAULT_CDN = "unpkg"
NATIVE = "native"

SESSION_FACTORIES: dict[str, type[BaseSession]] = {
    "unpkg": UnpkgSession,
    "cdnjs": CdnjsSession,
}

NATIVE_RESOLVERS: dict[str, type[BaseVersionResolver]] = {
    "unpkg": UnpkgVersionResolver,
}

__all__ = [
    "BaseSession",
    "CdnjsSession",
    "DEFAULT_CDN",
    "NATIVE",
    "NATIVE_RESOLVERS",
    "SESSION_FACTORIES",
    "UnpkgSession",
    "UnpkgVersionResolver",
]
