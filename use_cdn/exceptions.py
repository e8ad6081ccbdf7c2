"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class UseCDNError(Exception):
    """Base exception for all application-specific errors."""


class UninitializedError(UseCDNError):
    """Raised when an operation is invoked before ``init()``."""


class CacheUnreadableError(UseCDNError):
    """Raised when the cache metadata is missing or cannot be parsed."""


class UnsupportedCacheVersionError(UseCDNError):
    """Raised when the on-disk cache uses a format this build cannot handle."""


class TagNotAllowedError(UseCDNError):
    """Raised when content is about to be stored under a tag instead of a version."""


class ResolutionError(UseCDNError):
    """
    Raised when a CDN or registry answers a version resolution with something
    unexpected.
    """


class UnsupportedCDNError(UseCDNError):
    """Raised when the configuration names a CDN that is not supported."""


class UnsupportedResolverError(UseCDNError):
    """Raised when the configuration names a resolver that is not supported."""


class NetworkError(UseCDNError):
    """Raised for transport failures and unexpected HTTP statuses."""


class ConfigurationError(UseCDNError):
    """Raised for issues related to configuration loading or validation."""


class CacheMissError(UseCDNError, FileNotFoundError):
    """Raised by the read-only cache when a file is not present."""


class UnsafePathError(UseCDNError, ValueError):
    """Raised when a package, version or file would place a path outside the cache."""
