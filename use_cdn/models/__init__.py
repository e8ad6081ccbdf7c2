"""
Data Models Layer.

This package contains the Pydantic models describing the use-cdn configuration.
"""

from .config import CDNConfig, PackageConfig, ResolverConfig, UseCDNConfig

__all__ = ["CDNConfig", "PackageConfig", "ResolverConfig", "UseCDNConfig"]
