"""
HTTP Layer.

This package handles all communication with CDNs and package registries.
"""

from .client import CDNClient

__all__ = ["CDNClient"]
