"""
Storage Layer.

This package handles all data persistence: the on-disk cache of package files
and the loading of the configuration file.
"""

from .cache import SyncReadableCache, WritableCache
from .config_loader import ConfigLoader

__all__ = ["ConfigLoader", "SyncReadableCache", "WritableCache"]
