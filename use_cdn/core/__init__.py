"""
Core application engine.

``UseCDN`` owns the cache and the per-name sessions and resolvers, and fans
out the resolution of a whole configuration. ``get_file_list`` reads the
result back synchronously.
"""

from .file_list import get_file_list
from .use_cdn import UseCDN

__all__ = ["UseCDN", "get_file_list"]
