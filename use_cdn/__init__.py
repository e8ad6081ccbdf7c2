"""
use-cdn: fetch package files from CDNs into a durable, versioned on-disk cache.
"""

__version__ = "0.1.0"
