"""
Utility helpers shared across layers.
"""

from .overrides import OverrideTable
from .versions import is_tag

__all__ = ["OverrideTable", "is_tag"]
