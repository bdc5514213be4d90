"""
Gamepass caching package.

Short-lived, in-process result cache keyed by user id. Entries expire on
read; nothing survives a restart.
"""

from .result_cache import ResultCache, CacheEntry

__all__ = ["ResultCache", "CacheEntry"]
