"""
Gamepass domain package.

- models: the normalized GamePass record and its normalization rule.
- pager: cursor traversal of the primary endpoint with fallback.
- resolver: validation, cache, and deduplication around the pager.
"""

from .models import GamePass, normalize_record, normalize_records
from .pager import GamepassPager
from .resolver import GamepassResolver

__all__ = [
    "GamePass",
    "normalize_record",
    "normalize_records",
    "GamepassPager",
    "GamepassResolver",
]
