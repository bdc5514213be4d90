"""
TTL result cache for normalized gamepass lists.
"""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, TYPE_CHECKING

from shared.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..domain.models import GamePass


@dataclass(frozen=True)
class CacheEntry:
    """Cached records for one key."""

    key: str
    records: Sequence["GamePass"]
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at


class ResultCache:
    """Thread-safe in-process cache with lazy TTL expiry and a size bound.

    Expired entries are dropped when read. When ``max_entries`` is exceeded,
    expired entries are purged first and then the oldest writes evicted.
    """

    def __init__(self, ttl_seconds: float = 60.0, max_entries: int = 10_000,
                 clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max(1, max_entries)
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self.logger = get_logger("gamepass.result_cache")

    def get(self, key: str) -> Optional[List["GamePass"]]:
        """Return the cached records for ``key``, or None if absent or stale."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not entry.is_fresh(now):
                del self._entries[key]
                return None
            return list(entry.records)

    def put(self, key: str, records: Sequence["GamePass"]) -> CacheEntry:
        """Store ``records`` under ``key`` with a fresh TTL, replacing any entry."""
        now = self._clock()
        entry = CacheEntry(key=key, records=tuple(records), expires_at=now + self.ttl_seconds)
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = entry
            if len(self._entries) > self.max_entries:
                self._evict(now)
        return entry

    def purge_expired(self) -> int:
        """Drop every expired entry, returning how many were removed."""
        now = self._clock()
        with self._lock:
            return self._purge_expired_locked(now)

    def stats(self) -> Dict[str, float]:
        with self._lock:
            return {
                "entries": len(self._entries),
                "max_entries": self.max_entries,
                "ttl_seconds": self.ttl_seconds,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _purge_expired_locked(self, now: float) -> int:
        expired = [key for key, entry in self._entries.items() if not entry.is_fresh(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def _evict(self, now: float) -> None:
        purged = self._purge_expired_locked(now)
        evicted = 0
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
            evicted += 1
        self.logger.debug("Cache bound enforced", purged=purged, evicted=evicted)
