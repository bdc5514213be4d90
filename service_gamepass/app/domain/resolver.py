"""
Gamepass resolution: validation, caching and deduplication around the pager.
"""

import time
from typing import List, Optional

from shared.config import BaseConfig
from shared.errors import ValidationError
from shared.logging import get_logger, lookup_context
from shared.metrics import MetricsCollector

from ..caching.result_cache import ResultCache
from ..coordination.inflight import InFlightCoordinator
from ..upstream.transport import ResilientTransport
from .models import GamePass
from .pager import GamepassPager

CACHE_TYPE = "gamepasses"


class GamepassResolver:
    """Process-wide entry point for gamepass lookups.

    Holds the two pieces of shared state, the result cache and the in-flight
    registry. Create one per process and share it between request handlers.
    """

    def __init__(
        self,
        pager: GamepassPager,
        cache: ResultCache,
        coordinator: Optional[InFlightCoordinator] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.pager = pager
        self.cache = cache
        self.coordinator = coordinator or InFlightCoordinator(metrics=metrics)
        self.metrics = metrics
        self.logger = get_logger("gamepass.resolver")

    @classmethod
    def from_config(
        cls,
        config: BaseConfig,
        metrics: Optional[MetricsCollector] = None,
        transport: Optional[ResilientTransport] = None,
    ) -> "GamepassResolver":
        transport = transport or ResilientTransport.from_config(config, metrics=metrics)
        return cls(
            pager=GamepassPager.from_config(config, transport, metrics=metrics),
            cache=ResultCache(
                ttl_seconds=config.cache_ttl_ms / 1000.0,
                max_entries=config.cache_max_entries,
            ),
            metrics=metrics,
        )

    async def close(self) -> None:
        await self.pager.transport.aclose()

    async def get_gamepasses(self, user_id: Optional[str]) -> List[GamePass]:
        """Return the gamepasses owned by ``user_id``.

        Raises ``ValidationError`` for a blank id before any upstream call, and
        propagates upstream failures unchanged to every waiting caller.
        """
        key = (user_id or "").strip()
        if not key:
            raise ValidationError("missing userId")

        with lookup_context(key):
            cached = self.cache.get(key)
            if cached is not None:
                self._record_cache("cache_hits_total")
                return cached
            self._record_cache("cache_misses_total")

            return await self.coordinator.run_exclusive(key, self._load)

    async def _load(self, key: str) -> List[GamePass]:
        # Written through before the in-flight registration is cleared
        started = time.perf_counter()
        records = await self.pager.fetch_all(key)
        self.cache.put(key, records)

        elapsed = time.perf_counter() - started
        if self.metrics is not None:
            self.metrics.get_metric("traversal_duration_seconds").observe(elapsed)
        self.logger.info("Gamepasses fetched", count=len(records),
                         duration_ms=round(elapsed * 1000, 2))
        return records

    def _record_cache(self, metric_name: str) -> None:
        if self.metrics is not None:
            self.metrics.increment_counter(metric_name, cache_type=CACHE_TYPE)
