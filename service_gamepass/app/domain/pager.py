"""
Cursor traversal of the inventory API.
"""

from typing import List, Optional, Set
from urllib.parse import quote

from shared.config import BaseConfig
from shared.errors import TerminalUpstreamError, UpstreamError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from ..upstream.envelopes import EmptyEnvelope, decode_envelope
from ..upstream.transport import ResilientTransport
from .models import GamePass, normalize_records

# Roblox asset type id for game passes on the legacy inventory route
GAMEPASS_ASSET_TYPE = 9


class GamepassPager:
    """Collects every gamepass a user owns.

    The primary inventory route is paginated and followed cursor by cursor.
    If it yields nothing, the legacy games route is asked once, best-effort.
    """

    def __init__(
        self,
        transport: ResilientTransport,
        *,
        inventory_base_url: str = "https://inventory.roblox.com",
        games_base_url: str = "https://games.roblox.com",
        page_limit: int = 100,
        max_pages: int = 500,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.transport = transport
        self.inventory_base_url = inventory_base_url.rstrip("/")
        self.games_base_url = games_base_url.rstrip("/")
        self.page_limit = page_limit
        self.max_pages = max_pages
        self.metrics = metrics
        self.logger = get_logger("gamepass.pager")

    @classmethod
    def from_config(cls, config: BaseConfig, transport: ResilientTransport,
                    metrics: Optional[MetricsCollector] = None) -> "GamepassPager":
        return cls(
            transport,
            inventory_base_url=config.inventory_base_url,
            games_base_url=config.games_base_url,
            page_limit=config.max_page_limit,
            max_pages=config.max_pages,
            metrics=metrics,
        )

    def primary_url(self, user_id: str) -> str:
        return f"{self.inventory_base_url}/v1/users/{quote(user_id, safe='')}/assets/GamePass"

    def fallback_url(self, user_id: str) -> str:
        return (
            f"{self.games_base_url}/v1/users/{quote(user_id, safe='')}"
            f"/inventory/asset-type/{GAMEPASS_ASSET_TYPE}"
        )

    async def fetch_all(self, user_id: str) -> List[GamePass]:
        """Return all normalized gamepasses for ``user_id``.

        Transport failures on the primary route propagate and discard any
        pages already collected, as does an error body returned for a
        followed cursor. An error body on the first page reads as empty.
        """
        collected = await self._fetch_primary(user_id)
        if collected:
            return collected

        return await self._fetch_fallback(user_id)

    async def _fetch_primary(self, user_id: str) -> List[GamePass]:
        url = self.primary_url(user_id)
        collected: List[GamePass] = []
        seen_cursors: Set[str] = set()
        cursor: Optional[str] = None
        pages = 0

        while True:
            params = {"limit": self.page_limit}
            if cursor:
                params["cursor"] = cursor

            body = await self.transport.fetch_once(url, params=params)
            pages += 1
            self._record_page("primary")

            envelope = decode_envelope(body)
            if isinstance(envelope, EmptyEnvelope) and envelope.error:
                if cursor is not None:
                    # Pages already collected are incomplete, drop them
                    self.logger.warning("Primary route rejected a cursor", user_id=user_id,
                                        cursor=cursor, pages=pages, error=envelope.error)
                    raise TerminalUpstreamError(
                        "Pagination aborted by upstream error",
                        details={"url": url, "cursor": cursor, "error": envelope.error},
                    )
                self.logger.info("Primary route returned an error body", user_id=user_id, error=envelope.error)

            collected.extend(normalize_records(envelope.records))

            cursor = envelope.next_cursor
            if cursor is None:
                break

            if cursor in seen_cursors:
                self.logger.warning("Upstream repeated a cursor, stopping", user_id=user_id, cursor=cursor)
                break
            seen_cursors.add(cursor)

            if pages >= self.max_pages:
                self.logger.warning("Page limit reached, stopping", user_id=user_id, pages=pages)
                break

        self.logger.debug("Primary traversal finished", user_id=user_id, pages=pages, records=len(collected))
        return collected

    async def _fetch_fallback(self, user_id: str) -> List[GamePass]:
        url = self.fallback_url(user_id)
        params = {"sortOrder": "Asc", "limit": self.page_limit}

        try:
            body = await self.transport.fetch_once(url, params=params, max_retries=0)
        except UpstreamError as exc:
            self.logger.warning("Fallback route failed", user_id=user_id, error=exc.message)
            return []

        self._record_page("fallback")
        records = normalize_records(decode_envelope(body).records)
        self.logger.info("Fallback route consulted", user_id=user_id, records=len(records))
        return records

    def _record_page(self, source: str) -> None:
        if self.metrics is not None:
            self.metrics.increment_counter("upstream_pages_total", source=source)
