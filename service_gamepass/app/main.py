"""
Gamepass proxy service.
"""

import time
from typing import Dict, Optional

from fastapi.responses import JSONResponse

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import UpstreamError, ValidationError
from .domain.resolver import GamepassResolver

BANNER = "du81 gamepass proxy"
FETCH_FAILED_MESSAGE = "Failed to fetch gamepasses"


class GamepassService(BaseService):
    """Serves the gamepasses a Roblox user owns."""

    def __init__(self, config: Optional[ServiceConfig] = None,
                 resolver: Optional[GamepassResolver] = None):
        super().__init__("gamepass", 3000, config=config)
        self.resolver = resolver or GamepassResolver.from_config(self.config, metrics=self.metrics)
        self._setup_gamepass_routes()

    def _setup_gamepass_routes(self):
        """Set up gamepass routes."""

        @self.app.get("/")
        async def root():
            """Service banner."""
            return {"status": BANNER, "timestamp": int(time.time() * 1000)}

        @self.app.get("/gamepasses/{user_id}")
        async def get_gamepasses(user_id: str):
            """List the gamepasses owned by a user."""
            try:
                passes = await self.resolver.get_gamepasses(user_id)
            except ValidationError as exc:
                return JSONResponse(status_code=400, content=exc.to_response().model_dump())
            except UpstreamError as exc:
                self.logger.error(
                    "Error fetching gamepasses",
                    user_id=user_id,
                    code=exc.code,
                    error=exc.message,
                    upstream_status=exc.status,
                    details=exc.details,
                )
                self.metrics.record_error(exc.code)
                return JSONResponse(status_code=500, content={"error": FETCH_FAILED_MESSAGE})
            except Exception as exc:
                self.logger.error("Unexpected error fetching gamepasses", user_id=user_id,
                                  error=str(exc), exc_info=True)
                self.metrics.record_error("INTERNAL_ERROR")
                return JSONResponse(status_code=500, content={"error": FETCH_FAILED_MESSAGE})

            return {"gamePasses": [p.model_dump() for p in passes]}

    async def _check_dependencies(self) -> Dict[str, str]:
        # Health polls also sweep out expired entries
        purged = self.resolver.cache.purge_expired()
        stats = self.resolver.cache.stats()
        if purged:
            self.logger.debug("Expired cache entries purged", purged=purged)
        return {
            "result_cache": f"{stats['entries']}/{stats['max_entries']} entries, ttl {stats['ttl_seconds']:g}s",
            "in_flight": f"{len(self.resolver.coordinator)} traversals",
        }

    async def _shutdown(self) -> None:
        await self.resolver.close()


def create_app():
    """Create FastAPI application."""
    service = GamepassService()
    return service.app


if __name__ == "__main__":
    service = GamepassService()
    service.run()
