"""
Mock Roblox inventory server with pagination and fault injection.
"""

from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from shared.logging import get_logger


@dataclass
class InjectedFault:
    """A canned failure returned instead of the next real response."""
    status_code: int
    retry_after: Optional[str] = None
    body: Optional[str] = None


class MockRobloxServer:
    """Serves the primary inventory route and the legacy games route."""

    def __init__(self, port: int = 8090):
        self.port = port
        self.logger = get_logger("mock.roblox")
        self.app = FastAPI(title="Mock Roblox", version="1.0.0")

        # user id -> owned gamepasses in upstream (raw) shape
        self.inventory: Dict[str, List[Dict[str, Any]]] = {}
        self.legacy_inventory: Dict[str, List[Dict[str, Any]]] = {}
        self.faults: Deque[InjectedFault] = deque()
        self.outage: Optional[InjectedFault] = None
        self.outage_after: int = 0
        self.requests: List[Dict[str, Any]] = []

        self._create_default_inventory()
        self._setup_routes()

    def _create_default_inventory(self):
        """Create sample users."""
        self.inventory["123"] = [{"assetId": 55, "name": "VIP", "price": 100}]
        self.inventory["456"] = [
            {"assetId": 1000 + i, "name": f"Pass {i}", "price": i * 10}
            for i in range(25)
        ]
        self.legacy_inventory["789"] = [{"id": 77, "title": "Legacy Pass"}]

    def fail_next(self, status_code: int, times: int = 1, retry_after: Optional[str] = None,
                  body: Optional[str] = None):
        """Queue ``times`` failures ahead of the next real responses."""
        for _ in range(times):
            self.faults.append(InjectedFault(status_code, retry_after, body))

    def fail_after(self, requests: int, status_code: int):
        """Answer every request after the first ``requests`` with ``status_code``."""
        self.outage_after = requests
        self.outage = InjectedFault(status_code)

    def _take_fault(self):
        if self.outage is not None and len(self.requests) > self.outage_after:
            fault = self.outage
        elif self.faults:
            fault = self.faults.popleft()
        else:
            return None
        headers = {"Retry-After": fault.retry_after} if fault.retry_after is not None else {}
        if fault.body is not None:
            return PlainTextResponse(fault.body, status_code=fault.status_code, headers=headers)
        return JSONResponse(
            status_code=fault.status_code,
            content={"errors": [{"code": 0, "message": "Injected fault"}]},
            headers=headers,
        )

    def _record(self, request: Request):
        self.requests.append({"path": request.url.path, "params": dict(request.query_params)})

    def _setup_routes(self):
        """Set up mock routes."""

        @self.app.get("/v1/users/{user_id}/assets/GamePass")
        async def owned_gamepasses(
            user_id: str,
            request: Request,
            limit: int = Query(default=10),
            cursor: Optional[str] = Query(default=None),
        ):
            self._record(request)
            fault = self._take_fault()
            if fault is not None:
                return fault

            items = self.inventory.get(user_id, [])
            offset = int(cursor) if cursor and cursor.isdigit() else 0
            page = items[offset:offset + limit]
            next_offset = offset + limit
            next_cursor = str(next_offset) if next_offset < len(items) else None
            return {"previousPageCursor": cursor, "nextPageCursor": next_cursor, "data": page}

        @self.app.get("/v1/users/{user_id}/inventory/asset-type/{asset_type}")
        async def legacy_inventory(user_id: str, asset_type: int, request: Request):
            self._record(request)
            fault = self._take_fault()
            if fault is not None:
                return fault

            items = self.legacy_inventory.get(user_id)
            if items is None:
                return JSONResponse(status_code=404, content={"errors": [{"code": 1, "message": "User not found"}]})
            return {"data": items, "nextPageCursor": None}


def create_app():
    """Create mock Roblox application."""
    server = MockRobloxServer()
    return server.app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=8090)
