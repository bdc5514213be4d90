"""
Gamepass proxy service package.

Serves the gamepasses a user owns, read from the Roblox inventory API:
- Pagination: follows continuation cursors until the upstream is exhausted
- Resilience: per-attempt timeouts, retries honoring Retry-After
- Caching: short-lived per-user results
- Deduplication: one upstream traversal per user at a time

Structure:
- app.main: FastAPI app, routes, and service wiring.
- app.upstream: HTTP transport and response envelope decoding.
- app.domain: Records, pager, and the resolver that ties everything together.
- app.caching: TTL result cache.
- app.coordination: In-flight traversal registry.
"""
