"""
Resilient HTTP transport for the inventory API.
"""

import asyncio
from typing import Any, Awaitable, Callable, Mapping, Optional

import httpx

from shared.config import BaseConfig
from shared.errors import TransientUpstreamError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from shared.retry import RATE_LIMIT_STATUSES, RetryConfig, calculate_delay, parse_retry_after


# Browser-like headers; bare clients get blocked more readily
DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
    "Accept": "application/json, text/plain, */*",
}

JSON_CONTENT_TYPES = ("application/json", "text/plain")

Sleep = Callable[[float], Awaitable[Any]]


class ResilientTransport:
    """Single logical GET with per-attempt timeout, retries and backoff.

    Outcomes by status:

    - 2xx: parsed body; unparseable bodies come back as ``{"raw": text}``.
    - non-429 4xx: not retried; parsed body, or ``{"error": "HTTP <status>",
      "body": text}`` when the body is not JSON.
    - 429/503: retried after ``Retry-After`` when present, else backoff.
    - other 5xx, timeouts, network errors: retried with backoff.

    When every attempt fails a ``TransientUpstreamError`` describing the last
    failure is raised.
    """

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        retry_config: Optional[RetryConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Sleep = asyncio.sleep,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()
        self.logger = get_logger("gamepass.transport")
        self.metrics = metrics
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers=DEFAULT_HEADERS, follow_redirects=True, timeout=timeout
        )
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: BaseConfig, **kwargs) -> "ResilientTransport":
        """Build a transport from service configuration."""
        retry_config = RetryConfig(
            max_retries=config.max_retries,
            base_delay=config.retry_base_delay_ms / 1000.0,
        )
        return cls(timeout=config.request_timeout_ms / 1000.0, retry_config=retry_config, **kwargs)

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def fetch_once(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
        *,
        max_retries: Optional[int] = None,
    ) -> Any:
        """Fetch ``url`` and return its parsed body."""
        retries = max(0, self.retry_config.max_retries if max_retries is None else max_retries)
        request_headers = {**DEFAULT_HEADERS, **(headers or {})}
        last_error: Optional[TransientUpstreamError] = None

        for attempt in range(retries + 1):
            try:
                response = await asyncio.wait_for(
                    self._client.get(url, params=params, headers=request_headers),
                    timeout=self.timeout,
                )
            except (asyncio.TimeoutError, httpx.TimeoutException):
                self._record("timeout")
                last_error = TransientUpstreamError(
                    f"Timed out after {self.timeout}s",
                    details={"url": url, "attempt": attempt},
                )
                delay = calculate_delay(attempt, self.retry_config)
            except httpx.HTTPError as exc:
                self._record("network_error")
                last_error = TransientUpstreamError(
                    f"Network error: {exc.__class__.__name__}: {exc}",
                    details={"url": url, "attempt": attempt},
                )
                delay = calculate_delay(attempt, self.retry_config)
            else:
                status = response.status_code

                if status in RATE_LIMIT_STATUSES:
                    self._record("rate_limited")
                    hint = parse_retry_after(response.headers.get("retry-after"))
                    delay = hint if hint is not None else calculate_delay(attempt, self.retry_config)
                    last_error = TransientUpstreamError(
                        f"HTTP {status}",
                        details={"url": url, "attempt": attempt, "retry_after": hint},
                        status=status,
                    )
                elif status >= 500:
                    self._record("server_error")
                    delay = calculate_delay(attempt, self.retry_config)
                    last_error = TransientUpstreamError(
                        f"HTTP {status}",
                        details={"url": url, "attempt": attempt},
                        status=status,
                    )
                elif status >= 400:
                    self._record("client_error")
                    return self._parse_client_error(url, response)
                else:
                    self._record("success")
                    return self._parse_success(url, response)

            if attempt >= retries:
                break

            self.logger.warning(
                "Upstream attempt failed, waiting before next attempt",
                url=url,
                attempt=attempt + 1,
                max_attempts=retries + 1,
                delay=delay,
                error=last_error.message,
            )
            await self._sleep(delay)

        self.logger.error(
            "All upstream attempts exhausted",
            url=url,
            max_attempts=retries + 1,
            error=last_error.message if last_error else None,
        )
        raise last_error or TransientUpstreamError("Failed to fetch after retries", details={"url": url})

    def _parse_success(self, url: str, response: httpx.Response) -> Any:
        content_type = response.headers.get("content-type", "")
        try:
            return response.json()
        except ValueError:
            # Wrapped rather than dropped so contract changes stay visible
            self._record("malformed")
            self.logger.warning(
                "Upstream returned a body that is not JSON",
                url=url,
                status_code=response.status_code,
                content_type=content_type,
                declared_json=any(kind in content_type for kind in JSON_CONTENT_TYPES),
            )
            return {"raw": response.text}

    def _parse_client_error(self, url: str, response: httpx.Response) -> Any:
        self.logger.info("Upstream rejected request", url=url, status_code=response.status_code)
        try:
            return response.json()
        except ValueError:
            return {"error": f"HTTP {response.status_code}", "body": response.text}

    def _record(self, outcome: str) -> None:
        if self.metrics is not None:
            self.metrics.increment_counter("upstream_requests_total", outcome=outcome)
