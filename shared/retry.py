"""
Retry policy helpers for resilient upstream calls.
"""

import math
import random
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

# Statuses that carry a server-supplied wait hint
RATE_LIMIT_STATUSES = frozenset({429, 503})


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(self,
                 max_retries: int = 3,
                 base_delay: float = 0.4,
                 max_delay: Optional[float] = None,
                 exponential_base: float = 2.0,
                 jitter: bool = False):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """Exponential delay in seconds after the zero-based ``attempt`` failed."""
    delay = config.base_delay * (config.exponential_base ** attempt)

    if config.max_delay is not None:
        delay = min(delay, config.max_delay)

    if config.jitter:
        jitter_amount = delay * 0.1  # 10% jitter
        delay += random.uniform(-jitter_amount, jitter_amount)

    return max(0.0, delay)


def parse_retry_after(value: Optional[str], now: Optional[datetime] = None) -> Optional[float]:
    """Parse a Retry-After header into seconds.

    Accepts delta-seconds or an HTTP-date. Returns None when the header is
    missing or unusable so the caller falls back to exponential backoff.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None

    try:
        seconds = float(value)
    except ValueError:
        seconds = None

    if seconds is not None:
        if not math.isfinite(seconds) or seconds < 0:
            return None
        return seconds

    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when is None:
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return max(0.0, (when - now).total_seconds())
