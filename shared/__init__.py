"""
Shared utilities for the gamepass proxy.

This package aggregates common building blocks consumed by services:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- retry: Backoff and Retry-After policy
- base_service: FastAPI app scaffolding (health, metrics, error handlers)

Do not import from service packages into shared/.
"""
