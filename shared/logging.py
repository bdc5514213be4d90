"""
Shared logging configuration for the gamepass proxy.

Correlation fields live in structlog's context variables: ``request_id`` is
bound by the HTTP middleware for the lifetime of a request, ``user_id`` by the
resolver for the lifetime of a lookup. Tasks spawned inside a lookup copy the
context at creation, so a shared traversal logs under the user that started it.
"""

import sys
import logging
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import structlog
from structlog.contextvars import (
    bind_contextvars,
    bound_contextvars,
    clear_contextvars,
    merge_contextvars,
)


def configure_logging(service_name: str, log_level: str = "info") -> None:
    """Configure structured JSON logging for a service."""

    def add_service(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            add_service,
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )


def set_request_id(request_id: Optional[str] = None) -> str:
    """Bind the inbound request id, generating one when the client sent none."""
    if not request_id:
        request_id = str(uuid.uuid4())
    bind_contextvars(request_id=request_id)
    return request_id


@contextmanager
def lookup_context(user_id: str) -> Iterator[None]:
    """Tag every log line emitted during a gamepass lookup with ``user_id``."""
    with bound_contextvars(user_id=user_id):
        yield


def clear_context() -> None:
    """Drop all correlation fields bound for the current request."""
    clear_contextvars()


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
