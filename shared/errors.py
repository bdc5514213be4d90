"""
Shared error handling for the gamepass proxy.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error payload returned to clients."""

    error: str


class ProxyException(Exception):
    """Base exception for proxy services."""

    status_code = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(error=self.message)


class ValidationError(ProxyException):
    """Rejected inbound input, raised before any upstream call."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class UpstreamError(ProxyException):
    """Base class for failures talking to the upstream API."""

    status_code = 502

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None,
                 status: Optional[int] = None):
        super().__init__(code, message, details)
        self.status = status


class TransientUpstreamError(UpstreamError):
    """Timeout, network failure, or 5xx/429/503 that outlived every retry."""

    def __init__(self, message: str = "Upstream temporarily unavailable",
                 details: Optional[Dict[str, Any]] = None, status: Optional[int] = None):
        super().__init__("TRANSIENT_UPSTREAM_ERROR", message, details, status)


class TerminalUpstreamError(UpstreamError):
    """Non-retryable upstream rejection, such as a 4xx for an issued cursor."""

    def __init__(self, message: str = "Upstream rejected the request",
                 details: Optional[Dict[str, Any]] = None, status: Optional[int] = None):
        super().__init__("TERMINAL_UPSTREAM_ERROR", message, details, status)
