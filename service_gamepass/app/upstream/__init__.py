"""
Upstream package for the Gamepass Service.

Contains the resilient HTTP transport and the decoders for the response
envelopes the inventory API is known to return. Keep this layer free of
caching and request-scoped state.
"""

from .transport import ResilientTransport, DEFAULT_HEADERS
from .envelopes import PagedEnvelope, BareEnvelope, EmptyEnvelope, decode_envelope

__all__ = [
    "ResilientTransport",
    "DEFAULT_HEADERS",
    "PagedEnvelope",
    "BareEnvelope",
    "EmptyEnvelope",
    "decode_envelope",
]
