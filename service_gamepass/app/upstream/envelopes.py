"""
Decoding of the response envelopes returned by the inventory API.

The upstream answers either with an object carrying a ``data`` collection and
a ``nextPageCursor``, or (older routes) with a bare collection. Anything else,
including error bodies and raw-text wrappers, decodes to ``EmptyEnvelope``.
"""

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Union


@dataclass(frozen=True)
class PagedEnvelope:
    """``{"data": [...], "nextPageCursor": "..."}``"""

    records: List[Any]
    next_cursor: Optional[str] = None


@dataclass(frozen=True)
class BareEnvelope:
    """A bare collection of records, never paginated."""

    records: List[Any]

    @property
    def next_cursor(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class EmptyEnvelope:
    """A body that carries no records."""

    body: Any = None
    records: List[Any] = field(default_factory=list)

    @property
    def next_cursor(self) -> Optional[str]:
        return None

    @property
    def error(self) -> Optional[str]:
        if isinstance(self.body, Mapping):
            error = self.body.get("error") or self.body.get("errors")
            return str(error) if error else None
        return None


Envelope = Union[PagedEnvelope, BareEnvelope, EmptyEnvelope]


def _cursor(body: Mapping[str, Any]) -> Optional[str]:
    cursor = body.get("nextPageCursor")
    if isinstance(cursor, str) and cursor:
        return cursor
    return None


def decode_envelope(body: Any) -> Envelope:
    """Decode a parsed response body into one of the known envelopes."""
    if isinstance(body, list):
        return BareEnvelope(records=list(body))

    if isinstance(body, Mapping) and isinstance(body.get("data"), list):
        return PagedEnvelope(records=list(body["data"]), next_cursor=_cursor(body))

    return EmptyEnvelope(body=body)
