"""
Gamepass record model and normalization.
"""

import math
from typing import Any, Iterable, List, Mapping, Optional

from pydantic import BaseModel, Field


# Upstream field aliases, most preferred first
ID_FIELDS = ("assetId", "id", "gamePassId")
NAME_FIELDS = ("name", "title", "displayName")
PRICE_FIELD = "price"


class GamePass(BaseModel):
    """A gamepass as served to clients."""

    id: int
    name: str
    price: int = Field(default=0, ge=0)


def _coerce_int(value: Any) -> Optional[int]:
    """Coerce numeric-like values to int, or None when impossible."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        if not math.isfinite(number):
            return None
        return int(number)
    return None


def _pick_id(raw: Mapping[str, Any]) -> Optional[int]:
    for field in ID_FIELDS:
        value = _coerce_int(raw.get(field))
        if value is not None:
            return value
    return None


def _name_text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value if value.strip() else None
    # Numbers become text, other non-strings are skipped
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not value or not math.isfinite(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _pick_name(raw: Mapping[str, Any], record_id: int) -> str:
    for field in NAME_FIELDS:
        name = _name_text(raw.get(field))
        if name is not None:
            return name
    return f"Gamepass {record_id}"


def _pick_price(raw: Mapping[str, Any]) -> int:
    """Whole Robux only: fractional prices truncate toward zero (9.99 -> 9)."""
    price = _coerce_int(raw.get(PRICE_FIELD))
    if price is None or price < 0:
        return 0
    return price


def normalize_record(raw: Any) -> Optional[GamePass]:
    """Normalize one upstream record.

    Returns None for anything without a usable identifier; such records are
    dropped rather than served with a null id.
    """
    if not isinstance(raw, Mapping):
        return None

    record_id = _pick_id(raw)
    if record_id is None:
        return None

    return GamePass(id=record_id, name=_pick_name(raw, record_id), price=_pick_price(raw))


def normalize_records(raw_records: Iterable[Any]) -> List[GamePass]:
    """Normalize a collection of upstream records, preserving order."""
    normalized = []
    for raw in raw_records:
        record = normalize_record(raw)
        if record is not None:
            normalized.append(record)
    return normalized
