"""
Module 01 - Schemas & Canonicalization
File: canonical.py

Purpose: One stable JSON form for commitment metadata, metadata
fingerprints and the persisted state snapshot.

Form:
- keys sorted, no whitespace, UTF-8 kept as-is
- null members of objects omitted
- datetimes in UTC as ISO-8601 with a Z suffix
- enums by value, bytes as 0x-hex, pydantic models by their JSON dump

Anything without an obvious single form (NaN, non-string keys, sets,
arbitrary objects) is refused rather than guessed at.
"""

import json
import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel

from .errors import CanonicalizationException


CANONICAL_JSON_SEPARATORS: tuple[str, str] = (",", ":")


def ensure_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken to be UTC; aware ones are converted."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_datetime_canonical(dt: datetime) -> str:
    """e.g. "2026-01-27T21:35:00Z"; fractional seconds only when present."""
    dt = ensure_utc(dt)
    fmt = "%Y-%m-%dT%H:%M:%S.%fZ" if dt.microsecond else "%Y-%m-%dT%H:%M:%SZ"
    return dt.strftime(fmt)


def _refuse(message: str, path: str, **details: Any) -> CanonicalizationException:
    return CanonicalizationException(message=message, details={"path": path, **details})


def _canonical_mapping(mapping: dict, path: str) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, item in mapping.items():
        if not isinstance(key, str):
            raise _refuse(
                f"Object keys must be strings, got {type(key).__name__}",
                path,
                key=repr(key),
            )
        if item is not None:
            out[key] = canonicalize_value(item, f"{path}.{key}" if path else key)
    return out


def canonicalize_value(value: Any, path: str = "") -> Any:
    """
    Reduce `value` to plain JSON types in canonical form.

    Raises:
        CanonicalizationException: For non-finite floats, non-string keys,
            or a type with no canonical form. `details["path"]` locates it.
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise _refuse(f"Non-finite float value encountered: {value}", path, value=str(value))
        return value
    if isinstance(value, datetime):
        return format_datetime_canonical(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, BaseModel):
        return canonicalize_value(value.model_dump(mode="json", exclude_none=True), path)
    if isinstance(value, dict):
        return _canonical_mapping(value, path)
    if isinstance(value, (list, tuple)):
        return [canonicalize_value(v, f"{path}[{i}]") for i, v in enumerate(value)]
    raise _refuse(
        f"Cannot canonicalize value of type {type(value).__name__}",
        path,
        type=type(value).__name__,
    )


def dumps_canonical(obj: Any) -> str:
    """
    Canonical JSON text for `obj`.

    Example:
        >>> dumps_canonical({"b": 2, "a": None, "c": b"\\x01"})
        '{"b":2,"c":"0x01"}'
    """
    return json.dumps(
        canonicalize_value(obj),
        sort_keys=True,
        separators=CANONICAL_JSON_SEPARATORS,
        ensure_ascii=False,
    )


def loads_canonical(json_str: str) -> Any:
    """Inverse of dumps_canonical up to type (datetimes come back as strings)."""
    return json.loads(json_str)


def canonical_equals(obj1: Any, obj2: Any) -> bool:
    try:
        return dumps_canonical(obj1) == dumps_canonical(obj2)
    except CanonicalizationException:
        return False
