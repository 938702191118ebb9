"""
Lightweight typing aliases used across schemas, validators and casts.

This module contains no runtime logic and is zero-IO.

Examples:
    >>> from streamschema.core.typing import RawRecord
    >>> def field_count(raw: RawRecord) -> int:
    ...     return len(raw)
    >>> field_count({"a": 1})
    1
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

__all__ = [
    "RawRecord",
    "RowKey",
]

# Untyped record as decoded by a connector (CSV/JSON parsing happens upstream).
RawRecord = Mapping[str, Any]

# Single primary-key value, a tuple for compound keys, or a synthesized key.
RowKey = Any
